"""
src/rewrite_core/memory/arena.py
Arena de Slots Paginada v1.0 (Append-Only).
Almacenamiento denso por páginas de tamaño fijo, direccionado por índice plano.
"""
import threading
from typing import Any, Dict, Generic, Iterable, Iterator, List, Optional, TypeVar

from ..config import DEFAULT_CATALOG_PAGE
from ..errors import ConfigurationError

T = TypeVar('T')


class SlotArena(Generic[T]):
    """
    Arena de sólo inserción: los índices emitidos nunca se invalidan.
    idx -> (página, desplazamiento) = divmod(idx, page_size).
    """
    __slots__ = ('_pages', '_lock', '_name', '_page_size', '_count')

    def __init__(self, name: str = "Unknown", page_size: int = DEFAULT_CATALOG_PAGE):
        if page_size < 1:
            raise ConfigurationError(f"page_size debe ser positivo (recibido {page_size}).")
        self._name = name
        self._page_size = page_size
        # Escritor único; lectores sin bloqueo
        self._lock = threading.RLock()
        self._pages: List[List[Optional[T]]] = []
        self._count = 0

    def alloc(self, item: T) -> int:
        """Asignación unitaria O(1)."""
        with self._lock:
            idx = self._count
            page, offset = divmod(idx, self._page_size)
            if page == len(self._pages):
                self._expand_memory(1)
            self._pages[page][offset] = item
            self._count += 1
            return idx

    def alloc_batch(self, items: Iterable[T]) -> List[int]:
        """
        Asignación en lote: reserva las páginas necesarias ANTES de escribir
        (1 lock en vez de N).
        """
        batch = list(items)
        with self._lock:
            # 1. Capacidad
            free_slots = len(self._pages) * self._page_size - self._count
            if free_slots < len(batch):
                self._expand_memory(len(batch) - free_slots)

            # 2. Escritura secuencial
            start = self._count
            for i, item in enumerate(batch):
                page, offset = divmod(start + i, self._page_size)
                self._pages[page][offset] = item
            self._count += len(batch)
            return list(range(start, self._count))

    def get(self, idx: int) -> Optional[T]:
        """Lectura sin bloqueo. None fuera del rango asignado."""
        if idx < 0 or idx >= self._count:
            return None
        page, offset = divmod(idx, self._page_size)
        return self._pages[page][offset]

    def _expand_memory(self, min_required: int = 1):
        # Páginas completas suficientes para min_required slots adicionales
        pages = -(-min_required // self._page_size)
        for _ in range(pages):
            self._pages.append([None] * self._page_size)

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[T]:
        count = self._count
        for idx in range(count):
            page, offset = divmod(idx, self._page_size)
            yield self._pages[page][offset]

    @property
    def page_size(self) -> int:
        return self._page_size

    def stats(self) -> Dict[str, Any]:
        """Introspección para monitoreo."""
        with self._lock:
            capacity = len(self._pages) * self._page_size
            return {
                "name": self._name,
                "pages": len(self._pages),
                "capacity": capacity,
                "active": self._count,
                "free": capacity - self._count,
            }
