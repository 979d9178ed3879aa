"""
src/rewrite_core/ds/catalog.py
Catálogo de Secuencias Crudas v1.4.
Enumera TODAS las palabras hasta una longitud dada, en orden shortlex,
con índices densos y estables (generación incremental).

Disposición:
    #0 -> palabra cero
    #1 -> identidad (palabra vacía)
    #2.. -> bloques por longitud 1, 2, ...

Modo no conmutativo: índice = inicio_bloque[L] + Σ op_i · stride_i
Modo conmutativo:    sólo palabras no decrecientes (multiconjuntos).
"""
import logging
from itertools import combinations_with_replacement, product
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..alphabet import OperatorAlphabet
from ..config import DEFAULT_CATALOG_PAGE
from ..errors import IndexOutOfRangeError, LengthExceededError
from ..hashing.invariants import HASH_IDENTITY, HASH_ZERO
from ..hashing.sequence import HashedSequence
from ..memory.arena import SlotArena

_logger = logging.getLogger(__name__)

ZERO_ID     = 0
IDENTITY_ID = 1


class RawSequence:
    """Entrada del catálogo: palabra + id denso + su conjugada."""
    __slots__ = ('sequence', 'raw_id', 'conjugate_hash', 'conjugate_id')

    def __init__(self, sequence: HashedSequence, raw_id: int,
                 conjugate_hash: int, conjugate_id: int = -1):
        self.sequence = sequence
        self.raw_id = raw_id
        self.conjugate_hash = conjugate_hash
        self.conjugate_id = conjugate_id

    @property
    def hash(self) -> int:
        return self.sequence.hash

    @property
    def operators(self) -> Tuple[int, ...]:
        return self.sequence.operators

    @property
    def self_adjoint(self) -> bool:
        return self.conjugate_hash == self.sequence.hash

    def __len__(self):
        return len(self.sequence)

    def __repr__(self):
        return f"<RawSequence #{self.raw_id} {self.sequence!r} conj=#{self.conjugate_id}>"


class RawSequenceCatalog:
    """
    Índice denso de palabras por longitud creciente.
    generate() sólo añade: los índices ya emitidos no cambian.
    """
    __slots__ = (
        'alphabet', 'commutative', '_entries', '_by_hash', '_by_ops',
        '_block_starts', '_strides', '_longest'
    )

    def __init__(self, alphabet: OperatorAlphabet, commutative: bool = False,
                 page_size: int = DEFAULT_CATALOG_PAGE):
        self.alphabet = alphabet
        self.commutative = commutative
        self._entries: SlotArena[RawSequence] = SlotArena("catalog", page_size)
        self._by_hash: Dict[int, int] = {}
        self._by_ops: Dict[Tuple[int, ...], int] = {}
        # _block_starts[L] = índice de la primera palabra de longitud L
        self._block_starts: List[int] = [IDENTITY_ID]
        self._strides: List[Tuple[int, ...]] = [()]
        self._longest = 0

        # 1. Palabras especiales
        self._store(RawSequence(HashedSequence.zero(), ZERO_ID, HASH_ZERO, ZERO_ID))
        self._store(RawSequence(HashedSequence.identity(), IDENTITY_ID, HASH_IDENTITY, IDENTITY_ID))

    # =========================================================================
    # GENERACIÓN
    # =========================================================================

    def generate(self, length: int) -> int:
        """
        Extiende el catálogo hasta incluir todas las palabras de longitud <= length.
        Devuelve el número de entradas nuevas.
        """
        limit = self.alphabet.longest_hashable_string()
        if length > limit:
            raise LengthExceededError(length, limit)
        if length <= self._longest:
            return 0

        added = 0
        for word_length in range(self._longest + 1, length + 1):
            added += self._generate_block(word_length)
            self._longest = word_length
        _logger.debug("Catálogo extendido a longitud %d: %d entradas (+%d).",
                      length, len(self._entries), added)
        return added

    def _generate_block(self, word_length: int) -> int:
        alphabet = self.alphabet
        radix = alphabet.num_operators
        hasher = alphabet.hasher
        start = len(self._entries)

        if self.commutative:
            words = combinations_with_replacement(range(radix), word_length)
        else:
            words = product(range(radix), repeat=word_length)
            self._strides.append(tuple(radix ** (word_length - 1 - i) for i in range(word_length)))
        self._block_starts.append(start)

        # 1. Palabras del bloque
        batch = []
        for raw_id, ops in enumerate(words, start=start):
            conj_ops = self._canonical(alphabet.conjugate_operators(ops))
            batch.append(RawSequence(HashedSequence(ops, hasher), raw_id, hasher.hash(conj_ops)))
        self._entries.alloc_batch(batch)
        for entry in batch:
            self._by_hash[entry.hash] = entry.raw_id
            if self.commutative:
                self._by_ops[entry.operators] = entry.raw_id

        # 2. Conjugadas (misma longitud: ya están todas en el bloque)
        for entry in batch:
            entry.conjugate_id = self._by_hash[entry.conjugate_hash]
        return len(batch)

    def _store(self, entry: RawSequence):
        self._entries.alloc(entry)
        self._by_hash[entry.hash] = entry.raw_id

    def _canonical(self, ops: Sequence[int]) -> Tuple[int, ...]:
        return tuple(sorted(ops)) if self.commutative else tuple(ops)

    # =========================================================================
    # CONSULTA
    # =========================================================================

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def longest_sequence(self) -> int:
        return self._longest

    def __getitem__(self, raw_id: int) -> RawSequence:
        entry = self._entries.get(raw_id)
        if entry is None:
            raise IndexOutOfRangeError(
                f"Índice {raw_id} fuera del catálogo (tamaño {len(self._entries)})."
            )
        return entry

    def __iter__(self) -> Iterator[RawSequence]:
        return iter(self._entries)

    def where(self, key: Union[int, HashedSequence, Sequence[int]]) -> Optional[RawSequence]:
        """Entrada por hash o por palabra; None si no está generada."""
        if isinstance(key, int):
            raw_id = self._by_hash.get(key)
        else:
            word = key if isinstance(key, HashedSequence) else None
            if word is not None and word.is_zero:
                return self._entries.get(ZERO_ID)
            ops = tuple(word.operators if word is not None else key)
            if len(ops) > self._longest:
                return None
            radix = self.alphabet.num_operators
            if any(op < 0 or op >= radix for op in ops):
                return None
            raw_id = self._by_hash.get(self.alphabet.hasher.hash(ops))
        if raw_id is None:
            return None
        return self._entries.get(raw_id)

    def index_of(self, word: Union[HashedSequence, Sequence[int]]) -> int:
        """Índice denso de la palabra. IndexOutOfRangeError si no está generada."""
        if isinstance(word, HashedSequence):
            if word.is_zero:
                return ZERO_ID
            ops = word.operators
        else:
            ops = tuple(word)

        word_length = len(ops)
        if word_length > self._longest:
            raise IndexOutOfRangeError(
                f"Palabra de longitud {word_length} fuera del catálogo (longitud máxima {self._longest})."
            )

        if self.commutative:
            raw_id = self._by_ops.get(ops) if word_length else IDENTITY_ID
            if raw_id is None:
                raise IndexOutOfRangeError(f"La palabra {ops} no está en forma ordenada.")
            return raw_id

        radix = self.alphabet.num_operators
        offset = 0
        for op, stride in zip(ops, self._strides[word_length]):
            if op < 0 or op >= radix:
                raise IndexOutOfRangeError(f"Operador {op} fuera del alfabeto 0..{radix - 1}.")
            offset += op * stride
        return self._block_starts[word_length] + offset

    def __repr__(self):
        kind = "conmutativo" if self.commutative else "no conmutativo"
        return f"<RawSequenceCatalog {kind} radix={self.alphabet.num_operators} size={len(self)}>"
