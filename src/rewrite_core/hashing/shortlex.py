"""
src/rewrite_core/hashing/shortlex.py
Hasher Shortlex v1.2.
Hash polinómico posicional que PRESERVA el orden (longitud, luego lexicográfico).

Ley: hash(a) < hash(b)  <=>  a <_shortlex b   (mismo radix, longitud acotada).
"""
from typing import Sequence

from .invariants import MASK_64, HASH_IDENTITY
from ..errors import ConfigurationError, LengthExceededError


class ShortlexHasher:
    """
    Calcula hash(w) = 1 + Σ (w[i] + offset) · (radix + offset)^(n-1-i).

    Cada dígito vive en offset..radix+offset-1 dentro de una base radix+offset
    (offset >= 1), de modo que la palabra más grande de longitud n queda siempre
    por debajo de la más pequeña de longitud n+1. La palabra vacía vale
    HASH_IDENTITY (1) para cualquier radix y offset.
    """
    __slots__ = ('radix', 'offset', 'base', '_longest')

    def __init__(self, radix: int, offset: int = HASH_IDENTITY):
        if radix < 1:
            raise ConfigurationError(f"El radix debe ser positivo (recibido {radix}).")
        if offset < 1:
            raise ConfigurationError(f"El offset debe ser positivo (recibido {offset}).")
        self.radix = radix
        self.offset = offset
        self.base = radix + offset
        self._longest = self._compute_longest()

    def __call__(self, word: Sequence[int]) -> int:
        return self.hash(word)

    def hash(self, word: Sequence[int]) -> int:
        """O(len(word)). Lanza LengthExceededError si la palabra no cabe en 64 bits."""
        if len(word) > self._longest:
            raise LengthExceededError(len(word), self._longest)

        # Horner: acumulamos de izquierda a derecha
        base = self.base
        radix = self.radix
        offset = self.offset
        acc = 0
        for op in word:
            if op < 0 or op >= radix:
                raise ConfigurationError(
                    f"Operador {op} fuera del alfabeto 0..{radix - 1}."
                )
            acc = acc * base + (op + offset)
        return acc + HASH_IDENTITY

    def longest_hashable_string(self) -> int:
        """Longitud máxima para la que el hash cabe en 64 bits sin signo."""
        return self._longest

    def _compute_longest(self) -> int:
        # La palabra máxima de longitud L tiene hash 1 + base^L - 1
        length = 0
        span = 1
        while HASH_IDENTITY + (span * self.base) - 1 <= MASK_64:
            span *= self.base
            length += 1
        return length

    def __eq__(self, other):
        if isinstance(other, ShortlexHasher):
            return self.radix == other.radix and self.offset == other.offset
        return NotImplemented

    def __hash__(self):
        return hash((self.radix, self.offset))

    def __repr__(self):
        return f"ShortlexHasher(radix={self.radix}, offset={self.offset})"
