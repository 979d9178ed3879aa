"""
src/rewrite_core/hashing/sequence.py
Palabra Hasheada v2.1.
Secuencia inmutable de operadores + hash shortlex precalculado.

Integra:
- Búsqueda de subcadenas (prefijo, primera ocurrencia).
- Solapamiento sufijo/prefijo (corazón de la completación).
- Signo y palabra CERO (reglas del tipo X -> -Y, X -> 0).
"""
from typing import Iterator, Optional, Sequence, Tuple, TYPE_CHECKING

from .invariants import HASH_ZERO, HASH_IDENTITY
from .shortlex import ShortlexHasher

if TYPE_CHECKING:
    from ..alphabet import OperatorAlphabet

NOT_FOUND = -1


class HashedSequence:
    """
    Palabra + hash.
    Igualdad: operadores, cero y signo. Orden: SOLO el hash (el signo no cuenta).
    """
    __slots__ = ('operators', 'hash', 'is_zero', 'negated')

    def __init__(self,
                 operators: Sequence[int] = (),
                 hasher: Optional[ShortlexHasher] = None,
                 *,
                 negated: bool = False,
                 hash_value: Optional[int] = None):
        self.operators: Tuple[int, ...] = tuple(operators)
        self.is_zero = False
        self.negated = negated

        if hash_value is not None:
            self.hash = hash_value
        elif hasher is not None:
            self.hash = hasher.hash(self.operators)
        elif not self.operators:
            self.hash = HASH_IDENTITY
        else:
            raise ValueError("Se requiere un hasher (o hash_value) para una palabra no vacía.")

    # --- Constructores Estáticos ---
    @staticmethod
    def zero() -> 'HashedSequence':
        seq = HashedSequence((), hash_value=HASH_ZERO)
        seq.is_zero = True
        return seq

    @staticmethod
    def identity(negated: bool = False) -> 'HashedSequence':
        return HashedSequence((), hash_value=HASH_IDENTITY, negated=negated)

    def with_sign(self, negated: bool) -> 'HashedSequence':
        """Copia con el signo indicado. El cero no tiene signo."""
        if self.is_zero or negated == self.negated:
            return self
        return HashedSequence(self.operators, hash_value=self.hash, negated=negated)

    def __neg__(self) -> 'HashedSequence':
        return self.with_sign(not self.negated)

    # =========================================================================
    # BÚSQUEDA
    # =========================================================================

    def matches(self, target: Sequence[int], start: int = 0) -> bool:
        """True si esta palabra aparece exactamente al inicio de target[start:]."""
        ops = self.operators
        n = len(ops)
        if len(target) - start < n:
            return False
        for i in range(n):
            if target[start + i] != ops[i]:
                return False
        return True

    def matches_anywhere(self, target: Sequence[int], start: int = 0) -> int:
        """
        Posición de la primera ocurrencia (la más a la izquierda) en target,
        o NOT_FOUND (-1).
        """
        last = len(target) - len(self.operators)
        for pos in range(start, last + 1):
            if self.matches(target, pos):
                return pos
        return NOT_FOUND

    def suffix_prefix_overlap(self, other: 'HashedSequence') -> int:
        """
        Longitud k del sufijo más largo de self que es prefijo de other.
        0 si no hay solapamiento (o alguna palabra es vacía).
        Para palabras idénticas el solapamiento es total: k == len(self).
        """
        for k in self._overlap_candidates(other, len(self.operators), len(other.operators)):
            return k
        return 0

    def overlaps(self, other: 'HashedSequence') -> Iterator[int]:
        """
        Todas las longitudes de solapamiento PROPIAS (descendentes):
        0 < k < len(self) y 0 < k < len(other).
        """
        lhs_len = len(self.operators)
        top = min(lhs_len, len(other.operators)) - 1
        return self._overlap_candidates(other, lhs_len, top)

    def _overlap_candidates(self, other: 'HashedSequence', lhs_len: int, top: int) -> Iterator[int]:
        top = min(top, lhs_len, len(other.operators))
        ops = self.operators
        rhs = other.operators
        for k in range(top, 0, -1):
            offset = lhs_len - k
            if all(ops[offset + i] == rhs[i] for i in range(k)):
                yield k

    # =========================================================================
    # CONJUGACIÓN
    # =========================================================================

    def conjugate(self, alphabet: 'OperatorAlphabet') -> 'HashedSequence':
        """
        Invierte y conjuga cada operador según la política del alfabeto.
        El resultado se re-hashea: el orden sigue siendo shortlex.
        """
        if self.is_zero:
            return self
        ops = alphabet.conjugate_operators(self.operators)
        return HashedSequence(ops, alphabet.hasher, negated=self.negated)

    # =========================================================================
    # PROTOCOLO DE SECUENCIA
    # =========================================================================

    @property
    def empty(self) -> bool:
        return not self.operators

    @property
    def raw(self) -> Tuple[int, ...]:
        return self.operators

    def __len__(self) -> int:
        return len(self.operators)

    def __iter__(self) -> Iterator[int]:
        return iter(self.operators)

    def __getitem__(self, index):
        return self.operators[index]

    # --- Identidad y Orden ---

    def __eq__(self, other):
        if not isinstance(other, HashedSequence):
            return NotImplemented
        return (self.hash == other.hash
                and self.is_zero == other.is_zero
                and self.negated == other.negated
                and self.operators == other.operators)

    def __hash__(self):
        return hash((self.hash, self.is_zero, self.negated))

    def __lt__(self, other: 'HashedSequence') -> bool:
        return self.hash < other.hash

    def __le__(self, other: 'HashedSequence') -> bool:
        return self.hash <= other.hash

    def __gt__(self, other: 'HashedSequence') -> bool:
        return self.hash > other.hash

    def __ge__(self, other: 'HashedSequence') -> bool:
        return self.hash >= other.hash

    def __repr__(self):
        if self.is_zero:
            return "<Seq 0>"
        sign = "-" if self.negated else ""
        if not self.operators:
            return f"<Seq {sign}1>"
        body = "".join(f"X{op + 1}" for op in self.operators)
        return f"<Seq {sign}{body} #{self.hash}>"
