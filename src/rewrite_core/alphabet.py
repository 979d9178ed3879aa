"""
src/rewrite_core/alphabet.py
Alfabeto de Operadores v1.3.
Define el tamaño del alfabeto (radix) y la política de conjugación.
"""
from enum import IntEnum
from typing import Sequence, Tuple

from .errors import ConfigurationError
from .hashing.shortlex import ShortlexHasher
from .hashing.sequence import HashedSequence

# =============================================================================
# POLÍTICAS DE CONJUGACIÓN
# =============================================================================
# n = operadores "crudos" (sin contar adjuntos)
#
# SELF_ADJOINT : [X0, X1, ..., Xn-1]                      X* = X
# BUNCHED      : [X0, ..., Xn-1, X0*, ..., Xn-1*]        X_i* = X_{i±n}
# INTERLEAVED  : [X0, X0*, X1, X1*, ...]                  X_i* = X_{i^1}
# =============================================================================


class ConjugateMode(IntEnum):
    SELF_ADJOINT = 0
    BUNCHED      = 1
    INTERLEAVED  = 2

    @classmethod
    def parse(cls, value) -> 'ConjugateMode':
        """Acepta el propio enum, su valor entero o su nombre (sin distinguir mayúsculas)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_")
            if key == "SELFADJOINT":
                key = "SELF_ADJOINT"
            try:
                return cls[key]
            except KeyError:
                raise ConfigurationError(f"Modo de conjugación desconocido: '{value}'.") from None
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Modo de conjugación desconocido: {value!r}.") from None


class OperatorAlphabet:
    """
    Pre-contexto algebraico: radix + hasher + conjugación.
    Es inmutable y puede compartirse entre lectores concurrentes.
    """
    __slots__ = ('raw_operators', 'num_operators', 'mode', 'hasher')

    def __init__(self, raw_operators: int, mode: ConjugateMode = ConjugateMode.SELF_ADJOINT):
        mode = ConjugateMode.parse(mode)
        if raw_operators < 1:
            raise ConfigurationError(
                f"Se requiere al menos un operador (recibido {raw_operators})."
            )
        self.raw_operators = raw_operators
        self.mode = mode
        self.num_operators = raw_operators if mode == ConjugateMode.SELF_ADJOINT else 2 * raw_operators
        self.hasher = ShortlexHasher(self.num_operators)

    @staticmethod
    def from_radix(radix: int, mode: ConjugateMode = ConjugateMode.SELF_ADJOINT) -> 'OperatorAlphabet':
        """Construye el alfabeto a partir del tamaño TOTAL (adjuntos incluidos)."""
        mode = ConjugateMode.parse(mode)
        if mode == ConjugateMode.SELF_ADJOINT:
            return OperatorAlphabet(radix, mode)
        if radix % 2 != 0:
            raise ConfigurationError(
                f"El modo {mode.name} requiere un radix par (recibido {radix})."
            )
        return OperatorAlphabet(radix // 2, mode)

    @property
    def radix(self) -> int:
        return self.num_operators

    @property
    def self_adjoint(self) -> bool:
        return self.mode == ConjugateMode.SELF_ADJOINT

    # --- Construcción de Palabras ---
    def word(self, operators: Sequence[int], negated: bool = False) -> HashedSequence:
        return HashedSequence(operators, self.hasher, negated=negated)

    def longest_hashable_string(self) -> int:
        return self.hasher.longest_hashable_string()

    # --- Conjugación ---
    def conjugate_operator(self, op: int) -> int:
        if self.mode == ConjugateMode.BUNCHED:
            n = self.raw_operators
            return op + n if op < n else op - n
        if self.mode == ConjugateMode.INTERLEAVED:
            return op ^ 1
        return op

    def conjugate_operators(self, operators: Sequence[int]) -> Tuple[int, ...]:
        """(AB)* = B* A*: inversión + conjugación elemento a elemento."""
        if self.mode == ConjugateMode.SELF_ADJOINT:
            return tuple(reversed(operators))
        return tuple(self.conjugate_operator(op) for op in reversed(operators))

    def conjugate(self, word: HashedSequence) -> HashedSequence:
        return word.conjugate(self)

    def __eq__(self, other):
        if isinstance(other, OperatorAlphabet):
            return self.raw_operators == other.raw_operators and self.mode == other.mode
        return NotImplemented

    def __hash__(self):
        return hash((self.raw_operators, self.mode))

    def __repr__(self):
        return f"OperatorAlphabet(raw={self.raw_operators}, radix={self.num_operators}, mode={self.mode.name})"
