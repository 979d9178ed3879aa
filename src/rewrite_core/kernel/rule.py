"""
src/rewrite_core/kernel/rule.py
Regla de Sustitución v2.0.
Ecuación orientada LHS -> RHS con LHS estrictamente mayor en orden shortlex.

Garantía de terminación: cada reescritura reduce estrictamente el rango
shortlex, y el rango está acotado inferiormente por la palabra vacía.
"""
from typing import Iterator, List, Optional, Sequence, Tuple, TYPE_CHECKING

from ..errors import DegenerateRuleError
from ..hashing.sequence import HashedSequence
from ..hashing.shortlex import ShortlexHasher

if TYPE_CHECKING:
    from ..alphabet import OperatorAlphabet


class SubstitutionRule:
    """
    LHS -> RHS (o LHS -> -RHS, o LHS -> 0).
    El signo vive siempre en el RHS; el LHS nunca es negativo ni cero.
    """
    __slots__ = ('lhs', 'rhs', 'delta')

    def __init__(self, lhs: HashedSequence, rhs: HashedSequence, negated: bool = False):
        # 1. Mover signos al RHS
        negated = negated != (lhs.negated != rhs.negated)
        lhs = lhs.with_sign(False)
        rhs = rhs.with_sign(False)

        # 2. Orientación automática (el mayor a la izquierda)
        if lhs.hash < rhs.hash:
            lhs, rhs = rhs, lhs

        # 3. Lados iguales
        if lhs.hash == rhs.hash:
            if lhs.is_zero:
                raise DegenerateRuleError("Regla degenerada: 0 -> 0.")
            if not negated:
                raise DegenerateRuleError(f"Regla degenerada: {lhs!r} -> {rhs!r}.")
            # X = -X  =>  X = 0
            rhs = HashedSequence.zero()

        if rhs.is_zero:
            negated = False

        self.lhs = lhs
        self.rhs = rhs.with_sign(negated)
        self.delta = len(rhs) - len(lhs)

    @staticmethod
    def oriented(a: HashedSequence, b: HashedSequence, negated: bool = False) -> Optional['SubstitutionRule']:
        """Como el constructor, pero devuelve None si la regla es degenerada."""
        try:
            return SubstitutionRule(a, b, negated)
        except DegenerateRuleError:
            return None

    @staticmethod
    def from_words(hasher: ShortlexHasher,
                   lhs: Sequence[int],
                   rhs: Optional[Sequence[int]],
                   negated: bool = False) -> 'SubstitutionRule':
        """rhs=None representa la palabra cero."""
        rhs_seq = HashedSequence.zero() if rhs is None else HashedSequence(rhs, hasher)
        return SubstitutionRule(HashedSequence(lhs, hasher), rhs_seq, negated)

    # --- Propiedades ---
    @property
    def negated(self) -> bool:
        return self.rhs.negated

    @property
    def map_to_zero(self) -> bool:
        return self.rhs.is_zero

    # =========================================================================
    # APLICACIÓN
    # =========================================================================

    def matches_anywhere(self, target: Sequence[int], start: int = 0) -> int:
        return self.lhs.matches_anywhere(target, start)

    def apply_match(self, target: Sequence[int], position: int) -> Tuple[int, ...]:
        """
        Sustituye el LHS (que debe empezar en `position`) por el RHS.
        Para reglas a cero devuelve la tupla vacía: el llamador decide el signo/cero.
        """
        if not self.lhs.matches(target, position):
            raise ValueError(
                f"La posición {position} no coincide con el LHS de la regla {self}."
            )
        if self.map_to_zero:
            return ()
        end = position + len(self.lhs)
        return tuple(target[:position]) + self.rhs.operators + tuple(target[end:])

    def apply(self, word: HashedSequence, hasher: ShortlexHasher) -> Optional[HashedSequence]:
        """Una sola sustitución en la ocurrencia más a la izquierda. None si no hay match."""
        if word.is_zero:
            return None
        pos = self.matches_anywhere(word.operators)
        if pos < 0:
            return None
        if self.map_to_zero:
            return HashedSequence.zero()
        ops = self.apply_match(word.operators, pos)
        return HashedSequence(ops, hasher, negated=word.negated != self.negated)

    # =========================================================================
    # PARES CRÍTICOS
    # =========================================================================

    def joint_words(self, other: 'SubstitutionRule') -> Iterator[Tuple[int, ...]]:
        """
        Palabras conjuntas L1 + cola(L2) para cada solapamiento propio k entre
        el sufijo de self.lhs y el prefijo de other.lhs (longitud |L1|+|L2|-k).
        """
        for overlap in self.lhs.overlaps(other.lhs):
            yield self.lhs.operators + other.lhs.operators[overlap:]

    def combine(self, other: 'SubstitutionRule', hasher: ShortlexHasher) -> List['SubstitutionRule']:
        """Reglas implicadas por todos los solapamientos de self con other (sin reducir)."""
        rules = []
        for joint in self.joint_words(other):
            rule = self.resolve_joint(other, joint, hasher)
            if rule is not None:
                rules.append(rule)
        return rules

    def resolve_joint(self, other: 'SubstitutionRule', joint: Tuple[int, ...],
                      hasher: ShortlexHasher) -> Optional['SubstitutionRule']:
        """
        Par crítico: self al inicio de joint frente a other al final.
        None si ambas ramas coinciden literalmente.
        """
        # A: self aplicada al inicio de la palabra conjunta
        via_self = self._reduce_at(joint, 0, hasher)
        # B: other aplicada al final
        via_other = other._reduce_at(joint, len(joint) - len(other.lhs), hasher)
        return SubstitutionRule.oriented(via_self, via_other)

    def resolve_inclusion(self, other: 'SubstitutionRule',
                          hasher: ShortlexHasher) -> Optional['SubstitutionRule']:
        """
        Par crítico por inclusión: other.lhs aparece dentro de self.lhs.
        None si no aparece, o si ambas ramas coinciden.
        """
        if other is self:
            return None
        pos = other.lhs.matches_anywhere(self.lhs.operators)
        if pos < 0:
            return None
        via_other = other._reduce_at(self.lhs.operators, pos, hasher)
        return SubstitutionRule.oriented(self.rhs, via_other)

    def _reduce_at(self, joint: Tuple[int, ...], position: int, hasher: ShortlexHasher) -> HashedSequence:
        if self.map_to_zero:
            return HashedSequence.zero()
        return HashedSequence(self.apply_match(joint, position), hasher, negated=self.negated)

    def implies(self, other: 'SubstitutionRule') -> bool:
        """
        True si other = u·LHS·v -> u·RHS·v (misma regla con contexto común).
        """
        if other.map_to_zero or self.map_to_zero or other.negated != self.negated:
            return False
        lhs_pos = self.lhs.matches_anywhere(other.lhs.operators)
        if lhs_pos < 0:
            return False
        prefix = other.lhs.operators[:lhs_pos]
        suffix = other.lhs.operators[lhs_pos + len(self.lhs):]
        return other.rhs.operators == prefix + self.rhs.operators + suffix

    # =========================================================================
    # CONJUGACIÓN
    # =========================================================================

    def conjugate(self, alphabet: 'OperatorAlphabet') -> Optional['SubstitutionRule']:
        """(L -> R)* = L* -> R*, re-orientada. None si es degenerada."""
        lhs = self.lhs.conjugate(alphabet)
        rhs = self.rhs.conjugate(alphabet)
        return SubstitutionRule.oriented(lhs, rhs)

    # --- Identidad ---
    def __eq__(self, other):
        if not isinstance(other, SubstitutionRule):
            return NotImplemented
        return self.lhs == other.lhs and self.rhs == other.rhs

    def __hash__(self):
        return hash((self.lhs, self.rhs))

    def __str__(self):
        return f"{_render(self.lhs)} -> {_render(self.rhs)}"

    def __repr__(self):
        return f"<Rule {self}>"


def _render(seq: HashedSequence) -> str:
    # Mismo formato que NameTable con los nombres por defecto
    if seq.is_zero:
        return "0"
    sign = "-" if seq.negated else ""
    if not seq.operators:
        return f"{sign}1"
    return sign + ";".join(f"X{op + 1}" for op in seq.operators)
