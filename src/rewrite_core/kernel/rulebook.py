"""
src/rewrite_core/kernel/rulebook.py
Libro de Reglas v3.2 (Knuth-Bendix acotado).

Responsabilidades:
- Reducción de palabras a forma normal (punto fijo de reescritura).
- Fusión de reglas con el mismo LHS.
- Inter-reducción del conjunto de reglas.
- Completación: pares críticos (solapamientos e inclusiones) -> reglas nuevas,
  con cota de iteraciones y de longitud. El truncamiento se REPORTA, no se lanza.
"""
import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from ..alphabet import OperatorAlphabet
from ..config import DEFAULT_MAX_ITERATIONS
from ..errors import ConfigurationError
from ..hashing.sequence import HashedSequence
from ..hashing.shortlex import ShortlexHasher
from .logger import RuleLogger
from .rule import SubstitutionRule

_logger = logging.getLogger(__name__)

WordLike = Union[HashedSequence, Sequence[int]]


class CompletionStatus(Enum):
    COMPLETE  = "complete"    # Punto fijo: confluente dentro de la cota
    TRUNCATED = "truncated"   # Cota alcanzada: confluencia NO garantizada


class CompletionResult:
    """Resultado de RuleBook.complete(). Es verdadero solo si la completación terminó."""
    __slots__ = ('status', 'iterations', 'skipped_pairs', 'rule_count')

    def __init__(self, status: CompletionStatus, iterations: int, skipped_pairs: int, rule_count: int):
        self.status = status
        self.iterations = iterations
        self.skipped_pairs = skipped_pairs
        self.rule_count = rule_count

    @property
    def complete(self) -> bool:
        return self.status == CompletionStatus.COMPLETE

    @property
    def truncated(self) -> bool:
        return self.status == CompletionStatus.TRUNCATED

    def __bool__(self):
        return self.complete

    def __repr__(self):
        return (f"<Completion {self.status.value}: {self.iterations} iteraciones, "
                f"{self.rule_count} reglas, {self.skipped_pairs} pares omitidos>")


class RuleBook:
    """
    Conjunto ordenado (inserción) de reglas, indexado por hash del LHS.
    Escritor único: construir y completar ANTES de lanzar lectores concurrentes.
    """
    __slots__ = ('alphabet', 'hermitian', '_rules')

    def __init__(self,
                 alphabet: OperatorAlphabet,
                 rules: Iterable[SubstitutionRule] = (),
                 hermitian: bool = False):
        self.alphabet = alphabet
        self.hermitian = hermitian
        self._rules: dict = {}
        self.add_rules(rules)

    @staticmethod
    def from_equations(alphabet: OperatorAlphabet,
                       equations: Iterable[Any],
                       hermitian: bool = False) -> 'RuleBook':
        """
        Ecuaciones como (lhs, rhs) o (lhs, rhs, negated). Cada lado es una
        secuencia de enteros, una HashedSequence o None (palabra cero).
        Cualquier ecuación mal formada aborta la construcción completa.
        """
        rules = []
        for index, equation in enumerate(equations):
            rule = _rule_from_equation(alphabet, equation, index)
            if rule is None:
                _logger.info("Ecuación #%d degenerada (LHS == RHS): descartada.", index + 1)
                continue
            rules.append(rule)
        return RuleBook(alphabet, rules, hermitian)

    # =========================================================================
    # ACCESO
    # =========================================================================

    @property
    def hasher(self) -> ShortlexHasher:
        return self.alphabet.hasher

    @property
    def rules(self) -> Mapping[int, SubstitutionRule]:
        """Vista de solo lectura: hash(LHS) -> regla."""
        return MappingProxyType(self._rules)

    def rule_for(self, lhs: WordLike) -> Optional[SubstitutionRule]:
        return self._rules.get(self._as_word(lhs).hash)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[SubstitutionRule]:
        return iter(list(self._rules.values()))

    # =========================================================================
    # INSERCIÓN
    # =========================================================================

    def add_rules(self, rules: Iterable[SubstitutionRule], logger: Optional[RuleLogger] = None) -> int:
        added = 0
        for rule in rules:
            added += self.add_rule(rule, logger)
        return added

    def add_rule(self, rule: SubstitutionRule, logger: Optional[RuleLogger] = None) -> int:
        """
        Inserta la regla. Devuelve el número de reglas nuevas.
        Si el LHS ya existe (C -> A frente a C -> B) se conserva el RHS menor
        y se añade recursivamente la consecuencia B -> A.
        """
        key = rule.lhs.hash
        existing = self._rules.get(key)
        if existing is None:
            self._rules[key] = rule
            if logger is not None:
                logger.rule_introduced(rule)
            return 1

        # 1. Mismo RHS
        if existing.rhs.hash == rule.rhs.hash:
            if existing.negated == rule.negated:
                return 0
            # C -> A y C -> -A  =>  C = 0 y A = 0
            lhs_to_zero = SubstitutionRule(rule.lhs, HashedSequence.zero())
            if logger is not None:
                logger.rule_reduced(existing, lhs_to_zero)
            self._rules[key] = lhs_to_zero
            return self._add_implied(rule.rhs.with_sign(False), HashedSequence.zero(), logger)

        # 2. La regla existente C -> A ya es mejor que C -> B: añadimos B -> A
        if existing.rhs.hash < rule.rhs.hash:
            return self._add_implied(rule.rhs, existing.rhs, logger)

        # 3. La nueva C -> A mejora a la existente C -> B
        if logger is not None:
            logger.rule_removed(existing)
            logger.rule_introduced(rule)
        self._rules[key] = rule
        return self._add_implied(existing.rhs, rule.rhs, logger)

    def _add_implied(self, a: HashedSequence, b: HashedSequence, logger: Optional[RuleLogger]) -> int:
        # Los signos de a y b se combinan en el constructor de la regla
        implied = SubstitutionRule.oriented(a, b)
        if implied is None:
            return 0
        return self.add_rule(implied, logger)

    # =========================================================================
    # REDUCCIÓN
    # =========================================================================

    def reduce(self, word: WordLike) -> HashedSequence:
        """
        Forma normal: aplica la primera regla (orden de inserción) en su
        ocurrencia más a la izquierda, y repite hasta que ninguna aplique.
        """
        word = self._as_word(word)
        return self._reduce_word(word, None)

    def can_reduce(self, word: WordLike) -> bool:
        ops = word.operators if isinstance(word, HashedSequence) else tuple(word)
        for rule in self._rules.values():
            if rule.matches_anywhere(ops) >= 0:
                return True
        return False

    def reduce_rule(self, rule: SubstitutionRule) -> Optional[SubstitutionRule]:
        """Reduce ambos lados y re-orienta. None si la regla resulta trivial."""
        return self._reduce_rule(rule, None)

    def _reduce_rule(self, rule: SubstitutionRule, exclude: Optional[int]) -> Optional[SubstitutionRule]:
        lhs = self._reduce_word(rule.lhs, exclude)
        rhs = self._reduce_word(rule.rhs, exclude)
        return SubstitutionRule.oriented(lhs, rhs)

    def _reduce_word(self, word: HashedSequence, exclude: Optional[int]) -> HashedSequence:
        if word.is_zero:
            return word
        ops, negated, zero = self._reduce_raw(word.operators, word.negated, exclude)
        if zero:
            return HashedSequence.zero()
        if ops == word.operators:
            return word.with_sign(negated)
        return HashedSequence(ops, self.hasher, negated=negated)

    def _reduce_raw(self,
                    operators: Tuple[int, ...],
                    negated: bool,
                    exclude: Optional[int]) -> Tuple[Tuple[int, ...], bool, bool]:
        # Instantánea: los lectores nunca ven el diccionario a medio mutar
        rules = [rule for key, rule in self._rules.items() if key != exclude]
        ops = operators
        restart = True
        while restart:
            restart = False
            for rule in rules:
                pos = rule.matches_anywhere(ops)
                if pos < 0:
                    continue
                if rule.map_to_zero:
                    return (), False, True
                if rule.negated:
                    negated = not negated
                ops = rule.apply_match(ops, pos)
                restart = True
                break
        return ops, negated, False

    def reduce_ruleset(self, logger: Optional[RuleLogger] = None) -> int:
        """
        Inter-reducción: cada regla se reduce con las DEMÁS hasta que el
        conjunto sea estable. Devuelve el número de reglas cambiadas o eliminadas.
        """
        total = 0
        while True:
            changed = 0
            for key in list(self._rules):
                rule = self._rules.get(key)
                if rule is None:
                    continue
                reduced = self._reduce_rule(rule, key)

                if reduced is None:
                    del self._rules[key]
                    if logger is not None:
                        logger.rule_removed(rule)
                    changed += 1
                    continue

                if reduced == rule:
                    continue

                changed += 1
                if logger is not None:
                    logger.rule_reduced(rule, reduced)
                if reduced.lhs.hash == key:
                    self._rules[key] = reduced
                else:
                    del self._rules[key]
                    self.add_rule(reduced)

            total += changed
            if not changed:
                return total

    # =========================================================================
    # COMPLETACIÓN (KNUTH-BENDIX)
    # =========================================================================

    def complete(self,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS,
                 max_word_length: Optional[int] = None,
                 logger: Optional[RuleLogger] = None) -> CompletionResult:
        """
        Intenta completar el conjunto de reglas.
        max_iterations: reglas nuevas deducidas antes de rendirse (0 = sólo comprobar).
        max_word_length: cota de longitud de las palabras conjuntas exploradas.
        """
        if max_iterations < 0:
            raise ConfigurationError(f"max_iterations no puede ser negativo ({max_iterations}).")
        bound = self._length_bound(max_word_length)
        mock = max_iterations == 0
        iteration = 0

        # 1. Cierre bajo conjugación
        if self.hermitian:
            new_rules = self.conjugate_ruleset(mock, logger)
            if mock and new_rules > 0:
                return self._finish(CompletionStatus.TRUNCATED, 0, 0, logger)
            iteration += new_rules

        # 2. Bucle estándar
        while iteration < max_iterations:
            self.reduce_ruleset(logger)
            found, skipped = self._find_new_rule(bound)
            if found is None:
                status = CompletionStatus.COMPLETE if skipped == 0 else CompletionStatus.TRUNCATED
                return self._finish(status, iteration, skipped, logger)
            self._introduce(found, logger)
            iteration += 1

        # 3. Cota de iteraciones: ¿la última regla cerró el conjunto?
        found, skipped = self._find_new_rule(bound)
        status = CompletionStatus.COMPLETE if (found is None and skipped == 0) else CompletionStatus.TRUNCATED
        return self._finish(status, iteration, skipped, logger)

    def _finish(self, status: CompletionStatus, iterations: int, skipped: int,
                logger: Optional[RuleLogger]) -> CompletionResult:
        result = CompletionResult(status, iterations, skipped, len(self._rules))
        if status == CompletionStatus.COMPLETE:
            _logger.info("Completación alcanzada: %d iteraciones, %d reglas.", iterations, len(self._rules))
            if logger is not None:
                logger.success(self, iterations)
        else:
            _logger.warning("Completación truncada: %d iteraciones, %d pares omitidos por longitud.",
                            iterations, skipped)
            if logger is not None:
                logger.failure(self, iterations)
        return result

    def try_new_combination(self,
                            max_word_length: Optional[int] = None,
                            logger: Optional[RuleLogger] = None) -> bool:
        """Deduce como mucho UNA regla nueva no trivial. True si la encontró."""
        self.reduce_ruleset(logger)
        found, _ = self._find_new_rule(self._length_bound(max_word_length))
        if found is None:
            return False
        self._introduce(found, logger)
        return True

    def is_complete(self, max_word_length: Optional[int] = None) -> bool:
        """True si ningún par crítico (dentro de la cota) produce una regla nueva."""
        found, skipped = self._find_new_rule(self._length_bound(max_word_length))
        return found is None and skipped == 0

    def _introduce(self, found: Tuple[SubstitutionRule, Tuple[SubstitutionRule, ...]],
                   logger: Optional[RuleLogger]):
        rule, parents = found
        if logger is not None:
            logger.rule_introduced(rule, parents)
        self.add_rule(rule)
        self.reduce_ruleset(logger)

    def _find_new_rule(self, max_length: int):
        """
        Recorre todos los pares (A, B), incluido A consigo misma.
        Devuelve ((regla_reducida, (A, B)) | None, pares_omitidos_por_longitud).
        """
        hasher = self.hasher
        rules = list(self._rules.values())
        skipped = 0
        for rule_a in rules:
            for rule_b in rules:
                # Inclusión: B.lhs dentro de A.lhs
                embedded = rule_a.resolve_inclusion(rule_b, hasher)
                if embedded is not None:
                    reduced = self.reduce_rule(embedded)
                    if reduced is not None:
                        return (reduced, (rule_a, rule_b)), skipped

                # Solapamiento: sufijo de A.lhs == prefijo de B.lhs
                for joint in rule_a.joint_words(rule_b):
                    if len(joint) > max_length:
                        skipped += 1
                        continue
                    candidate = rule_a.resolve_joint(rule_b, joint, hasher)
                    reduced = None if candidate is None else self.reduce_rule(candidate)
                    if reduced is None:
                        _logger.debug("Par crítico %s / %s ya confluente.", rule_a, rule_b)
                        continue
                    return (reduced, (rule_a, rule_b)), skipped
        return None, skipped

    def _length_bound(self, max_word_length: Optional[int]) -> int:
        limit = self.hasher.longest_hashable_string()
        if max_word_length is None:
            return limit
        if max_word_length < 1:
            raise ConfigurationError(f"max_word_length debe ser positivo ({max_word_length}).")
        return min(max_word_length, limit)

    # =========================================================================
    # CONJUGACIÓN
    # =========================================================================

    def conjugate_ruleset(self, mock: bool = False, logger: Optional[RuleLogger] = None) -> int:
        """
        Añade las conjugadas no triviales de todas las reglas.
        mock=True no altera el conjunto: sólo indica si existe alguna (0 ó 1).
        """
        added = 0
        restart = True
        while restart:
            restart = False
            for rule in list(self._rules.values()):
                if self.try_conjugation(rule, mock, logger):
                    if mock:
                        return 1
                    added += 1
                    restart = True
                    break
        return added

    def try_conjugation(self, rule: SubstitutionRule, mock: bool = False,
                        logger: Optional[RuleLogger] = None) -> bool:
        conj_rule = rule.conjugate(self.alphabet)
        if conj_rule is None:
            return False
        reduced = self.reduce_rule(conj_rule)
        if reduced is None:
            return False
        if logger is not None:
            logger.rule_introduced_conjugate(rule, reduced)
        if mock:
            return True
        self.add_rule(reduced)
        self.reduce_ruleset(logger)
        return True

    # =========================================================================
    # GENERADORES DE REGLAS
    # =========================================================================

    @staticmethod
    def commutator_rules(alphabet: OperatorAlphabet) -> List[SubstitutionRule]:
        """ba -> ab para todo b > a."""
        hasher = alphabet.hasher
        rules = []
        for b in range(alphabet.num_operators - 1, 0, -1):
            for a in range(b - 1, -1, -1):
                rules.append(SubstitutionRule(HashedSequence((b, a), hasher), HashedSequence((a, b), hasher)))
        return rules

    @staticmethod
    def normal_rules(alphabet: OperatorAlphabet) -> List[SubstitutionRule]:
        """a* a -> a a* para cada operador no autoadjunto (operadores normales)."""
        if alphabet.self_adjoint:
            return []
        hasher = alphabet.hasher
        rules = []
        for op in range(alphabet.num_operators):
            conj = alphabet.conjugate_operator(op)
            if op < conj:
                rules.append(SubstitutionRule(HashedSequence((conj, op), hasher),
                                              HashedSequence((op, conj), hasher)))
        return rules

    # --- Utilidades ---
    def _as_word(self, word: WordLike) -> HashedSequence:
        if isinstance(word, HashedSequence):
            return word
        return HashedSequence(word, self.hasher)

    def describe(self) -> str:
        kind = "hermítico" if self.hermitian else "no hermítico"
        count = len(self._rules)
        lines = [f"Libro de reglas {kind} con {count} {'regla' if count == 1 else 'reglas'}:"]
        for index, rule in enumerate(self._rules.values(), start=1):
            lines.append(f"#{index}:\t{rule}")
        return "\n".join(lines)

    def __str__(self):
        return self.describe()

    def __repr__(self):
        return f"<RuleBook radix={self.alphabet.num_operators} rules={len(self._rules)}>"


def _rule_from_equation(alphabet: OperatorAlphabet, equation: Any, index: int) -> Optional[SubstitutionRule]:
    if isinstance(equation, SubstitutionRule):
        return equation
    try:
        if len(equation) == 2:
            lhs, rhs = equation
            negated = False
        elif len(equation) == 3:
            lhs, rhs, negated = equation
        else:
            raise ConfigurationError(f"Ecuación #{index + 1}: se esperaban 2 ó 3 elementos.")
        return SubstitutionRule.oriented(_side(alphabet, lhs), _side(alphabet, rhs), bool(negated))
    except ConfigurationError as exc:
        if str(exc).startswith("Ecuación #"):
            raise
        raise ConfigurationError(f"Ecuación #{index + 1}: {exc}") from exc
    except TypeError as exc:
        raise ConfigurationError(f"Ecuación #{index + 1} mal formada: {exc}") from exc


def _side(alphabet: OperatorAlphabet, side: Any) -> HashedSequence:
    if side is None:
        return HashedSequence.zero()
    if isinstance(side, HashedSequence):
        return side
    return alphabet.word(side)
