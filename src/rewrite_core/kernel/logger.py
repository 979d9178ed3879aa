"""
src/rewrite_core/kernel/logger.py
Bitácora de Reglas.
Eventos estructurados de la completación (introducción, reducción, borrado).
"""
import logging
from typing import Optional, Protocol, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .rule import SubstitutionRule
    from .rulebook import RuleBook


class RuleLogger(Protocol):
    def rule_introduced(self, new_rule: 'SubstitutionRule',
                        parents: Tuple['SubstitutionRule', ...] = ()) -> None: ...
    def rule_introduced_conjugate(self, parent: 'SubstitutionRule',
                                  new_rule: 'SubstitutionRule') -> None: ...
    def rule_reduced(self, old_rule: 'SubstitutionRule', new_rule: 'SubstitutionRule') -> None: ...
    def rule_removed(self, rule: 'SubstitutionRule') -> None: ...
    def success(self, book: 'RuleBook', attempts: int) -> None: ...
    def failure(self, book: 'RuleBook', attempts: int) -> None: ...


class LoggingRuleLogger:
    """Reenvía los eventos a un logging.Logger."""
    __slots__ = ('_logger', '_level')

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self._logger = logger or logging.getLogger("rewrite_core.completion")
        self._level = level

    def rule_introduced(self, new_rule, parents=()):
        if parents:
            self._logger.log(self._level, "Nueva regla %s (de %s)",
                             new_rule, " & ".join(str(p) for p in parents))
        else:
            self._logger.log(self._level, "Nueva regla %s", new_rule)

    def rule_introduced_conjugate(self, parent, new_rule):
        self._logger.log(self._level, "Nueva regla %s (conjugada de %s)", new_rule, parent)

    def rule_reduced(self, old_rule, new_rule):
        self._logger.log(self._level, "Regla %s reducida a %s", old_rule, new_rule)

    def rule_removed(self, rule):
        self._logger.log(self._level, "Regla %s eliminada (redundante)", rule)

    def success(self, book, attempts):
        self._logger.log(self._level, "Completación exitosa tras %d intentos: %d reglas",
                         attempts, len(book))

    def failure(self, book, attempts):
        self._logger.log(self._level, "Completación truncada tras %d intentos: %d reglas (confluencia no garantizada)",
                         attempts, len(book))
