"""
src/rewrite_core/kernel/context.py
Contexto Algebraico v2.0.
Dueño único de un alfabeto, su tabla de nombres, su libro de reglas y su catálogo.

Modelo de concurrencia:
- Escritura (completación, creación del catálogo) bajo RLock.
- Lectura (simplify, conjugate, format) sin bloqueo, una vez estable.
"""
import logging
import threading
from typing import Any, Iterable, List, Optional, Sequence, Union

from ..config import RewriteConfig
from ..ds.catalog import RawSequenceCatalog
from ..hashing.sequence import HashedSequence
from ..names import NameTable
from .logger import RuleLogger
from .rulebook import CompletionResult, CompletionStatus, RuleBook

_logger = logging.getLogger(__name__)

WordLike = Union[HashedSequence, Sequence[int]]


class AlgebraicContext:
    __slots__ = ('config', 'alphabet', 'names', 'rules', '_lock', '_completion', '_catalog')

    def __init__(self,
                 config: RewriteConfig,
                 equations: Iterable[Any] = (),
                 names: Optional[Sequence[str]] = None):
        self.config = config
        self.alphabet = config.alphabet()
        self.names = NameTable(self.alphabet, names)
        self._lock = threading.RLock()
        self._catalog: Optional[RawSequenceCatalog] = None

        # 1. Reglas explícitas + generadas
        self.rules = RuleBook.from_equations(self.alphabet, equations, hermitian=config.hermitian)
        if config.commutative:
            self.rules.add_rules(RuleBook.commutator_rules(self.alphabet))
        if config.normal and not self.alphabet.self_adjoint:
            self.rules.add_rules(RuleBook.normal_rules(self.alphabet))

        # 2. Sin reglas: completo desde el inicio
        self._completion: Optional[CompletionResult] = None
        if not len(self.rules):
            self._completion = CompletionResult(CompletionStatus.COMPLETE, 0, 0, 0)

    # =========================================================================
    # ESCRITURA
    # =========================================================================

    def attempt_completion(self,
                           max_iterations: Optional[int] = None,
                           max_word_length: Optional[int] = None,
                           logger: Optional[RuleLogger] = None) -> CompletionResult:
        """Completa el libro de reglas (cacheado si ya terminó)."""
        with self._lock:
            if self._completion is not None and self._completion.complete:
                return self._completion
            if max_iterations is None:
                max_iterations = self.config.max_completion_iterations
            if max_word_length is None:
                max_word_length = self.config.max_word_length
            result = self.rules.complete(max_iterations, max_word_length, logger)
            # El modo de prueba (0 iteraciones) no fija el estado
            if max_iterations > 0:
                self._completion = result
            _logger.info("Contexto: %r", result)
            return result

    def is_complete(self) -> bool:
        return self._completion is not None and self._completion.complete

    @property
    def completion(self) -> Optional[CompletionResult]:
        return self._completion

    @property
    def catalog(self) -> RawSequenceCatalog:
        with self._lock:
            if self._catalog is None:
                self._catalog = RawSequenceCatalog(self.alphabet, self.config.commutative)
            return self._catalog

    # =========================================================================
    # LECTURA
    # =========================================================================

    def word(self, operators: Sequence[int], negated: bool = False) -> HashedSequence:
        return self.alphabet.word(operators, negated)

    def simplify(self, word: WordLike) -> HashedSequence:
        """Forma normal (ordenando primero en modo conmutativo)."""
        if not isinstance(word, HashedSequence):
            word = self.alphabet.word(word)
        if word.is_zero:
            return word
        if self.config.commutative:
            ordered = tuple(sorted(word.operators))
            if ordered != word.operators:
                word = self.alphabet.word(ordered, word.negated)
        return self.rules.reduce(word)

    def conjugate(self, word: WordLike) -> HashedSequence:
        if not isinstance(word, HashedSequence):
            word = self.alphabet.word(word)
        return self.simplify(word.conjugate(self.alphabet))

    def get_if_canonical(self, word: WordLike) -> Optional[HashedSequence]:
        """La palabra si ya está en forma normal; None si alguna regla la reescribe."""
        if not isinstance(word, HashedSequence):
            word = self.alphabet.word(word)
        if word.is_zero:
            return word
        if self.config.commutative and list(word.operators) != sorted(word.operators):
            return None
        if self.rules.can_reduce(word):
            return None
        return word

    def canonical_words(self, length: int) -> List[HashedSequence]:
        """Palabras del catálogo (hasta length) que ya son canónicas, en orden shortlex."""
        catalog = self.catalog
        with self._lock:
            catalog.generate(length)
        out = []
        for entry in catalog:
            if entry.sequence.is_zero:
                continue
            if not self.rules.can_reduce(entry.sequence):
                out.append(entry.sequence)
        return out

    # --- Nombres ---
    def format_word(self, word: WordLike) -> str:
        return self.names.format_word(word)

    def parse_word(self, text: str) -> HashedSequence:
        return self.names.parse_word(text)

    def to_sympy(self, word: WordLike):
        if not isinstance(word, HashedSequence):
            word = self.alphabet.word(word)
        return self.names.to_sympy(word)

    def format_rules(self) -> List[str]:
        return [f"{self.format_word(rule.lhs)} -> {self.format_word(rule.rhs)}" for rule in self.rules]

    def __str__(self):
        lines = [f"Contexto algebraico con {self.alphabet.num_operators} operadores: "
                 + ", ".join(self.names.names)]
        lines.extend(f"  {line}" for line in self.format_rules())
        return "\n".join(lines)

    def __repr__(self):
        return f"<AlgebraicContext {self.alphabet!r} rules={len(self.rules)}>"
