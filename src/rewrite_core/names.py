"""
src/rewrite_core/names.py
Tabla de Nombres de Operadores v1.1.
Nombres legibles, formateo/parseo de palabras y exportación a sympy.
"""
import re
from typing import Dict, List, Optional, Sequence, Union

import sympy

from .alphabet import ConjugateMode, OperatorAlphabet
from .errors import ConfigurationError, UnknownOperatorError
from .hashing.sequence import HashedSequence

_NAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
CONJUGATE_SUFFIX = "*"
SEPARATOR = ";"


def validate_name(name: str) -> Optional[str]:
    """None si el nombre es válido; en otro caso, el motivo."""
    if not name:
        return "El nombre de operador no puede estar vacío."
    if not name[0].isalpha():
        return f"El nombre '{name}' debe empezar por una letra."
    if _NAME_PATTERN.fullmatch(name) is None:
        return f"El nombre '{name}' sólo admite letras, dígitos y '_'."
    return None


class NameTable:
    """
    Nombres de los operadores de un alfabeto.
    Los conjugados se nombran con sufijo '*' (en modo autoadjunto, 'X*' es alias de 'X').
    """
    __slots__ = ('alphabet', 'names', '_lookup', '_single_char')

    def __init__(self, alphabet: OperatorAlphabet, names: Optional[Sequence[str]] = None):
        self.alphabet = alphabet
        raw = alphabet.raw_operators
        if names is None:
            names = [f"X{i + 1}" for i in range(raw)]
        names = list(names)

        # 1. Validación
        if len(names) != raw:
            raise ConfigurationError(f"Se esperaban {raw} nombres de operador (recibidos {len(names)}).")
        for name in names:
            problem = validate_name(name)
            if problem is not None:
                raise ConfigurationError(problem)
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Nombres de operador duplicados: {names}")

        # 2. Disposición según el modo de conjugación
        conjugates = [name + CONJUGATE_SUFFIX for name in names]
        if alphabet.mode == ConjugateMode.BUNCHED:
            full = names + conjugates
        elif alphabet.mode == ConjugateMode.INTERLEAVED:
            full = [n for pair in zip(names, conjugates) for n in pair]
        else:
            full = names
        self.names: List[str] = full

        self._lookup: Dict[str, int] = {name: op for op, name in enumerate(full)}
        if alphabet.self_adjoint:
            for op, name in enumerate(full):
                self._lookup[name + CONJUGATE_SUFFIX] = op
        self._single_char = all(len(name) == 1 for name in names)

    @property
    def all_single_char(self) -> bool:
        return self._single_char

    def find(self, name: str) -> int:
        try:
            return self._lookup[name.strip()]
        except KeyError:
            raise UnknownOperatorError(f"Operador desconocido: '{name}'.") from None

    def __getitem__(self, op: int) -> str:
        return self.names[op]

    def __len__(self):
        return len(self.names)

    # =========================================================================
    # TEXTO
    # =========================================================================

    def format_word(self, word: Union[HashedSequence, Sequence[int]]) -> str:
        if isinstance(word, HashedSequence):
            if word.is_zero:
                return "0"
            sign = "-" if word.negated else ""
            ops = word.operators
        else:
            sign = ""
            ops = tuple(word)
        if not ops:
            return sign + "1"
        joiner = "" if self._single_char else SEPARATOR
        return sign + joiner.join(self.names[op] for op in ops)

    def parse_word(self, text: str) -> HashedSequence:
        """Inverso de format_word. UnknownOperatorError ante nombres desconocidos."""
        text = text.strip()
        negated = False
        if text.startswith("-"):
            negated = True
            text = text[1:].strip()
        if text == "0":
            return HashedSequence.zero()
        if text in ("", "1"):
            return HashedSequence.identity(negated)

        if SEPARATOR in text or not self._single_char:
            tokens = [token for token in text.split(SEPARATOR) if token.strip()]
        else:
            tokens = self._split_single_chars(text)
        ops = [self.find(token) for token in tokens]
        return self.alphabet.word(ops, negated)

    @staticmethod
    def _split_single_chars(text: str) -> List[str]:
        tokens = []
        for char in text:
            if char.isspace():
                continue
            if char == CONJUGATE_SUFFIX:
                if not tokens:
                    raise UnknownOperatorError(f"Operador desconocido: '{char}'.")
                tokens[-1] += char
            else:
                tokens.append(char)
        return tokens

    # =========================================================================
    # EXPORTACIÓN
    # =========================================================================

    def symbol(self, op: int) -> sympy.Symbol:
        return sympy.Symbol(self.names[op], commutative=False)

    def to_sympy(self, word: HashedSequence) -> sympy.Expr:
        """Producto de símbolos no conmutativos (0 / 1 / signo incluidos)."""
        if word.is_zero:
            return sympy.S.Zero
        expr = sympy.S.One
        for op in word.operators:
            expr = expr * self.symbol(op)
        return -expr if word.negated else expr

    def __repr__(self):
        return f"NameTable({self.names!r})"
