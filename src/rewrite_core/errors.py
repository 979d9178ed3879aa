"""
src/rewrite_core/errors.py
Taxonomía de Errores del Motor de Reescritura.
"""


class RewriteError(Exception):
    """Raíz de todos los errores del motor."""


class ConfigurationError(RewriteError, ValueError):
    """Radix, modo de conjugación, cotas o ecuaciones iniciales inválidas."""


class LengthExceededError(RewriteError, ValueError):
    """
    La palabra supera longest_hashable_string().
    El hash dejaría de caber en 64 bits y perdería la preservación de orden.
    """

    def __init__(self, length: int, limit: int):
        super().__init__(
            f"Palabra de longitud {length} excede la longitud hasheable máxima ({limit})."
        )
        self.length = length
        self.limit = limit


class DegenerateRuleError(RewriteError, ValueError):
    """Regla con LHS == RHS tras canonizar: no reescribe nada."""


class IndexOutOfRangeError(RewriteError, IndexError):
    """Consulta fuera del rango generado del catálogo."""


class UnknownOperatorError(RewriteError, KeyError):
    """Nombre de operador desconocido."""

    def __str__(self):
        # KeyError pone comillas alrededor del mensaje
        return str(self.args[0]) if self.args else ""
