"""
src/rewrite_core/config.py
Superficie de Configuración v1.1.
Valores por defecto del motor y validación de parámetros del contexto.
"""
from typing import Any, Dict, Mapping, Optional

from .alphabet import ConjugateMode, OperatorAlphabet
from .errors import ConfigurationError

# =============================================================================
# VALORES POR DEFECTO
# =============================================================================
DEFAULT_MAX_ITERATIONS = 128     # Reglas nuevas deducidas antes de rendirse
DEFAULT_CATALOG_PAGE   = 4096    # Slots por página en la arena del catálogo


class RewriteConfig:
    """
    Parámetros de un contexto algebraico.
    radix cuenta TODOS los operadores (adjuntos incluidos).
    """
    __slots__ = (
        'radix', 'max_word_length', 'max_completion_iterations',
        'conjugation_mode', 'commutative', 'normal', 'hermitian'
    )

    def __init__(self,
                 radix: int,
                 max_word_length: Optional[int] = None,
                 max_completion_iterations: int = DEFAULT_MAX_ITERATIONS,
                 conjugation_mode: Any = ConjugateMode.SELF_ADJOINT,
                 commutative: bool = False,
                 normal: bool = True,
                 hermitian: bool = True):
        mode = ConjugateMode.parse(conjugation_mode)

        if not isinstance(radix, int) or isinstance(radix, bool) or radix < 1:
            raise ConfigurationError(f"radix debe ser un entero positivo (recibido {radix!r}).")
        if mode != ConjugateMode.SELF_ADJOINT and radix % 2 != 0:
            raise ConfigurationError(
                f"El modo {mode.name} requiere un radix par (recibido {radix})."
            )
        if max_word_length is not None and (not isinstance(max_word_length, int) or max_word_length < 1):
            raise ConfigurationError(
                f"max_word_length debe ser un entero positivo (recibido {max_word_length!r})."
            )
        if not isinstance(max_completion_iterations, int) or max_completion_iterations < 0:
            raise ConfigurationError(
                "max_completion_iterations debe ser un entero no negativo "
                f"(recibido {max_completion_iterations!r})."
            )

        self.radix = radix
        self.max_word_length = max_word_length
        self.max_completion_iterations = max_completion_iterations
        self.conjugation_mode = mode
        self.commutative = bool(commutative)
        self.normal = bool(normal)
        self.hermitian = bool(hermitian)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'RewriteConfig':
        """Construye la configuración desde datos planos (p.ej. JSON)."""
        unknown = set(data) - set(cls.__slots__)
        if unknown:
            raise ConfigurationError(f"Claves de configuración desconocidas: {sorted(unknown)}")
        if 'radix' not in data:
            raise ConfigurationError("Falta la clave obligatoria 'radix'.")
        return cls(**dict(data))

    def to_dict(self) -> Dict[str, Any]:
        out = {name: getattr(self, name) for name in self.__slots__}
        out['conjugation_mode'] = self.conjugation_mode.name
        return out

    def alphabet(self) -> OperatorAlphabet:
        return OperatorAlphabet.from_radix(self.radix, self.conjugation_mode)

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"RewriteConfig({fields})"
