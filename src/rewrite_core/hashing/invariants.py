"""
src/rewrite_core/hashing/invariants.py
Geometría del Hash Shortlex.
Define el ancho de palabra y las constantes reservadas.
"""

# =============================================================================
# ANCHO DEL HASH
# =============================================================================
# Los hashes se tratan como enteros sin signo de 64 bits.
# Python no desborda, pero respetamos el ancho para que el orden sea
# exportable tal cual a capas que usan uint64.

BITS_HASH = 64
MASK_64   = 0xFFFFFFFFFFFFFFFF

# =============================================================================
# VALORES RESERVADOS
# =============================================================================
# [0] : Palabra CERO (aniquilador).
# [1] : Palabra VACÍA / Identidad. Independiente del radix.
# Toda palabra no vacía colapsa estrictamente por encima de HASH_IDENTITY.

HASH_ZERO     = 0
HASH_IDENTITY = 1
