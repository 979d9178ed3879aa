"""
tests/rewrite_core/hashing/test_shortlex.py
Pruebas del Hasher Shortlex: preservación de orden y cotas de longitud.
"""
import unittest
import random
from itertools import product

from rewrite_core.hashing.sequence import HashedSequence
from rewrite_core.hashing.shortlex import ShortlexHasher
from rewrite_core.hashing.invariants import HASH_IDENTITY, MASK_64
from rewrite_core.errors import ConfigurationError, LengthExceededError


def shortlex_key(word):
    return (len(word), tuple(word))


class TestShortlexHasher(unittest.TestCase):

    def test_empty_word_is_one(self):
        """La palabra vacía vale 1 para cualquier radix."""
        for radix in (1, 2, 3, 7):
            self.assertEqual(ShortlexHasher(radix).hash(()), HASH_IDENTITY)

    def test_known_values_radix_2(self):
        """Base 3, dígitos 1..2, offset 1."""
        h = ShortlexHasher(2)
        self.assertEqual(h([0]), 2)
        self.assertEqual(h([1]), 3)
        self.assertEqual(h([0, 0]), 5)
        self.assertEqual(h([1, 1]), 9)
        self.assertEqual(h([0, 0, 0]), 14)

    def test_order_preservation_exhaustive(self):
        """hash(a) < hash(b) <=> a <_shortlex b, para todas las palabras cortas."""
        for radix in (1, 2, 3):
            h = ShortlexHasher(radix)
            words = [w for n in range(5) for w in product(range(radix), repeat=n)]
            by_hash = sorted(words, key=h.hash)
            by_shortlex = sorted(words, key=shortlex_key)
            self.assertEqual(by_hash, by_shortlex)
            self.assertEqual(len({h.hash(w) for w in words}), len(words))

    def test_order_preservation_random_long(self):
        """Comparación aleatoria cerca de la cota de longitud."""
        rng = random.Random(1234)
        h = ShortlexHasher(5)
        limit = h.longest_hashable_string()
        for _ in range(300):
            a = [rng.randrange(5) for _ in range(rng.randint(limit - 3, limit))]
            b = [rng.randrange(5) for _ in range(rng.randint(limit - 3, limit))]
            self.assertEqual(h(a) < h(b), shortlex_key(a) < shortlex_key(b))

    def test_longest_hashable_string_fits_64_bits(self):
        for radix in (1, 2, 3, 4, 10, 255):
            h = ShortlexHasher(radix)
            limit = h.longest_hashable_string()
            biggest = [radix - 1] * limit
            self.assertLessEqual(h(biggest), MASK_64)
            # Una longitud más ya no cabría
            self.assertGreater(HASH_IDENTITY + h.base ** (limit + 1) - 1, MASK_64)

    def test_custom_offset_keeps_identity_and_order(self):
        """Con offset distinto de 1 la palabra vacía sigue valiendo 1 y el orden se conserva."""
        h = ShortlexHasher(2, offset=5)
        self.assertEqual(h.hash(()), HASH_IDENTITY)
        self.assertEqual(HashedSequence((), h), HashedSequence.identity())
        words = [w for n in range(5) for w in product(range(2), repeat=n)]
        self.assertEqual(sorted(words, key=h.hash), sorted(words, key=shortlex_key))
        limit = h.longest_hashable_string()
        self.assertLessEqual(h([1] * limit), MASK_64)
        self.assertGreater(HASH_IDENTITY + h.base ** (limit + 1) - 1, MASK_64)

    def test_length_exceeded(self):
        h = ShortlexHasher(2)
        limit = h.longest_hashable_string()
        with self.assertRaises(LengthExceededError) as ctx:
            h([0] * (limit + 1))
        self.assertEqual(ctx.exception.limit, limit)
        self.assertIsInstance(ctx.exception, ValueError)

    def test_invalid_parameters(self):
        with self.assertRaises(ConfigurationError):
            ShortlexHasher(0)
        with self.assertRaises(ConfigurationError):
            ShortlexHasher(2, offset=0)
        with self.assertRaises(ConfigurationError):
            ShortlexHasher(2).hash([2])

    def test_equality(self):
        self.assertEqual(ShortlexHasher(3), ShortlexHasher(3))
        self.assertNotEqual(ShortlexHasher(3), ShortlexHasher(4))


if __name__ == '__main__':
    unittest.main()
