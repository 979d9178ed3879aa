"""
tests/rewrite_core/ds/test_catalog.py
Pruebas del Catálogo de Secuencias Crudas: tamaños, orden shortlex e índices.
"""
import unittest
from itertools import product

from rewrite_core.alphabet import ConjugateMode, OperatorAlphabet
from rewrite_core.ds.catalog import IDENTITY_ID, ZERO_ID, RawSequenceCatalog
from rewrite_core.errors import IndexOutOfRangeError, LengthExceededError


class TestRawSequenceCatalog(unittest.TestCase):

    def test_fresh_catalog(self):
        catalog = RawSequenceCatalog(OperatorAlphabet(2))
        self.assertEqual(catalog.size(), 2)
        self.assertEqual(catalog.longest_sequence(), 0)
        self.assertTrue(catalog[ZERO_ID].sequence.is_zero)
        self.assertEqual(catalog[IDENTITY_ID].hash, 1)

    def test_sizes_radix_2(self):
        """Longitudes 0, 1, 2, 4 -> tamaños 2, 4, 8, 32."""
        catalog = RawSequenceCatalog(OperatorAlphabet(2))
        sizes = []
        for length in (0, 1, 2, 4):
            catalog.generate(length)
            sizes.append(len(catalog))
        self.assertEqual(sizes, [2, 4, 8, 32])
        self.assertEqual(catalog.longest_sequence(), 4)

    def test_words_per_length(self):
        for radix in (1, 2, 3):
            catalog = RawSequenceCatalog(OperatorAlphabet(radix))
            catalog.generate(4)
            counts = {}
            for entry in catalog:
                if not entry.sequence.is_zero:
                    counts[len(entry)] = counts.get(len(entry), 0) + 1
            self.assertEqual(counts, {n: radix ** n for n in range(5)})

    def test_shortlex_order_and_dense_ids(self):
        catalog = RawSequenceCatalog(OperatorAlphabet(3))
        catalog.generate(3)
        hashes = [entry.hash for entry in catalog]
        self.assertEqual(hashes, sorted(hashes))
        self.assertEqual([entry.raw_id for entry in catalog], list(range(len(catalog))))

    def test_incremental_generation_keeps_indices(self):
        catalog = RawSequenceCatalog(OperatorAlphabet(2))
        catalog.generate(2)
        before = {entry.operators: entry.raw_id for entry in catalog if not entry.sequence.is_zero}
        self.assertEqual(catalog.generate(2), 0)
        self.assertEqual(catalog.generate(3), 8)
        for ops, raw_id in before.items():
            self.assertEqual(catalog.index_of(ops), raw_id)

    def test_index_of_arithmetic(self):
        alphabet = OperatorAlphabet(3)
        catalog = RawSequenceCatalog(alphabet, page_size=7)
        catalog.generate(3)
        for n in range(4):
            for ops in product(range(3), repeat=n):
                raw_id = catalog.index_of(ops)
                self.assertEqual(catalog[raw_id].operators, ops)
        self.assertEqual(catalog.index_of(alphabet.word(())), IDENTITY_ID)

    def test_where(self):
        alphabet = OperatorAlphabet(2)
        catalog = RawSequenceCatalog(alphabet)
        catalog.generate(2)
        word = alphabet.word((1, 0))
        self.assertEqual(catalog.where(word).operators, (1, 0))
        self.assertEqual(catalog.where(word.hash).raw_id, catalog.index_of(word))
        self.assertEqual(catalog.where((0, 1)).operators, (0, 1))
        self.assertIsNone(catalog.where((0, 0, 0)))
        self.assertIsNone(catalog.where(10 ** 6))

    def test_where_foreign_operator(self):
        """Operadores fuera del alfabeto: where da None, index_of lanza IndexOutOfRangeError."""
        catalog = RawSequenceCatalog(OperatorAlphabet(2))
        catalog.generate(2)
        self.assertIsNone(catalog.where((0, 7)))
        self.assertIsNone(catalog.where((-1,)))
        with self.assertRaises(IndexOutOfRangeError):
            catalog.index_of((0, 7))

    def test_out_of_range(self):
        catalog = RawSequenceCatalog(OperatorAlphabet(2))
        catalog.generate(1)
        with self.assertRaises(IndexOutOfRangeError):
            catalog[len(catalog)]
        with self.assertRaises(IndexOutOfRangeError):
            catalog.index_of((0, 1))
        with self.assertRaises(IndexError):
            catalog[-1]

    def test_generate_beyond_hashable_bound(self):
        alphabet = OperatorAlphabet(2)
        catalog = RawSequenceCatalog(alphabet)
        with self.assertRaises(LengthExceededError):
            catalog.generate(alphabet.longest_hashable_string() + 1)

    def test_conjugates_self_adjoint(self):
        catalog = RawSequenceCatalog(OperatorAlphabet(2))
        catalog.generate(3)
        entry = catalog.where((0, 0, 1))
        conj = catalog[entry.conjugate_id]
        self.assertEqual(conj.operators, (1, 0, 0))
        self.assertEqual(conj.conjugate_id, entry.raw_id)
        self.assertTrue(catalog.where((0, 1, 0)).self_adjoint)

    def test_conjugates_bunched(self):
        alphabet = OperatorAlphabet(1, ConjugateMode.BUNCHED)
        catalog = RawSequenceCatalog(alphabet)
        catalog.generate(2)
        entry = catalog.where((0, 0))
        self.assertEqual(catalog[entry.conjugate_id].operators, (1, 1))
        self.assertTrue(catalog.where((0, 1)).self_adjoint)


class TestCommutativeCatalog(unittest.TestCase):

    def test_sizes_radix_3(self):
        catalog = RawSequenceCatalog(OperatorAlphabet(3), commutative=True)
        sizes = []
        for length in range(4):
            catalog.generate(length)
            sizes.append(len(catalog))
        self.assertEqual(sizes, [2, 5, 11, 21])

    def test_only_sorted_words(self):
        catalog = RawSequenceCatalog(OperatorAlphabet(3), commutative=True)
        catalog.generate(3)
        for entry in catalog:
            self.assertEqual(list(entry.operators), sorted(entry.operators))
        self.assertEqual(catalog[catalog.index_of((0, 2))].operators, (0, 2))
        with self.assertRaises(IndexOutOfRangeError):
            catalog.index_of((2, 0))

    def test_conjugate_sorted(self):
        alphabet = OperatorAlphabet(2, ConjugateMode.BUNCHED)
        catalog = RawSequenceCatalog(alphabet, commutative=True)
        catalog.generate(2)
        entry = catalog.where((0, 1))
        self.assertEqual(catalog[entry.conjugate_id].operators, (2, 3))


if __name__ == '__main__':
    unittest.main()
