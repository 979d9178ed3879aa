"""
tests/rewrite_core/kernel/test_context.py
Pruebas de Integración del Contexto Algebraico.
"""
import threading
import unittest

from rewrite_core.alphabet import ConjugateMode
from rewrite_core.config import RewriteConfig
from rewrite_core.kernel.context import AlgebraicContext
from rewrite_core.kernel.rulebook import CompletionStatus

A, B = 0, 1


class TestAlgebraicContext(unittest.TestCase):

    def test_no_rules_is_complete(self):
        context = AlgebraicContext(RewriteConfig(2))
        self.assertTrue(context.is_complete())
        self.assertEqual(context.simplify((B, A, B)).operators, (B, A, B))

    def test_attempt_completion_cached(self):
        config = RewriteConfig(2, hermitian=False)
        context = AlgebraicContext(config, [((A, B), (A,)), ((B, A), (B,))], names=["a", "b"])
        self.assertFalse(context.is_complete())
        result = context.attempt_completion()
        self.assertEqual(result.status, CompletionStatus.COMPLETE)
        self.assertIs(context.attempt_completion(), result)
        self.assertEqual(context.format_word(context.simplify(context.parse_word("abba"))), "a")

    def test_mock_completion_does_not_stick(self):
        config = RewriteConfig(2, hermitian=False)
        context = AlgebraicContext(config, [((A, B), (A,)), ((B, A), (B,))])
        self.assertFalse(context.attempt_completion(max_iterations=0))
        self.assertIsNone(context.completion)
        self.assertTrue(context.attempt_completion())

    def test_hermitian_default(self):
        context = AlgebraicContext(RewriteConfig(2), [((A, B), (A,)), ((B, A), (B,))])
        self.assertTrue(context.attempt_completion())
        self.assertEqual(len(context.rules), 2)
        self.assertEqual(context.simplify((B,)).operators, (A,))

    def test_commutative(self):
        context = AlgebraicContext(RewriteConfig(3, commutative=True))
        self.assertEqual(len(context.rules), 3)
        self.assertTrue(context.attempt_completion())
        self.assertEqual(context.simplify((2, 0, 1, 0)).operators, (0, 0, 1, 2))
        self.assertIsNone(context.get_if_canonical((1, 0)))
        self.assertIsNotNone(context.get_if_canonical((0, 1)))

    def test_normal_operators(self):
        context = AlgebraicContext(RewriteConfig(2, conjugation_mode=ConjugateMode.BUNCHED), names=["a"])
        self.assertEqual(len(context.rules), 1)
        self.assertEqual(context.format_word(context.simplify((1, 0))), "aa*")
        self.assertEqual(context.format_word(context.conjugate((0, 0))), "a*a*")

    def test_canonical_words(self):
        config = RewriteConfig(2, hermitian=False)
        context = AlgebraicContext(config, [((A, B), (A,)), ((B, A), (B,))])
        context.attempt_completion()
        words = [w.operators for w in context.canonical_words(3)]
        self.assertEqual(words, [(), (A,), (B,)])

    def test_to_sympy(self):
        context = AlgebraicContext(RewriteConfig(2), names=["a", "b"])
        expr = context.to_sympy((A, B))
        self.assertEqual(str(expr), "a*b")

    def test_concurrent_readers(self):
        """Lectores concurrentes tras la completación: mismas formas normales."""
        context = AlgebraicContext(RewriteConfig(2, hermitian=False),
                                   [((A, A, A), ()), ((B, B, B), ()), ((A, B, A, B, A, B), ())])
        context.attempt_completion(max_iterations=20)
        words = [(B, A, B, A), (B, B, A, A), (A, B) * 4, (B,) * 7]
        expected = [context.simplify(w) for w in words]
        failures = []

        def reader():
            for _ in range(50):
                if [context.simplify(w) for w in words] != expected:
                    failures.append(True)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(failures, [])

    def test_rule_rendering_matches_default_names(self):
        """RuleBook.describe() y format_rules() numeran igual los operadores (X1, X2, ...)."""
        context = AlgebraicContext(RewriteConfig(2, hermitian=False),
                                   [((A, B), (B,)), ((B, B), None), ((A, A, A), ())])
        self.assertEqual([str(rule) for rule in context.rules], context.format_rules())
        self.assertEqual(context.format_rules(), ["X1;X2 -> X2", "X2;X2 -> 0", "X1;X1;X1 -> 1"])

    def test_str(self):
        context = AlgebraicContext(RewriteConfig(2, hermitian=False), [((A, B), (A,))], names=["a", "b"])
        self.assertEqual(str(context), "Contexto algebraico con 2 operadores: a, b\n  ab -> a")


if __name__ == '__main__':
    unittest.main()
