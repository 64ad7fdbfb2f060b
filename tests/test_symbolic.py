"""
Tests for the symbolic expression resolver.
"""

import pytest


class TestEvaluate:
    """Tests for evaluate()."""

    def test_plain_numbers_are_identity(self):
        """Test numbers are returned without parsing."""
        from locality_sim.symbolic import evaluate

        assert evaluate(5) == 5
        assert evaluate(2.5) == 2.5
        assert evaluate(True) is None

    def test_arithmetic(self):
        """Test arithmetic under a scope."""
        from locality_sim.symbolic import evaluate

        result = evaluate("i * 2 + 1", {"i": 3})

        assert result == 7
        assert isinstance(result, int)

    def test_division(self):
        """Test true division returns fractions as floats."""
        from locality_sim.symbolic import evaluate

        assert evaluate("N / 2", {"N": 5}) == 2.5
        assert evaluate("N / 2", {"N": 4}) == 2

    def test_exponentiation(self):
        """Test both ** and ^ mean exponentiation."""
        from locality_sim.symbolic import evaluate

        assert evaluate("2 ** 3") == 8
        assert evaluate("2 ^ 3") == 8

    def test_functions(self):
        """Test floor, ceiling, min, max and integer division helpers."""
        from locality_sim.symbolic import evaluate

        assert evaluate("floor(7 / 2)") == 3
        assert evaluate("ceiling(7 / 2)") == 4
        assert evaluate("ceil(7 / 2)") == 4
        assert evaluate("min(i, 3)", {"i": 5}) == 3
        assert evaluate("Max(i, 3)", {"i": 5}) == 5
        assert evaluate("int_floor(7, 2)") == 3
        assert evaluate("int_ceil(7, 2)") == 4

    def test_unknown_symbol_is_unresolved(self):
        """Test a missing variable yields None."""
        from locality_sim.symbolic import evaluate

        assert evaluate("i + j", {"i": 1}) is None

    def test_malformed_is_unresolved(self):
        """Test parse errors yield None instead of raising."""
        from locality_sim.symbolic import evaluate

        assert evaluate("i +* 2", {"i": 1}) is None
        assert evaluate("", {}) is None

    def test_single_letter_names(self):
        """Test names that clash with sympy objects act as plain variables."""
        from locality_sim.symbolic import evaluate

        assert evaluate("S + E + N", {"S": 1, "E": 2, "N": 3}) == 6
        assert evaluate("I") is None

    def test_evaluate_all(self):
        """Test index tuples keep unresolved components."""
        from locality_sim.symbolic import evaluate_all, is_resolved

        values = evaluate_all(["i", "j + 1", 0], {"i": 2})

        assert values == [2, None, 0]
        assert not is_resolved(values)

    def test_free_symbols(self):
        """Test variable names are listed sorted."""
        from locality_sim.symbolic import free_symbols

        assert free_symbols("j + i * N") == ["N", "i", "j"]
        assert free_symbols(3) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
