"""Tests for xorpuzzle.core.circuit – formula parsing and evaluation."""

from __future__ import annotations

import itertools

import pytest

from xorpuzzle.core.circuit import (
    CircuitExpression,
    Const,
    ExpressionError,
    Gate,
    GateOp,
    Input,
    Not,
)


def _all_vectors(n: int):
    return list(itertools.product((False, True), repeat=n))


# ---------------------------------------------------------------------------
# Single gates
# ---------------------------------------------------------------------------

class TestGates:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("a and b", lambda a, b: a and b),
            ("a or b", lambda a, b: a or b),
            ("a xor b", lambda a, b: a != b),
            ("a xnor b", lambda a, b: a == b),
            ("a nand b", lambda a, b: not (a and b)),
            ("a nor b", lambda a, b: not (a or b)),
        ],
    )
    def test_two_input_gate(self, text, expected):
        expr = CircuitExpression.parse(text, 2)
        for a, b in _all_vectors(2):
            assert expr.evaluate([a, b]) == expected(a, b)

    def test_identity(self):
        expr = CircuitExpression.parse("a", 1)
        assert expr.evaluate([True]) is True
        assert expr.evaluate([False]) is False

    def test_not(self):
        expr = CircuitExpression.parse("not a", 1)
        assert expr.evaluate([False]) is True
        assert expr.evaluate([True]) is False

    def test_constants(self):
        assert CircuitExpression.parse("true", 1).evaluate([False]) is True
        assert CircuitExpression.parse("a and false", 1).evaluate([True]) is False


# ---------------------------------------------------------------------------
# Syntax
# ---------------------------------------------------------------------------

class TestSyntax:
    def test_symbolic_operators_match_keywords(self):
        symbolic = CircuitExpression.parse("!(a || b) && (c && d)", 4)
        words = CircuitExpression.parse("not (a or b) and (c and d)", 4)
        assert symbolic.truth_table() == words.truth_table()

    def test_single_char_symbols(self):
        expr = CircuitExpression.parse("~a & b | c ^ a", 3)
        for a, b, c in _all_vectors(3):
            assert expr.evaluate([a, b, c]) == (((not a) and b) or (c != a))

    def test_keywords_are_case_insensitive(self):
        expr = CircuitExpression.parse("a AND NOT b", 2)
        assert expr.evaluate([True, False]) is True

    def test_not_binds_tighter_than_and(self):
        expr = CircuitExpression.parse("not a and b", 2)
        assert expr.tree == Gate(GateOp.AND, (Not(Input(0)), Input(1)))

    def test_and_binds_tighter_than_xor_and_or(self):
        expr = CircuitExpression.parse("a or b xor c and d", 4)
        assert expr.tree == Gate(
            GateOp.OR,
            (Input(0), Gate(GateOp.XOR, (Input(1), Gate(GateOp.AND, (Input(2), Input(3)))))),
        )

    def test_associative_chains_flatten(self):
        expr = CircuitExpression.parse("a and b and c", 3)
        assert expr.tree == Gate(GateOp.AND, (Input(0), Input(1), Input(2)))

    def test_xnor_chain_stays_binary(self):
        expr = CircuitExpression.parse("a xnor b xnor c", 3)
        inner = Gate(GateOp.XNOR, (Input(0), Input(1)))
        assert expr.tree == Gate(GateOp.XNOR, (inner, Input(2)))
        for a, b, c in _all_vectors(3):
            assert expr.evaluate([a, b, c]) == ((a == b) == c)

    def test_parity_of_three(self):
        expr = CircuitExpression.parse("a ^ b ^ c", 3)
        for values in _all_vectors(3):
            assert expr.evaluate(values) == (sum(values) % 2 == 1)

    def test_double_negation(self):
        expr = CircuitExpression.parse("not not a", 1)
        assert expr.tree == Not(Not(Input(0)))
        assert expr.evaluate([True]) is True

    def test_str_round_trips_meaning(self):
        text = "not ((a or b) and (c or d)) and e"
        expr = CircuitExpression.parse(text, 5)
        again = CircuitExpression.parse(str(expr), 5)
        assert again.tree == expr.tree

    def test_str_rendering(self):
        expr = CircuitExpression.parse("!(a||b)&&c", 3)
        assert str(expr) == "not (a or b) and c"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TestErrors:
    @pytest.mark.parametrize(
        "text",
        ["", "a and", "(a or b", "a b", "a )", "and a", "a $ b", "foo", "a or A"],
    )
    def test_malformed(self, text):
        with pytest.raises(ExpressionError):
            CircuitExpression.parse(text, 2)

    def test_input_beyond_arity(self):
        with pytest.raises(ExpressionError, match="out of range"):
            CircuitExpression.parse("a and c", 2)

    def test_arity_bounds(self):
        with pytest.raises(ExpressionError):
            CircuitExpression.parse("a", 0)
        with pytest.raises(ExpressionError):
            CircuitExpression.parse("a", 7)

    def test_expression_error_is_value_error(self):
        with pytest.raises(ValueError):
            CircuitExpression.parse("a and", 1)

    def test_wrong_vector_length(self):
        expr = CircuitExpression.parse("a and b", 2)
        with pytest.raises(ExpressionError):
            expr.evaluate([True])
        with pytest.raises(ExpressionError):
            expr.evaluate([True, True, True])

    def test_from_tree_checks_arity(self):
        with pytest.raises(ExpressionError):
            CircuitExpression.from_tree(Input(3), 2)


# ---------------------------------------------------------------------------
# Expression object
# ---------------------------------------------------------------------------

class TestCircuitExpression:
    def test_evaluate_is_pure(self):
        expr = CircuitExpression.parse("(a xor b) xnor (c xor d)", 4)
        for values in _all_vectors(4):
            first = expr.evaluate(values)
            assert expr.evaluate(values) == first
            assert expr(list(values)) == first

    def test_evaluate_does_not_mutate_input(self):
        expr = CircuitExpression.parse("a and b", 2)
        values = [True, False]
        expr.evaluate(values)
        assert values == [True, False]

    def test_truth_table_order_and_size(self):
        table = CircuitExpression.parse("a or b", 2).truth_table()
        assert table == [
            ((False, False), False),
            ((False, True), True),
            ((True, False), True),
            ((True, True), True),
        ]

    def test_inputs_used(self):
        expr = CircuitExpression.parse("a and c", 4)
        assert expr.inputs_used() == frozenset({0, 2})

    def test_from_function(self):
        expr = CircuitExpression.from_function(lambda v: v[0] and not v[1], 2, label="a and not b")
        assert expr.evaluate([True, False]) is True
        assert expr.evaluate([True, True]) is False
        assert expr.tree is None
        assert str(expr) == "a and not b"
        assert expr.inputs_used() == frozenset({0, 1})

    def test_from_function_coerces_to_bool(self):
        expr = CircuitExpression.from_function(lambda v: sum(v), 3)
        assert expr.evaluate([True, True, False]) is True
        assert expr.evaluate([False, False, False]) is False

    def test_from_tree(self):
        expr = CircuitExpression.from_tree(Gate(GateOp.OR, (Input(0), Const(False))), 1)
        assert expr.evaluate([True]) is True
        assert str(expr) == "a or false"

    def test_repr(self):
        assert repr(CircuitExpression.parse("a", 1)) == "CircuitExpression('a', arity=1)"
