"""Tests for hisaab.financial.calculators.formula."""

from decimal import Decimal

import pytest

from hisaab.core.exceptions import HisaabError, InvalidFormulaError
from hisaab.financial.calculators.formula import evaluate_formula, substitute_variables, validate_formula

VARS = {"balance": Decimal("1000"), "interestRate": Decimal("5")}


class TestEvaluateFormula:
    def test_balance_percentage_plus_fixed(self):
        assert evaluate_formula("balance * 0.02 + 50", VARS) == 70

    def test_returns_decimal(self):
        assert isinstance(evaluate_formula("balance / 4", VARS), Decimal)

    def test_constant(self):
        assert evaluate_formula("200", VARS) == 200

    def test_operator_precedence(self):
        assert evaluate_formula("2 + 3 * 4", VARS) == 14
        assert evaluate_formula("10 - 4 / 2", VARS) == 8

    def test_parentheses(self):
        assert evaluate_formula("(2 + 3) * 4", VARS) == 20
        assert evaluate_formula("((1 + 1) * (2 + 3))", VARS) == 10

    def test_monthly_interest_formula(self):
        variables = {"balance": Decimal("12000"), "interestRate": Decimal("6")}
        assert evaluate_formula("balance * interestRate / 100 / 12", variables) == 60

    def test_unary_minus(self):
        assert evaluate_formula("-5 + 10", VARS) == 5
        assert evaluate_formula("10 - -5", VARS) == 15

    def test_leading_decimal_point(self):
        assert evaluate_formula(".5 * 4", VARS) == 2

    def test_negative_result_clamped_to_zero(self):
        assert evaluate_formula("balance - 2000", VARS) == 0

    def test_float_variables_have_no_binary_noise(self):
        assert evaluate_formula("balance * 3", {"balance": 0.1, "interestRate": 0}) == Decimal("0.3")

    def test_missing_interest_rate_treated_as_zero(self):
        assert evaluate_formula("interestRate + 1", {"balance": 100, "interestRate": None}) == 1

    def test_exponent_notation_values_are_expanded(self):
        assert evaluate_formula("balance + 1", {"balance": Decimal("1E+3"), "interestRate": 0}) == 1001


class TestRejectedFormulas:
    def test_injection_attempt(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("balance; DROP TABLE", VARS)

    def test_python_code(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("__import__('os').system('ls')", VARS)

    def test_unknown_variable(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("principal * 2", VARS)

    def test_exponent_operator_rejected(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("balance ** 2", VARS)

    def test_division_by_zero(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("balance / 0", VARS)

    def test_zero_over_zero(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("0 / 0", VARS)

    def test_empty(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("   ", VARS)

    def test_unbalanced_parentheses(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("(1 + 2", VARS)
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("1 + 2)", VARS)

    def test_adjacent_numbers(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("1 2", VARS)

    def test_malformed_number(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("1.2.3", VARS)

    def test_dangling_operator(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("balance *", VARS)

    def test_trailing_newline(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("balance\n", VARS)

    def test_embedded_newline(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("balance\n+ 1", VARS)

    def test_deep_nesting(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula("(" * 400 + "1" + ")" * 400, VARS)

    def test_overflow(self):
        with pytest.raises(InvalidFormulaError):
            evaluate_formula(" * ".join(["99999999999999999999"] * 60000), VARS)

    def test_error_hierarchy(self):
        assert issubclass(InvalidFormulaError, HisaabError)
        assert issubclass(InvalidFormulaError, ValueError)


class TestSubstitution:
    def test_literal_text_replacement(self):
        assert substitute_variables("balance * interestRate", VARS) == "1000 * 5"

    def test_trailing_zeros_trimmed(self):
        assert substitute_variables("balance", {"balance": Decimal("250.50"), "interestRate": 0}) == "250.5"


class TestValidateFormula:
    def test_valid(self):
        validate_formula("balance * 0.01 + 25")

    def test_invalid(self):
        with pytest.raises(InvalidFormulaError):
            validate_formula("balance + x")
