"""
Foundation module tests: field.py, polynomial.py, multivariate.py, expression.py
"""
import pytest

from zkp.sumcheck import field as field_module
from zkp.sumcheck.errors import EvaluationError, RandomnessUnavailable
from zkp.sumcheck.expression import parse_polynomial, parse_variables
from zkp.sumcheck.field import (
    F61, FR, MERSENNE_61, CURVE_ORDER,
    prime_field, field_by_name, field_name, to_field,
    byte_length, element_to_bytes, element_from_bytes, random_element,
)
from zkp.sumcheck.multivariate import (
    MultivariatePolynomial, MultilinearExtension, FunctionOracle,
    to_bits, boolean_hypercube, hypercube_sum, fold_table,
)
from zkp.sumcheck.polynomial import UnivariatePolynomial


# =====================================================================
# Field
# =====================================================================

class TestField:
    def test_modular_reduction(self):
        assert F61(MERSENNE_61 + 5) == F61(5)
        assert FR(CURVE_ORDER) == FR(0)

    def test_arithmetic(self):
        a = F61(3)
        assert a * a + F61(1) == F61(10)
        assert F61(0) - F61(1) == F61(MERSENNE_61 - 1)
        assert F61(1) / F61(3) * F61(3) == F61(1)

    def test_prime_field(self, F7):
        assert F7.field_modulus == 7
        assert F7.field_name == "f7"
        assert F7(5) + F7(4) == F7(2)

    def test_prime_field_custom_name(self):
        F13 = prime_field(13, name="tiny")
        assert F13.field_name == "tiny"
        assert field_name(F13) == "tiny"

    @pytest.mark.parametrize("modulus", [0, 1, 8, 91, MERSENNE_61 + 2])
    def test_prime_field_rejects_composite(self, modulus):
        with pytest.raises(ValueError):
            prime_field(modulus)

    def test_prime_field_accepts_large_primes(self):
        assert prime_field(MERSENNE_61).field_modulus == MERSENNE_61
        assert prime_field(CURVE_ORDER).field_modulus == CURVE_ORDER

    def test_field_by_name(self):
        assert field_by_name("f61") is F61
        assert field_by_name("bn128") is FR
        with pytest.raises(ValueError):
            field_by_name("f62")

    def test_to_field_converts_through_int(self, F7):
        x = to_field(F7, F61(10))
        assert isinstance(x, F7)
        assert int(x) == 3

    def test_to_field_keeps_same_field(self):
        a = F61(9)
        assert to_field(F61, a) is a

    def test_to_field_rejects_other_types(self):
        with pytest.raises(TypeError):
            to_field(F61, "3")
        with pytest.raises(TypeError):
            to_field(F61, 1.5)

    def test_byte_length(self, F7):
        assert byte_length(F61) == 8
        assert byte_length(FR) == 32
        assert byte_length(F7) == 1

    def test_element_to_bytes(self):
        assert element_to_bytes(F61(1)) == b"\x00" * 7 + b"\x01"
        assert len(element_to_bytes(FR(CURVE_ORDER - 1))) == 32

    def test_element_from_bytes(self):
        data = element_to_bytes(F61(123456789))
        assert element_from_bytes(F61, data) == F61(123456789)

    def test_element_from_bytes_wrong_length(self):
        with pytest.raises(ValueError):
            element_from_bytes(F61, b"\x01")

    def test_element_from_bytes_non_canonical(self):
        with pytest.raises(ValueError):
            element_from_bytes(F61, b"\xff" * 8)

    def test_random_element_in_field(self):
        for _ in range(20):
            r = random_element(F61)
            assert isinstance(r, F61)
            assert 0 <= int(r) < MERSENNE_61

    def test_random_element_source_unavailable(self, monkeypatch):
        def broken(n):
            raise NotImplementedError("no entropy")

        monkeypatch.setattr(field_module.secrets, "randbelow", broken)
        with pytest.raises(RandomnessUnavailable):
            random_element(F61)


# =====================================================================
# UnivariatePolynomial
# =====================================================================

class TestUnivariatePolynomial:
    def test_trim(self):
        p = UnivariatePolynomial([1, 2, 0, 0], F61)
        assert p.degree == 1
        assert len(p) == 2

    def test_zero_polynomial(self):
        z = UnivariatePolynomial.zero(F61)
        assert z.degree == 0
        assert z.is_zero()
        assert UnivariatePolynomial([0, 0, 0], F61).is_zero()

    def test_field_inferred_from_coefficients(self):
        p = UnivariatePolynomial([1, F61(2)])
        assert p.field is F61

    def test_field_required_for_int_coefficients(self):
        with pytest.raises(ValueError):
            UnivariatePolynomial([1, 2])

    def test_evaluate(self):
        p = UnivariatePolynomial([1, 2, 3], F61)
        assert p.evaluate(2) == F61(17)
        assert p(F61(0)) == F61(1)

    def test_sum_over_boolean(self):
        p = UnivariatePolynomial([1, 2, 3], F61)
        assert p.sum_over_boolean() == p(0) + p(1)
        assert p.sum_over_boolean() == F61(7)

    def test_add_mul(self):
        p = UnivariatePolynomial([1, 2], F61)
        q = UnivariatePolynomial([3, 4], F61)
        assert p + q == UnivariatePolynomial([4, 6], F61)
        assert p * q == UnivariatePolynomial([3, 10, 8], F61)
        assert (p - p).is_zero()

    def test_scalar_ops(self):
        p = UnivariatePolynomial([1, 2], F61)
        assert 2 * p == UnivariatePolynomial([2, 4], F61)
        assert p + 1 == UnivariatePolynomial([2, 2], F61)
        assert -p == UnivariatePolynomial([-1, -2], F61)

    def test_equality_respects_field(self):
        assert UnivariatePolynomial([1], F61) != UnivariatePolynomial([1], FR)
        a = UnivariatePolynomial([1, 2], F61)
        b = UnivariatePolynomial([1, 2, 0], F61)
        assert a == b
        assert hash(a) == hash(b)

    def test_repr(self):
        assert repr(UnivariatePolynomial([0, 2, 1], F61)) == "Poly(2*X + 1*X^2)"
        assert repr(UnivariatePolynomial.zero(F61)) == "Poly(0)"

    def test_from_evaluations(self):
        # g(X) = 2X + X²
        p = UnivariatePolynomial.from_evaluations([0, 3, 8], F61)
        assert p == UnivariatePolynomial([0, 2, 1], F61)

    def test_from_evaluations_degree_at_most_points(self):
        p = UnivariatePolynomial.from_evaluations([F61(5), F61(5), F61(5)])
        assert p.degree == 0
        assert p(12345) == F61(5)

    def test_from_evaluations_interpolates(self):
        target = UnivariatePolynomial([7, 0, 3, 1], F61)
        evals = [target(x) for x in range(4)]
        assert UnivariatePolynomial.from_evaluations(evals) == target

    def test_from_evaluations_high_degree(self):
        target = UnivariatePolynomial([(7 * i + 3) % 11 for i in range(65)], F61)
        evals = [target(x) for x in range(65)]
        assert UnivariatePolynomial.from_evaluations(evals) == target

    def test_from_evaluations_whole_small_field(self, F7):
        # 7개 점 = F7 전체: X⁶ 까지 복원된다
        target = UnivariatePolynomial([1, 0, 0, 0, 0, 0, 2], F7)
        evals = [target(x) for x in range(7)]
        assert UnivariatePolynomial.from_evaluations(evals) == target

    def test_from_evaluations_empty(self):
        with pytest.raises(ValueError):
            UnivariatePolynomial.from_evaluations([], F61)

    def test_from_evaluations_too_many_points(self, F7):
        with pytest.raises(ValueError):
            UnivariatePolynomial.from_evaluations([0] * 8, F7)


# =====================================================================
# Multivariate oracles
# =====================================================================

class TestHypercube:
    def test_to_bits_msb_first(self):
        assert to_bits(6, 3) == [1, 1, 0]
        assert to_bits(1, 4) == [0, 0, 0, 1]

    @pytest.mark.parametrize("n", [-1, 8])
    def test_to_bits_out_of_range(self, n):
        with pytest.raises(ValueError):
            to_bits(n, 3)

    def test_hypercube_order_matches_to_bits(self):
        points = list(boolean_hypercube(3))
        assert points == [tuple(to_bits(i, 3)) for i in range(8)]


class TestMultivariatePolynomial:
    def test_example_polynomial(self, example_oracle):
        assert example_oracle.num_vars == 1
        assert example_oracle.degree_bounds == [2]
        assert example_oracle.evaluate([1]) == F61(3)
        assert hypercube_sum(example_oracle) == F61(3)

    def test_degree_bounds_from_exponents(self, two_var_oracle):
        assert two_var_oracle.degree_bounds == [2, 1]
        assert two_var_oracle.total_degree_bound() == 3
        assert hypercube_sum(two_var_oracle) == F61(3)

    def test_zero_terms_removed(self):
        x0 = MultivariatePolynomial.variable(F61, 2, 0)
        diff = x0 - x0
        assert diff.terms == {}
        assert diff.degree_bounds == [0, 0]

    def test_looser_bound_allowed(self):
        g = MultivariatePolynomial(F61, 1, {(1,): 1}, degree_bounds=[3])
        assert g.degree_bound(0) == 3

    def test_tighter_bound_rejected(self):
        with pytest.raises(ValueError):
            MultivariatePolynomial(F61, 1, {(2,): 1}, degree_bounds=[1])

    def test_bad_exponent_vector(self):
        with pytest.raises(ValueError):
            MultivariatePolynomial(F61, 2, {(1,): 1})

    def test_zero_arity_rejected(self):
        with pytest.raises(ValueError):
            MultivariatePolynomial(F61, 0, {})

    def test_degree_bound_index(self, two_var_oracle):
        with pytest.raises(ValueError):
            two_var_oracle.degree_bound(2)

    def test_pow(self):
        x0 = MultivariatePolynomial.variable(F61, 1, 0)
        assert x0 ** 0 == MultivariatePolynomial.constant(F61, 1, 1)
        assert (x0 + 1) ** 3 == x0 * x0 * x0 + 3 * x0 * x0 + 3 * x0 + 1
        with pytest.raises(ValueError):
            x0 ** -1

    def test_evaluate_wrong_length(self, two_var_oracle):
        with pytest.raises(EvaluationError):
            two_var_oracle.evaluate([1])

    def test_evaluate_bad_coordinate(self, two_var_oracle):
        with pytest.raises(EvaluationError) as info:
            two_var_oracle.evaluate(["a", 1])
        assert info.value.point == ("a", 1)
        assert "['a', 1]" in str(info.value)

    def test_repr(self, two_var_oracle):
        assert repr(two_var_oracle) == "MPoly(x0^2 + x0*x1)"


class TestMultilinearExtension:
    def test_matches_table_on_hypercube(self, mle3):
        for i, value in enumerate(mle3.values):
            assert mle3.evaluate(to_bits(i, 3)) == value

    def test_shape(self, mle3):
        assert mle3.num_vars == 3
        assert mle3.degree_bounds == [1, 1, 1]
        assert hypercube_sum(mle3) == F61(31)

    def test_evaluate_off_hypercube(self):
        # f(x1, x2) = 1 + 2·x1 + x2
        mle = MultilinearExtension(F61, [1, 2, 3, 4])
        assert mle.evaluate([0, 1]) == F61(2)
        assert mle.evaluate([5, 7]) == F61(18)

    @pytest.mark.parametrize("values", [[1], [1, 2, 3], [1] * 6])
    def test_bad_table_length(self, values):
        with pytest.raises(ValueError):
            MultilinearExtension(F61, values)

    def test_fold_table(self):
        table = [F61(1), F61(2), F61(3), F61(4)]
        assert fold_table(table, F61(5)) == [11, 12]
        assert fold_table(table, F61(0)) == table[:2]
        assert fold_table(table, F61(1)) == table[2:]


class TestFunctionOracle:
    def test_evaluate(self):
        g = FunctionOracle(F61, lambda a, b: a * b + a, num_vars=2, degree_bounds=[1, 1])
        assert g.evaluate([2, 3]) == F61(8)
        assert hypercube_sum(g) == F61(3)

    def test_failure_becomes_evaluation_error(self):
        def fn(a):
            raise ZeroDivisionError("boom")

        g = FunctionOracle(F61, fn, num_vars=1, degree_bounds=[1])
        with pytest.raises(EvaluationError) as info:
            g.evaluate([1])
        assert isinstance(info.value.cause, ZeroDivisionError)
        assert info.value.point == (F61(1),)

    def test_non_field_result(self):
        g = FunctionOracle(F61, lambda a: "x", num_vars=1, degree_bounds=[0])
        with pytest.raises(EvaluationError):
            g.evaluate([0])

    def test_bounds_must_match_arity(self):
        with pytest.raises(ValueError):
            FunctionOracle(F61, lambda a, b: a, num_vars=2, degree_bounds=[1])
        with pytest.raises(ValueError):
            FunctionOracle(F61, lambda a: a, num_vars=1, degree_bounds=[-1])


# =====================================================================
# Expression parser
# =====================================================================

class TestParseVariables:
    def test_split(self):
        assert parse_variables("x0, x1 x2") == ["x0", "x1", "x2"]

    @pytest.mark.parametrize("text", ["", " , ", "x x", "1x", "a-b"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_variables(text)


class TestParsePolynomial:
    def test_example(self, example_oracle):
        g = parse_polynomial("x + x + x**2", ["x"], F61)
        assert g == example_oracle
        assert g.degree_bounds == [2]

    def test_two_variables(self):
        g = parse_polynomial("2*a*b - (a + 1)**2", ["a", "b"], F61)
        a = MultivariatePolynomial.variable(F61, 2, 0)
        b = MultivariatePolynomial.variable(F61, 2, 1)
        assert g == 2 * a * b - a * a - 2 * a - 1
        assert g.degree_bounds == [2, 1]

    def test_unused_variable_has_zero_bound(self):
        g = parse_polynomial("x", ["x", "y"], F61)
        assert g.num_vars == 2
        assert g.degree_bounds == [1, 0]

    def test_unary_minus(self):
        g = parse_polynomial("-x + +x*x", ["x"], F61)
        assert g.evaluate([3]) == F61(6)

    @pytest.mark.parametrize("source", [
        "x / 2",
        "x ** y",
        "x ** -1",
        "z + 1",
        "x +",
        "1.5 * x",
        "f(x)",
        "True",
        "x % 3",
        "[x]",
    ])
    def test_rejected(self, source):
        with pytest.raises(ValueError):
            parse_polynomial(source, ["x", "y"], F61)

    def test_requires_variables(self):
        with pytest.raises(ValueError):
            parse_polynomial("1", [], F61)
