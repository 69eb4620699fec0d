"""
Sum-check Prover Tests
=======================

나이브 Prover와 테이블 접기 MultilinearProver의 라운드 다항식 계산을 테스트한다.

테스트 범위:
  - 라운드 다항식 g_j(X) = Σ_b g(r_1..r_{j-1}, X, b) 의 값
  - 차수 ≤ d_j, g_j(0) + g_j(1) = 현재 주장값
  - 상태/챌린지 이력 불일치 → MalformedState
  - MultilinearProver == Prover (같은 챌린지에서)
"""
import pytest

from zkp.sumcheck.errors import EvaluationError, MalformedState
from zkp.sumcheck.expression import parse_polynomial
from zkp.sumcheck.field import F61
from zkp.sumcheck.multivariate import FunctionOracle, MultivariatePolynomial, hypercube_sum
from zkp.sumcheck.polynomial import UnivariatePolynomial
from zkp.sumcheck.protocol import ProtocolState
from zkp.sumcheck.prover import Prover, MultilinearProver


def _honest_transcript(prover, challenges):
    """주어진 챌린지로 정직하게 모든 라운드를 진행하고 다항식 리스트를 반환한다."""
    state = ProtocolState(prover.claimed_sum(), prover.num_vars)
    polys = []
    for r in challenges:
        poly = prover.compute_round_polynomial(state)
        assert poly.sum_over_boolean() == state.claim
        prover.receive_challenge(F61(r))
        state.advance(F61(r), poly.evaluate(r))
        polys.append(poly)
    return polys


class TestProver:
    def test_claimed_sum(self, example_oracle, two_var_oracle):
        assert Prover(example_oracle).claimed_sum() == F61(3)
        assert Prover(two_var_oracle).claimed_sum() == F61(3)

    def test_single_round_is_oracle_itself(self, example_oracle):
        prover = Prover(example_oracle)
        state = ProtocolState(F61(3), 1)
        poly = prover.compute_round_polynomial(state)
        # g_1(X) = 2X + X²
        assert poly == UnivariatePolynomial([0, 2, 1], F61)

    def test_two_rounds(self, two_var_oracle):
        prover = Prover(two_var_oracle)
        state = ProtocolState(F61(3), 2)

        # g_1(X) = Σ_b (X·b + X²) = X + 2X²
        g1 = prover.compute_round_polynomial(state)
        assert g1 == UnivariatePolynomial([0, 1, 2], F61)
        assert g1.degree <= two_var_oracle.degree_bound(0)

        prover.receive_challenge(F61(5))
        state.advance(F61(5), g1.evaluate(5))

        # g_2(X) = g(5, X) = 5X + 25
        g2 = prover.compute_round_polynomial(state)
        assert g2 == UnivariatePolynomial([25, 5], F61)
        assert g2.sum_over_boolean() == state.claim

    def test_round_polynomials_respect_bounds(self):
        g = parse_polynomial("x*y**3*z + 4*x**2 - y*z + 7", ["x", "y", "z"], F61)
        prover = Prover(g)
        polys = _honest_transcript(prover, [11, 22, 33])
        for j, poly in enumerate(polys):
            assert poly.degree <= g.degree_bound(j)

    def test_deterministic(self, two_var_oracle):
        a = _honest_transcript(Prover(two_var_oracle), [9, 4])
        b = _honest_transcript(Prover(two_var_oracle), [9, 4])
        assert a == b

    def test_round_mismatch(self, two_var_oracle):
        prover = Prover(two_var_oracle)
        state = ProtocolState(F61(3), 2)
        state.advance(F61(5), F61(0))
        with pytest.raises(MalformedState):
            prover.compute_round_polynomial(state)

    def test_challenge_history_mismatch(self, two_var_oracle):
        prover = Prover(two_var_oracle)
        prover.receive_challenge(F61(5))
        state = ProtocolState(F61(3), 2)
        state.advance(F61(6), F61(0))
        with pytest.raises(MalformedState):
            prover.compute_round_polynomial(state)

    def test_no_round_after_last(self, example_oracle):
        prover = Prover(example_oracle)
        prover.receive_challenge(F61(5))
        state = ProtocolState(F61(3), 1)
        state.advance(F61(5), F61(35))
        with pytest.raises(MalformedState):
            prover.compute_round_polynomial(state)

    def test_too_many_challenges(self, example_oracle):
        prover = Prover(example_oracle)
        prover.receive_challenge(F61(1))
        with pytest.raises(MalformedState):
            prover.receive_challenge(F61(2))

    def test_round_property(self, two_var_oracle):
        prover = Prover(two_var_oracle)
        assert prover.round == 1
        prover.receive_challenge(7)
        assert prover.round == 2
        assert isinstance(prover.challenges[0], F61)

    def test_degree_bound_above_field_size(self, F7):
        # F7에서 x⁷ = x (함수로서) → g_1(X) = 4X
        g = MultivariatePolynomial(F7, 1, {(7,): 1, (1,): 3})
        poly = Prover(g).compute_round_polynomial(ProtocolState(F7(4), 1))
        assert poly == UnivariatePolynomial([0, 4], F7)
        assert poly.degree <= F7.field_modulus - 1

    def test_oracle_failure(self):
        def fn(a, b):
            raise RuntimeError("oracle offline")

        g = FunctionOracle(F61, fn, num_vars=2, degree_bounds=[1, 1])
        with pytest.raises(EvaluationError):
            Prover(g).compute_round_polynomial(ProtocolState(F61(0), 2))


class TestMultilinearProver:
    def test_rejects_non_multilinear(self, two_var_oracle):
        with pytest.raises(ValueError):
            MultilinearProver(two_var_oracle)

    def test_claimed_sum(self, mle3):
        prover = MultilinearProver(mle3)
        assert prover.claimed_sum() == F61(31)
        assert prover.claimed_sum() == hypercube_sum(mle3)

    def test_first_round(self, mle3):
        # 앞쪽 절반(x₁ = 0): 3+1+4+1 = 9, 뒤쪽 절반(x₁ = 1): 5+9+2+6 = 22
        poly = MultilinearProver(mle3).compute_round_polynomial(ProtocolState(F61(31), 3))
        assert poly == UnivariatePolynomial([9, 13], F61)

    def test_matches_naive_prover(self, mle3):
        challenges = [12, 345, 6789]
        naive = _honest_transcript(Prover(mle3), challenges)
        folded = _honest_transcript(MultilinearProver(mle3), challenges)
        assert naive == folded

    def test_matches_naive_prover_sparse_multilinear(self):
        g = parse_polynomial("3*x*y*z - 2*x*z + y + 5", ["x", "y", "z"], F61)
        challenges = [2, 3, 4]
        assert (_honest_transcript(Prover(g), challenges)
                == _honest_transcript(MultilinearProver(g), challenges))

    def test_zero_degree_variable(self):
        g = parse_polynomial("x + 1", ["x", "y"], F61)
        assert g.degree_bounds == [1, 0]
        challenges = [10, 20]
        naive = _honest_transcript(Prover(g), challenges)
        folded = _honest_transcript(MultilinearProver(g), challenges)
        assert naive == folded
        assert folded[1].degree == 0

    def test_table_folds(self, mle3):
        prover = MultilinearProver(mle3)
        assert len(prover.table) == 8
        prover.receive_challenge(F61(2))
        assert len(prover.table) == 4
        assert prover.table[0] == mle3.evaluate([2, 0, 0])
