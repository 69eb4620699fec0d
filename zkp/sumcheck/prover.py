"""
Sum-check Prover
=================

라운드 j에서 Prover는 다음 단변수 다항식을 계산해 보낸다.

    g_j(X) = Σ_{b∈{0,1}^(n-j)} g(r_1, ..., r_{j-1}, X, b)

  ┌──────────────────────────────────────────────────────────┐
  │  라운드 j                                                  │
  │  Prover → Verifier: g_j(X)          (deg g_j ≤ d_j)       │
  │  Verifier → Prover: r_j             (receive_challenge)   │
  └──────────────────────────────────────────────────────────┘

**두 가지 구현**:
  Prover             나이브. 라운드마다 X = 0..d_j 각각에 대해
                     2^(n-j)개의 점에서 오라클을 평가한다. 임의의 차수 상한에 동작.
  MultilinearProver  최적화. 하이퍼큐브 값 2ⁿ개를 한 번 읽고, 챌린지를 받을 때마다
                     테이블을 반으로 접는다(fold). 모든 차수 상한이 1 이하인
                     (다중선형) 오라클에서만 올바르다.

두 Prover 모두 같은 오라클과 챌린지 이력에 대해 결정론적이다.

사용 예시:
    >>> prover = Prover(g)
    >>> H = prover.claimed_sum()
    >>> g1 = prover.compute_round_polynomial(state)
    >>> prover.receive_challenge(r1)
"""

import logging

from zkp.sumcheck.errors import MalformedState
from zkp.sumcheck.field import to_field
from zkp.sumcheck.multivariate import boolean_hypercube, fold_table, hypercube_sum
from zkp.sumcheck.polynomial import UnivariatePolynomial

logger = logging.getLogger(__name__)


class Prover:
    """정직한 나이브 Prover.

    속성:
        oracle: 다변수 오라클 g
        challenges: 지금까지 받은 챌린지 [r_1, ..., r_{j-1}]
    """

    def __init__(self, oracle):
        self.oracle = oracle
        self.field = oracle.field
        self.num_vars = oracle.num_vars
        self.challenges = []

    @property
    def round(self):
        """다음에 계산할 라운드 번호 (1부터)."""
        return len(self.challenges) + 1

    def claimed_sum(self):
        """정직한 주장값 H = Σ_{x∈{0,1}ⁿ} g(x)."""
        return hypercube_sum(self.oracle)

    def compute_round_polynomial(self, state):
        """현재 라운드의 다항식 g_j(X)를 계산한다.

        Args:
            state: ProtocolState (round와 challenges만 읽는다)

        Returns:
            UnivariatePolynomial (X = 0..min(d_j, p - 1) 에서의 값으로 보간)

        Raises:
            MalformedState: state의 라운드/챌린지가 Prover의 이력과 다를 때
            EvaluationError: 오라클 평가 실패
        """
        j = self._check_round(state)
        # F → F 함수의 차수는 p - 1 이하이므로 점은 최대 p개면 충분하다
        degree = min(self.oracle.degree_bound(j - 1), self.field.field_modulus - 1)
        evals = [self._round_evaluation(x) for x in range(degree + 1)]
        poly = UnivariatePolynomial.from_evaluations(evals, self.field)
        logger.debug("라운드 %d 다항식 계산: %r", j, poly)
        return poly

    def _round_evaluation(self, x):
        """g_j(x) = Σ_b g(r_1..r_{j-1}, x, b)."""
        prefix = tuple(self.challenges) + (self.field(x),)
        remaining = self.num_vars - len(prefix)
        total = self.field(0)
        for suffix in boolean_hypercube(remaining):
            total = total + self.oracle.evaluate(prefix + suffix)
        return total

    def receive_challenge(self, challenge):
        """Verifier의 챌린지 r_j를 기록한다. 이후 라운드는 x_j = r_j로 제한된다."""
        if len(self.challenges) >= self.num_vars:
            raise MalformedState(
                f"변수 {self.num_vars}개보다 많은 챌린지를 받을 수 없습니다",
                round=self.round,
            )
        self.challenges.append(to_field(self.field, challenge))
        logger.debug("챌린지 수신 r_%d = %d", len(self.challenges), int(challenge))

    def _check_round(self, state):
        j = state.round
        if j > self.num_vars:
            raise MalformedState(f"라운드 {j}: 프로토콜은 {self.num_vars}라운드뿐입니다", round=j)
        if j != self.round:
            raise MalformedState(
                f"라운드 불일치: 상태 {j}, Prover {self.round}", round=j
            )
        if [int(r) for r in state.challenges] != [int(r) for r in self.challenges]:
            raise MalformedState(f"라운드 {j}: 챌린지 이력이 Prover와 다릅니다", round=j)
        return j


class MultilinearProver(Prover):
    """테이블 접기(folding)로 동작하는 다중선형 오라클 전용 Prover.

    초기화 시 하이퍼큐브 값 T[i] = g(to_bits(i, n))을 한 번 읽는다 (2ⁿ 평가).
    x₁이 MSB이므로 T의 앞쪽 절반은 x₁ = 0, 뒤쪽 절반은 x₁ = 1이다.

      g_j(0) = Σ T[:h],  g_j(1) = Σ T[h:]
      r_j 수신 후: T ← fold(T, r_j)

    전체 비용은 O(2ⁿ) 체 연산이다 (나이브 Prover는 O(n·2ⁿ) 평가).

    Raises:
        ValueError: 차수 상한이 1을 넘는 변수가 있을 때
    """

    def __init__(self, oracle):
        super().__init__(oracle)
        if any(d > 1 for d in oracle.degree_bounds):
            raise ValueError(
                f"MultilinearProver는 다중선형 오라클만 지원합니다: {oracle.degree_bounds}"
            )
        self.table = [oracle.evaluate(point) for point in boolean_hypercube(self.num_vars)]

    def claimed_sum(self):
        total = self.field(0)
        for value in self.table:
            total = total + value
        return total

    def compute_round_polynomial(self, state):
        j = self._check_round(state)
        half = len(self.table) // 2
        low = self.field(0)
        high = self.field(0)
        for value in self.table[:half]:
            low = low + value
        for value in self.table[half:]:
            high = high + value
        if self.oracle.degree_bound(j - 1) == 0:
            poly = UnivariatePolynomial([low], self.field)
        else:
            poly = UnivariatePolynomial([low, high - low], self.field)
        logger.debug("라운드 %d 다항식 계산 (fold): %r", j, poly)
        return poly

    def receive_challenge(self, challenge):
        super().receive_challenge(challenge)
        self.table = fold_table(self.table, self.challenges[-1])
