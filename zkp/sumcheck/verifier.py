"""
Sum-check Verifier
===================

Verifier는 다음 상태 기계로 동작한다.

    AWAITING_POLYNOMIAL(j) ──check──▶ AWAITING_CHALLENGE(j) ──sample──┐
          ▲                                                          │
          └──────────────────────── j < n ◀──────────────────────────┤
                                                                     │ j = n
                                    FINAL_CHECK ◀────────────────────┘
                                         │
                              ACCEPTED ◀─┴─▶ REJECTED

어떤 단계에서든 검사가 실패하면 즉시, 영구적으로 REJECTED가 되며
그 뒤의 모든 호출은 MalformedState를 발생시킨다.

**라운드 검사** (check_round_polynomial):
  1. deg(g_j) ≤ d_j                    → 아니면 DegreeBoundViolation
  2. g_j(0) + g_j(1) = c_j             → 아니면 ConsistencyViolation
  여기서 c_1 = H, c_{j+1} = g_j(r_j).

**최종 검사** (final_check):
  오라클을 직접 질의하는 유일한 단계.
  g(r_1, ..., r_n) = g_n(r_n)          → 아니면 FinalCheckFailure

**건전성**:
  거짓 주장이 통과할 확률 ≤ (d_1 + ... + d_n) / |F|  (Schwartz–Zippel)
"""

import enum
import logging

from zkp.sumcheck.challenger import RandomChallenger
from zkp.sumcheck.errors import (
    ConsistencyViolation,
    DegreeBoundViolation,
    EvaluationError,
    FinalCheckFailure,
    MalformedState,
)
from zkp.sumcheck.field import to_field

logger = logging.getLogger(__name__)


class VerifierPhase(enum.Enum):
    AWAITING_POLYNOMIAL = "awaiting_polynomial"
    AWAITING_CHALLENGE = "awaiting_challenge"
    FINAL_CHECK = "final_check"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


TERMINAL_PHASES = (VerifierPhase.ACCEPTED, VerifierPhase.REJECTED)


class Verifier:
    """sum-check Verifier.

    속성:
        oracle: 다변수 오라클 g (최종 검사와 차수 상한에만 사용)
        challenger: 챌린지 소스 (기본값: RandomChallenger)
        phase: 현재 VerifierPhase
        round: 현재 라운드 번호 (1..n)
        challenges: 지금까지 뽑은 챌린지 [r_1, ...]
        polynomial: 마지막으로 수락한 라운드 다항식
        rejection: 거부 사유 예외 (REJECTED일 때)
    """

    def __init__(self, oracle, challenger=None):
        self.oracle = oracle
        self.field = oracle.field
        self.num_vars = oracle.num_vars
        self.challenger = challenger or RandomChallenger()
        self.phase = VerifierPhase.AWAITING_POLYNOMIAL
        self.round = 1
        self.challenges = []
        self.polynomial = None
        self.rejection = None

    @property
    def is_terminal(self):
        return self.phase in TERMINAL_PHASES

    def check_round_polynomial(self, round, poly, expected_claim):
        """라운드 round의 다항식을 검사한다.

        Args:
            round: 라운드 번호 j (1부터)
            poly: Prover가 보낸 UnivariatePolynomial g_j
            expected_claim: 이번 라운드의 주장값 c_j

        Raises:
            DegreeBoundViolation, ConsistencyViolation, MalformedState
        """
        self._require(VerifierPhase.AWAITING_POLYNOMIAL)
        if round != self.round:
            self._reject(MalformedState(
                f"라운드 불일치: 받은 라운드 {round}, 기대 라운드 {self.round}",
                round=self.round,
            ))
        if poly.field.field_modulus != self.field.field_modulus:
            self._reject(MalformedState(
                f"라운드 {round}: 다항식이 다른 체 위에 있습니다", round=round
            ))

        # ── 1. 차수 상한 ──
        declared = self.oracle.degree_bound(round - 1)
        if poly.degree > declared:
            self._reject(DegreeBoundViolation(round, declared, poly.degree))

        # ── 2. 일관성: g_j(0) + g_j(1) = c_j ──
        expected = to_field(self.field, expected_claim)
        actual = poly.sum_over_boolean()
        if actual != expected:
            self._reject(ConsistencyViolation(round, expected, actual))

        self.polynomial = poly
        self.challenger.observe(round, poly)
        self.phase = VerifierPhase.AWAITING_CHALLENGE
        logger.debug("라운드 %d 다항식 수락: %r", round, poly)

    def sample_challenge(self):
        """수락된 라운드 다항식에 대한 챌린지 r_j를 뽑는다.

        Returns:
            체 원소 r_j

        Raises:
            MalformedState: 다항식이 수락되기 전에 호출될 때
            RandomnessUnavailable: 난수 소스가 없을 때 (그대로 전파)
        """
        self._require(VerifierPhase.AWAITING_CHALLENGE)
        challenge = self.challenger.challenge(self.field)
        self.challenges.append(challenge)
        logger.debug("라운드 %d 챌린지 r = %d", self.round, int(challenge))
        if self.round == self.num_vars:
            self.phase = VerifierPhase.FINAL_CHECK
        else:
            self.round += 1
            self.phase = VerifierPhase.AWAITING_POLYNOMIAL
        return challenge

    @property
    def next_claim(self):
        """c_{j+1} = g_j(r_j). 챌린지를 뽑은 뒤에만 정의된다."""
        if self.polynomial is None or len(self.challenges) == 0:
            raise MalformedState("챌린지를 뽑기 전에는 다음 주장값이 없습니다", round=self.round)
        return self.polynomial.evaluate(self.challenges[-1])

    def final_check(self):
        """g(r_1, ..., r_n)과 g_n(r_n)을 비교한다.

        Returns:
            True (수락)

        Raises:
            FinalCheckFailure, EvaluationError, MalformedState
        """
        self._require(VerifierPhase.FINAL_CHECK)
        try:
            expected = self.oracle.evaluate(self.challenges)
        except EvaluationError as exc:
            exc.round = self.round
            self._reject(exc)
        actual = self.polynomial.evaluate(self.challenges[-1])
        if expected != actual:
            self._reject(FinalCheckFailure(expected, actual, round=self.round))
        self.phase = VerifierPhase.ACCEPTED
        logger.info("Verifier 수락 (n = %d)", self.num_vars)
        return True

    def _require(self, phase):
        if self.is_terminal:
            raise MalformedState(
                f"Verifier가 이미 종료되었습니다 ({self.phase.value})", round=self.round
            )
        if self.phase is not phase:
            self._reject(MalformedState(
                f"잘못된 상태 전이: 현재 {self.phase.value}, 필요 {phase.value}",
                round=self.round,
            ))

    def _reject(self, error):
        self.phase = VerifierPhase.REJECTED
        self.rejection = error
        logger.warning("Verifier 거부 (%s): %s", error.reason, error)
        raise error
