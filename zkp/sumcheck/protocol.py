"""
Sum-check 프로토콜 오케스트레이터
==================================

대화식 sum-check의 라운드 진행과 최종 판정을 관리한다.

  ┌──────────────────────────────────────────────────────────────┐
  │  라운드 j = 1..n                                               │
  │    1. Prover   : g_j ← compute_round_polynomial(state)        │
  │    2. Verifier : check_round_polynomial(j, g_j, c_j)          │
  │    3. Verifier : r_j ← sample_challenge()                     │
  │    4. Prover   : receive_challenge(r_j)                       │
  │    5. state    : c_{j+1} = g_j(r_j), 라운드 + 1               │
  ├──────────────────────────────────────────────────────────────┤
  │  라운드 n 이후                                                  │
  │    Verifier : final_check()  g(r_1..r_n) = g_n(r_n) ?         │
  └──────────────────────────────────────────────────────────────┘

어느 단계에서든 위반이 잡히면 ProtocolState는 즉시 REJECTED가 되고
루프는 그 자리에서 멈춘다. 이후 라운드는 절대 실행되지 않는다.

**ProtocolState 소유권**:
  상태는 오케스트레이터가 단독으로 소유하고 라운드마다 한 번 갱신한다.
  Prover는 라운드 번호와 챌린지만 읽는다. Prover와 Verifier 사이에는
  불변 메시지(다항식, 챌린지)만 오간다.

사용 예시:
    >>> protocol = SumcheckProtocol(g)                 # H는 정직한 Prover가 계산
    >>> state = protocol.run()
    >>> state.status                                    # ProtocolStatus.ACCEPTED
    >>> SumcheckProtocol(g, claimed_sum=F61(4)).run().reason
    'consistency_violation'
"""

import collections
import enum
import logging

from zkp.sumcheck.errors import MalformedState, SumcheckViolation
from zkp.sumcheck.field import to_field
from zkp.sumcheck.prover import Prover
from zkp.sumcheck.verifier import Verifier, VerifierPhase

logger = logging.getLogger(__name__)


class ProtocolStatus(enum.Enum):
    RUNNING = "running"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# 한 라운드의 공개 메시지 (진단/표시용)
RoundMessage = collections.namedtuple("RoundMessage", ["round", "polynomial", "challenge"])


class ProtocolState:
    """오케스트레이터가 소유하는 프로토콜 상태.

    속성:
        num_vars: 라운드 수 n
        claimed_sum: 주장값 H
        round: 현재 라운드 r (1..n+1)
        challenges: 받은 챌린지 튜플 (r_1, ..., r_{r-1})
        claim: 현재 라운드의 기대 주장값 c_r
        status: ProtocolStatus
        rejection: 거부 사유 예외 (REJECTED일 때)

    종료(ACCEPTED/REJECTED) 이후에는 읽기 전용이다.
    """

    def __init__(self, claimed_sum, num_vars):
        self.num_vars = num_vars
        self.claimed_sum = claimed_sum
        self.round = 1
        self.challenges = ()
        self.claim = claimed_sum
        self.status = ProtocolStatus.RUNNING
        self.rejection = None

    @property
    def is_terminal(self):
        return self.status is not ProtocolStatus.RUNNING

    @property
    def reason(self):
        """거부 사유 코드 (예: "degree_bound_violation"), 거부가 아니면 None."""
        return self.rejection.reason if self.rejection is not None else None

    def advance(self, challenge, next_claim):
        """라운드를 완료한다: 챌린지 추가, 주장값 갱신, 라운드 + 1."""
        self._require_running()
        if self.round > self.num_vars:
            raise MalformedState(
                f"라운드 {self.round}: {self.num_vars}라운드를 넘어 진행할 수 없습니다",
                round=self.round,
            )
        self.challenges = self.challenges + (challenge,)
        self.claim = next_claim
        self.round += 1

    def accept(self):
        self._require_running()
        if self.round != self.num_vars + 1:
            raise MalformedState(
                f"{self.num_vars}라운드를 모두 마치기 전에 수락할 수 없습니다",
                round=self.round,
            )
        self.status = ProtocolStatus.ACCEPTED

    def reject(self, error):
        self._require_running()
        if error.round is None:
            error.round = min(self.round, self.num_vars)
        self.status = ProtocolStatus.REJECTED
        self.rejection = error

    def _require_running(self):
        if self.is_terminal:
            raise MalformedState(
                f"종료된 상태({self.status.value})는 변경할 수 없습니다", round=self.round
            )

    def __repr__(self):
        return (f"ProtocolState(round={self.round}, claim={int(self.claim)}, "
                f"challenges={[int(r) for r in self.challenges]}, "
                f"status={self.status.value})")


class SumcheckProtocol:
    """대화식 sum-check 오케스트레이터.

    Args:
        oracle: 다변수 오라클 g
        prover: Prover 객체 (기본값: 정직한 Prover(oracle))
        verifier: Verifier 객체 (기본값: Verifier(oracle, challenger))
        claimed_sum: 주장값 H (기본값: Prover가 계산한 정직한 합)
        challenger: verifier를 직접 넘기지 않을 때 쓸 챌린지 소스

    예시:
        >>> protocol = SumcheckProtocol(g, prover=MultilinearProver(g))
        >>> protocol.advance_round()     # 한 라운드씩 진행
        >>> protocol.run()               # 끝까지 진행
    """

    def __init__(self, oracle, prover=None, verifier=None, claimed_sum=None,
                 challenger=None):
        self.oracle = oracle
        self.prover = prover or Prover(oracle)
        self.verifier = verifier or Verifier(oracle, challenger)
        if claimed_sum is None:
            claimed_sum = self.prover.claimed_sum()
        self.state = ProtocolState(to_field(oracle.field, claimed_sum), oracle.num_vars)
        self.messages = []

    @property
    def num_rounds(self):
        return self.oracle.num_vars

    def advance_round(self):
        """프로토콜을 한 라운드 진행한다. 마지막 라운드 뒤에는 최종 검사까지 한다.

        Returns:
            ProtocolState

        Raises:
            MalformedState: 이미 종료된 프로토콜을 진행하려 할 때
            RandomnessUnavailable: 난수 소스가 없을 때. 상태는 그대로 남고,
                다시 호출하면 같은 라운드의 챌린지 추출부터 이어서 진행한다.
        """
        state = self.state
        if state.is_terminal:
            raise MalformedState(
                f"sum-check 프로토콜이 이미 종료되었습니다 ({state.status.value})",
                round=state.round,
            )
        j = state.round
        try:
            if self.verifier.phase is VerifierPhase.AWAITING_CHALLENGE:
                # 다항식은 이미 수락됨, 챌린지 추출만 다시 한다
                poly = self.verifier.polynomial
            else:
                poly = self.prover.compute_round_polynomial(state)
                self.verifier.check_round_polynomial(j, poly, state.claim)
            challenge = self.verifier.sample_challenge()
            next_claim = self.verifier.next_claim
            self.prover.receive_challenge(challenge)
            state.advance(challenge, next_claim)
            self.messages.append(RoundMessage(j, poly, challenge))

            if j == self.num_rounds:
                self.verifier.final_check()
                state.accept()
                logger.info("sum-check 수락: H = %d, n = %d",
                            int(state.claimed_sum), self.num_rounds)
        except SumcheckViolation as error:
            state.reject(error)
            logger.warning("sum-check 거부 (라운드 %s, %s): %s",
                           error.round, error.reason, error)
        return state

    def run(self, verbose=False):
        """종료될 때까지 라운드를 진행한다. 거부되는 즉시 멈춘다.

        Args:
            verbose: True면 매 라운드 전에 프로토콜 상태를 INFO로 기록한다.
        """
        while not self.state.is_terminal:
            if verbose:
                logger.info("진행: %r", self)
            self.advance_round()
        return self.state

    advance_to_end = run

    def __repr__(self):
        return (f"SumcheckProtocol(round: {self.state.round}, "
                f"H: {int(self.state.claimed_sum)}, "
                f"challenges: {[int(r) for r in self.state.challenges]}, "
                f"status: {self.state.status.value})")
