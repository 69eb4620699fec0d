"""
비대화식 Sum-check (Fiat-Shamir 변환)
======================================

대화식 프로토콜의 Verifier 난수를 트랜스크립트 해시로 바꾼다.
증명은 주장값 H와 n개의 라운드 다항식으로만 이루어진다.

**트랜스크립트 순서** (Prover와 Verifier가 동일):
  1. 도메인 레이블 b"sumcheck"
  2. 체 위수 p, 변수 개수 n, 차수 상한 d_1..d_n
  3. 주장값 H
  4. 라운드 j마다: g_j 흡수 → r_j 짜내기

검증은 같은 Verifier 상태 기계를 TranscriptChallenger로 돌려서 수행한다.
따라서 차수/일관성/최종 검사 규칙은 대화식 버전과 완전히 같다.

사용 예시:
    >>> proof = prove(g)
    >>> verify(g, proof).status       # ProtocolStatus.ACCEPTED
"""

from zkp.sumcheck.challenger import TranscriptChallenger
from zkp.sumcheck.errors import MalformedState, SumcheckViolation
from zkp.sumcheck.field import byte_length, to_field
from zkp.sumcheck.protocol import ProtocolState
from zkp.sumcheck.prover import Prover
from zkp.sumcheck.transcript import Transcript
from zkp.sumcheck.verifier import Verifier


class SumcheckProof:
    """비대화식 sum-check 증명.

    속성:
        claimed_sum: 주장값 H
        round_polynomials: [g_1, ..., g_n]
    """

    def __init__(self, claimed_sum, round_polynomials):
        self.claimed_sum = claimed_sum
        self.round_polynomials = list(round_polynomials)

    def __repr__(self):
        return (f"SumcheckProof(H={int(self.claimed_sum)}, "
                f"rounds={len(self.round_polynomials)})")


def initial_transcript(oracle, claimed_sum):
    """공개 입력(체, n, 차수 상한, H)을 흡수한 트랜스크립트를 만든다."""
    field = oracle.field
    transcript = Transcript(b"sumcheck")
    transcript.absorb(
        b"field_modulus", field.field_modulus.to_bytes(byte_length(field), "big")
    )
    transcript.append_int(b"num_vars", oracle.num_vars)
    for bound in oracle.degree_bounds:
        transcript.append_int(b"degree_bound", bound)
    transcript.append_scalar(b"claimed_sum", to_field(field, claimed_sum))
    return transcript


def prove(oracle, claimed_sum=None, prover_cls=Prover):
    """비대화식 sum-check 증명을 생성한다.

    Args:
        oracle: 다변수 오라클 g
        claimed_sum: 주장값 H (기본값: 정직한 합)
        prover_cls: Prover 또는 MultilinearProver

    Returns:
        SumcheckProof
    """
    prover = prover_cls(oracle)
    if claimed_sum is None:
        claimed_sum = prover.claimed_sum()
    claimed_sum = to_field(oracle.field, claimed_sum)

    challenger = TranscriptChallenger(initial_transcript(oracle, claimed_sum))
    state = ProtocolState(claimed_sum, oracle.num_vars)
    polys = []
    for j in range(1, oracle.num_vars + 1):
        poly = prover.compute_round_polynomial(state)
        challenger.observe(j, poly)
        challenge = challenger.challenge(oracle.field)
        prover.receive_challenge(challenge)
        state.advance(challenge, poly.evaluate(challenge))
        polys.append(poly)
    return SumcheckProof(claimed_sum, polys)


def verify(oracle, proof):
    """비대화식 증명을 검증한다.

    Returns:
        ProtocolState: ACCEPTED 또는 REJECTED (rejection에 사유)
    """
    claimed_sum = to_field(oracle.field, proof.claimed_sum)
    state = ProtocolState(claimed_sum, oracle.num_vars)
    if len(proof.round_polynomials) != oracle.num_vars:
        state.reject(MalformedState(
            f"라운드 다항식 개수 {len(proof.round_polynomials)} != 변수 개수 {oracle.num_vars}",
            round=1,
        ))
        return state

    verifier = Verifier(oracle, TranscriptChallenger(initial_transcript(oracle, claimed_sum)))
    try:
        for j, poly in enumerate(proof.round_polynomials, start=1):
            verifier.check_round_polynomial(j, poly, state.claim)
            verifier.sample_challenge()
            state.advance(verifier.challenges[-1], verifier.next_claim)
        verifier.final_check()
        state.accept()
    except SumcheckViolation as error:
        state.reject(error)
    return state
