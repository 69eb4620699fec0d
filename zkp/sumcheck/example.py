"""
Sum-check 데모: g(x) = x + x + x² (n = 1)
==========================================

이 스크립트는 sum-check 프로토콜의 전체 흐름을 시연한다.

실행:
    python -m zkp.sumcheck.example

흐름:
    1. 오라클 구성 (차수 상한은 수식에서 정적으로 결정)
    2. 정직한 Prover: H = 3 → 수락
    3. 부정직한 주장: H = 4 → 라운드 1 일관성 위반으로 거부
    4. 다중선형 확장 + 테이블 접기 Prover (n = 3)
    5. 비대화식 (Fiat-Shamir) 증명 생성/검증
"""

import logging
import os

from zkp.sumcheck.expression import parse_polynomial
from zkp.sumcheck.field import F61
from zkp.sumcheck.fiat_shamir import prove, verify
from zkp.sumcheck.multivariate import MultilinearExtension
from zkp.sumcheck.protocol import SumcheckProtocol
from zkp.sumcheck.prover import MultilinearProver


def main():
    logging.basicConfig(
        level=os.environ.get("SUMCHECK_LOG_LEVEL", "WARNING"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("  Sum-check Protocol Demo")
    print("  g(x) = x + x + x²  over  F_p, p = 2^61 - 1")
    print("=" * 60)

    # ── 1. 오라클 구성 ──
    print("\n[1] 오라클 구성...")
    g = parse_polynomial("x + x + x**2", ["x"], F61)
    print(f"    g = {g}")
    print(f"    변수 개수 n: {g.num_vars}")
    print(f"    차수 상한 d: {g.degree_bounds}")

    # ── 2. 정직한 Prover ──
    print("\n[2] 정직한 Prover (H = g(0) + g(1))...")
    protocol = SumcheckProtocol(g)
    print(f"    주장값 H: {int(protocol.state.claimed_sum)}")
    state = protocol.run(verbose=True)
    for message in protocol.messages:
        print(f"    라운드 {message.round}: g_{message.round} = {message.polynomial}, "
              f"r = {int(message.challenge)}")
    print(f"    결과: {state.status.value}")

    # ── 3. 거짓 주장 ──
    print("\n[3] 거짓 주장 H = 4...")
    cheating = SumcheckProtocol(g, claimed_sum=F61(4))
    state = cheating.run()
    print(f"    결과: {state.status.value} ({state.reason})")
    print(f"    사유: {state.rejection}")
    print(f"    실행된 라운드 수: {len(cheating.messages)}")

    # ── 4. 다중선형 확장 ──
    print("\n[4] 다중선형 확장 (n = 3) + 테이블 접기 Prover...")
    mle = MultilinearExtension(F61, [3, 1, 4, 1, 5, 9, 2, 6])
    protocol = SumcheckProtocol(mle, prover=MultilinearProver(mle))
    state = protocol.run()
    print(f"    H = {int(state.claimed_sum)}, 결과: {state.status.value}")

    # ── 5. Fiat-Shamir ──
    print("\n[5] 비대화식 증명 (Fiat-Shamir)...")
    proof = prove(mle, prover_cls=MultilinearProver)
    print(f"    {proof}")
    for j, poly in enumerate(proof.round_polynomials, start=1):
        print(f"    g_{j} = {poly}")
    print(f"    검증 결과: {verify(mle, proof).status.value}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
