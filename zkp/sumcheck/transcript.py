"""
Sum-check Fiat-Shamir Transcript
=================================

비대화식(non-interactive) sum-check를 위한 Fiat-Shamir 해싱 구현.

**대화식 sum-check**:
  라운드 j마다
  - Prover가 단변수 다항식 g_j(X)를 보내면
  - Verifier가 랜덤 챌린지 r_j를 보낸다

**Fiat-Shamir 변환**:
  r_j를 Verifier의 난수 대신 지금까지의 모든 메시지의 해시로 만든다.
  - 트랜스크립트 앞부분: 도메인 레이블, 변수 개수 n, 차수 상한, 주장값 H
  - 라운드 j: g_j의 계수를 흡수(absorb)한 뒤 r_j를 짜낸다(squeeze)
  Prover와 Verifier가 같은 순서로 흡수하면 같은 챌린지를 얻는다.

**인코딩**:
  - 체 원소: 고정 폭 빅엔디안 (field.element_to_bytes)
  - 다항식: 계수 개수(4바이트 빅엔디안) + 각 계수
  - 정수: 8바이트 빅엔디안

사용 예시:
    >>> t = Transcript()
    >>> t.append_scalar(b"claimed_sum", F61(3))
    >>> t.append_polynomial(b"round_poly", g1)
    >>> r1 = t.challenge_scalar(b"challenge", F61)
"""

import hashlib

from zkp.sumcheck.field import element_to_bytes


class Transcript:
    """SHA-256 기반 Fiat-Shamir 트랜스크립트.

    해시 상태를 누적하여 결정론적이면서 예측 불가능한 챌린지를 생성한다.

    속성:
        state: 현재까지 누적된 해시 입력 바이트열

    보안 주의:
        - 모든 데이터는 레이블(label)과 함께 추가하여 도메인 분리 보장
        - 챌린지는 모든 이전 메시지(주장값 포함)에 의존해야 한다.
          주장값 H를 흡수하지 않으면 Prover가 챌린지를 보고 H를 고를 수 있다.
    """

    def __init__(self, label=b"sumcheck"):
        self.state = bytearray()
        self.state.extend(label)

    def absorb(self, label, data):
        """임의의 바이트열 메시지를 트랜스크립트에 추가한다."""
        self.state.extend(label)
        self.state.extend(len(data).to_bytes(4, "big"))
        self.state.extend(data)

    def append_int(self, label, value):
        """0 이상의 정수(변수 개수, 차수 상한 등)를 추가한다."""
        self.absorb(label, int(value).to_bytes(8, "big"))

    def append_scalar(self, label, scalar):
        """체 원소를 고정 폭 빅엔디안으로 추가한다."""
        self.absorb(label, element_to_bytes(scalar))

    def append_polynomial(self, label, poly):
        """라운드 다항식을 계수 리스트로 추가한다.

        계수 개수를 먼저 넣어 메시지 경계가 모호하지 않게 한다.
        다항식은 항상 정규화되어 있으므로 같은 다항식은 같은 인코딩을 가진다.
        """
        self.state.extend(label)
        self.state.extend(len(poly.coeffs).to_bytes(4, "big"))
        for coeff in poly.coeffs:
            self.state.extend(element_to_bytes(coeff))

    def challenge_scalar(self, label, field):
        """트랜스크립트로부터 field의 챌린지 원소를 생성한다.

        현재 상태를 SHA-256으로 해싱하여 체 원소를 도출한다.
        생성된 해시는 상태에 다시 추가된다 (체이닝).

        Returns:
            field의 원소
        """
        self.state.extend(label)
        h = hashlib.sha256(bytes(self.state)).digest()
        challenge = field(int.from_bytes(h, "big") % field.field_modulus)
        self.state.extend(h)
        return challenge

    squeeze_challenge = challenge_scalar

    def fork(self):
        """현재 상태를 복사한 새 트랜스크립트."""
        clone = Transcript.__new__(Transcript)
        clone.state = bytearray(self.state)
        return clone
