"""
챌린지 소스 (Challenger)
=========================

Verifier가 라운드마다 뽑는 챌린지 r_j의 출처를 추상화한다.

  RandomChallenger      대화식: OS 엔트로피(secrets)로 F에서 균등 추출
  TranscriptChallenger  비대화식: Fiat-Shamir 트랜스크립트 해시

두 구현 모두 같은 두 메서드를 가진다.
  observe(round, poly)   수락된 라운드 다항식을 본다 (트랜스크립트 흡수)
  challenge(field)       다음 챌린지를 만든다

건전성 상한 (Σd_j)/|F|은 챌린지가 라운드마다 균등하고 독립일 때만 성립한다.
"""

from zkp.sumcheck.field import random_element


class RandomChallenger:
    """암호학적으로 안전한 난수 챌린지 (대화식 sum-check 기본값)."""

    def observe(self, round, poly):
        pass

    def challenge(self, field):
        return random_element(field)


class TranscriptChallenger:
    """Fiat-Shamir 트랜스크립트에서 챌린지를 짜내는 소스.

    Args:
        transcript: 주장값 등 공개 입력을 이미 흡수한 Transcript
    """

    def __init__(self, transcript):
        self.transcript = transcript

    def observe(self, round, poly):
        self.transcript.append_polynomial(b"round_poly", poly)

    def challenge(self, field):
        return self.transcript.challenge_scalar(b"challenge", field)
