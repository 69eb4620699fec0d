"""
Sum-check 오류 분류(taxonomy)
==============================

프로토콜 위반은 모두 세션을 종료시키는 치명적 사건이다.
한 번 잡힌 위반의 유일한 의미 있는 결과는 Prover 주장의 거부(Reject)이며,
부분 복구나 재시도는 하지 않는다.

  SumcheckError
  ├── SumcheckViolation          ← 세션 거부 사유 (reason 코드 보유)
  │   ├── DegreeBoundViolation   deg(g_j) > d_j
  │   ├── ConsistencyViolation   g_j(0) + g_j(1) ≠ 기대 주장값
  │   ├── FinalCheckFailure      g(r_1..r_n) ≠ g_n(r_n)
  │   ├── MalformedState         잘못된 상태 전이 (라운드 불일치 등)
  │   └── EvaluationError        오라클 평가 실패
  └── RandomnessUnavailable      난수 소스 없음 (설정 오류, 위반 아님)

각 위반은 진단용으로 라운드 번호와 관련 값을 함께 보관한다.
"""


class SumcheckError(Exception):
    """sum-check 모듈의 최상위 예외."""


class SumcheckViolation(SumcheckError):
    """세션을 거부(Rejected)로 끝내는 프로토콜 위반.

    속성:
        reason: 기계가 읽을 수 있는 사유 코드 (예: "consistency_violation")
        round: 위반이 발생한 라운드 (1부터), 알 수 없으면 None
    """

    reason = "violation"

    def __init__(self, message, round=None):
        super().__init__(message)
        self.round = round

    def to_dict(self):
        """진단용 dict 표현 (값은 문자열로 변환)."""
        data = {"reason": self.reason, "round": self.round, "message": str(self)}
        for key, value in self._details().items():
            data[key] = None if value is None else str(int(value))
        return data

    def _details(self):
        return {}


class DegreeBoundViolation(SumcheckViolation):
    """라운드 다항식의 차수가 선언된 상한 d_j를 넘었다."""

    reason = "degree_bound_violation"

    def __init__(self, round, declared, observed):
        super().__init__(
            f"라운드 {round}: 다항식 차수 {observed}가 선언된 상한 {declared}를 초과합니다",
            round=round,
        )
        self.declared = declared
        self.observed = observed

    def _details(self):
        return {"declared": self.declared, "observed": self.observed}


class ConsistencyViolation(SumcheckViolation):
    """g_j(0) + g_j(1)이 기대 주장값과 다르다."""

    reason = "consistency_violation"

    def __init__(self, round, expected, actual):
        super().__init__(
            f"라운드 {round}: g(0) + g(1) = {int(actual)}, 기대값 {int(expected)}",
            round=round,
        )
        self.expected = expected
        self.actual = actual

    def _details(self):
        return {"expected": self.expected, "actual": self.actual}


class FinalCheckFailure(SumcheckViolation):
    """마지막 오라클 질의 g(r_1, ..., r_n)이 g_n(r_n)과 다르다."""

    reason = "final_check_failure"

    def __init__(self, expected, actual, round=None):
        super().__init__(
            f"최종 검사 실패: g(r) = {int(expected)}, g_n(r_n) = {int(actual)}",
            round=round,
        )
        self.expected = expected
        self.actual = actual

    def _details(self):
        return {"expected": self.expected, "actual": self.actual}


class MalformedState(SumcheckViolation):
    """허용되지 않는 상태 전이.

    예: 다항식이 수락되기 전에 챌린지를 요청, 라운드 번호 불일치,
    종료된 프로토콜을 다시 진행.
    """

    reason = "malformed_state"


class EvaluationError(SumcheckViolation):
    """오라클이 요청된 점에서 평가하지 못했다."""

    reason = "evaluation_error"

    def __init__(self, point, cause=None, round=None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"오라클 평가 실패 (점 {[_coordinate(x) for x in point]}){detail}", round=round
        )
        self.point = tuple(point)
        self.cause = cause

    def to_dict(self):
        data = super().to_dict()
        data["point"] = [str(_coordinate(x)) for x in self.point]
        data["cause"] = None if self.cause is None else str(self.cause)
        return data


def _coordinate(x):
    """진단용 좌표 표현: 체 원소와 정수는 int, 그 밖의 값은 그대로."""
    try:
        return int(x)
    except (TypeError, ValueError):
        return x


class RandomnessUnavailable(SumcheckError):
    """챌린지용 난수 소스를 사용할 수 없다 (치명적 설정 오류).

    프로토콜 위반이 아니므로 세션을 거부로 기록하지 않고 그대로 전파한다.
    """
