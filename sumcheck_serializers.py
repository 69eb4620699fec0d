"""
Sum-check 데이터 직렬화/역직렬화 헬퍼
======================================

TinyDB에 저장 가능한 형태로 sum-check 객체를 변환한다.
체 원소, UnivariatePolynomial, 오라클, ProtocolState, Verifier, 라운드 메시지 등.

체 원소는 10진 문자열로 저장한다 (JSON 정수 범위를 넘는 254비트 값 때문).
"""

from zkp.sumcheck.errors import (
    ConsistencyViolation,
    DegreeBoundViolation,
    EvaluationError,
    FinalCheckFailure,
    MalformedState,
)
from zkp.sumcheck.field import field_by_name, field_name
from zkp.sumcheck.multivariate import MultilinearExtension, MultivariatePolynomial
from zkp.sumcheck.polynomial import UnivariatePolynomial
from zkp.sumcheck.protocol import ProtocolState, ProtocolStatus, RoundMessage, SumcheckProtocol
from zkp.sumcheck.prover import Prover
from zkp.sumcheck.verifier import Verifier, VerifierPhase


# ─── 체 원소 ───

def serialize_element(val):
    """체 원소 → str(int)"""
    return str(int(val))


def deserialize_element(field, s):
    """str(int) → 체 원소"""
    return field(int(s))


def serialize_element_list(lst):
    """list[체 원소] → list[str]"""
    return [str(int(v)) for v in lst]


def deserialize_element_list(field, data):
    """list[str] → list[체 원소]"""
    return [field(int(s)) for s in data]


def element_short(val, width=16):
    """표시용: 긴 값은 앞/뒤만 보여준다."""
    s = str(int(val))
    if len(s) <= width:
        return s
    half = width // 2
    return f"{s[:half]}...{s[-half:]}"


# ─── UnivariatePolynomial ───

def serialize_poly(poly):
    """UnivariatePolynomial → 계수 문자열 리스트 (길이 = 차수 + 1)"""
    if poly is None:
        return None
    return [str(int(c)) for c in poly.coeffs]


def deserialize_poly(field, data):
    """계수 문자열 리스트 → UnivariatePolynomial"""
    if data is None:
        return None
    return UnivariatePolynomial([int(s) for s in data], field)


# ─── 오라클 ───

def serialize_oracle(oracle):
    """MultivariatePolynomial / MultilinearExtension → dict"""
    data = {
        "field": field_name(oracle.field),
        "num_vars": oracle.num_vars,
        "degree_bounds": list(oracle.degree_bounds),
    }
    if isinstance(oracle, MultilinearExtension):
        data["kind"] = "mle"
        data["values"] = serialize_element_list(oracle.values)
    elif isinstance(oracle, MultivariatePolynomial):
        data["kind"] = "sparse"
        data["terms"] = [[list(exps), str(int(c))] for exps, c in oracle.terms.items()]
    else:
        raise ValueError(f"직렬화할 수 없는 오라클입니다: {type(oracle).__name__}")
    return data


def deserialize_oracle(data):
    """dict → 오라클"""
    field = field_by_name(data["field"])
    if data["kind"] == "mle":
        return MultilinearExtension(field, [int(v) for v in data["values"]])
    if data["kind"] == "sparse":
        terms = {tuple(exps): int(c) for exps, c in data["terms"]}
        return MultivariatePolynomial(field, data["num_vars"], terms,
                                      degree_bounds=data["degree_bounds"])
    raise ValueError(f"알 수 없는 오라클 종류입니다: {data['kind']!r}")


# ─── 거부 사유 ───

def serialize_rejection(error):
    """SumcheckViolation → dict (reason, round, message, 관련 값)"""
    if error is None:
        return None
    return error.to_dict()


def deserialize_rejection(field, data):
    """dict → SumcheckViolation"""
    if data is None:
        return None
    reason = data["reason"]
    round = data.get("round")
    if reason == DegreeBoundViolation.reason:
        return DegreeBoundViolation(round, int(data["declared"]), int(data["observed"]))
    if reason == ConsistencyViolation.reason:
        return ConsistencyViolation(round, field(int(data["expected"])),
                                    field(int(data["actual"])))
    if reason == FinalCheckFailure.reason:
        return FinalCheckFailure(field(int(data["expected"])), field(int(data["actual"])),
                                 round=round)
    if reason == EvaluationError.reason:
        point = tuple(_restore_coordinate(field, x) for x in data.get("point", []))
        return EvaluationError(point, data.get("cause"), round=round)
    return MalformedState(data.get("message", reason), round=round)


def _restore_coordinate(field, text):
    try:
        return field(int(text))
    except ValueError:
        return text


# ─── ProtocolState ───

def serialize_state(state):
    """ProtocolState → dict"""
    return {
        "num_vars": state.num_vars,
        "claimed_sum": serialize_element(state.claimed_sum),
        "round": state.round,
        "challenges": serialize_element_list(state.challenges),
        "claim": serialize_element(state.claim),
        "status": state.status.value,
        "rejection": serialize_rejection(state.rejection),
    }


def deserialize_state(field, data):
    """dict → ProtocolState (상태 복원)"""
    state = ProtocolState(deserialize_element(field, data["claimed_sum"]), data["num_vars"])
    state.round = data["round"]
    state.challenges = tuple(deserialize_element_list(field, data["challenges"]))
    state.claim = deserialize_element(field, data["claim"])
    state.status = ProtocolStatus(data["status"])
    state.rejection = deserialize_rejection(field, data["rejection"])
    return state


# ─── Verifier ───

def serialize_verifier(verifier):
    """Verifier → dict (오라클과 챌린저는 제외)"""
    return {
        "phase": verifier.phase.value,
        "round": verifier.round,
        "challenges": serialize_element_list(verifier.challenges),
        "polynomial": serialize_poly(verifier.polynomial),
        "rejection": serialize_rejection(verifier.rejection),
    }


def deserialize_verifier(oracle, data, challenger=None):
    """dict → Verifier (주어진 오라클/챌린저로 상태 복원)"""
    verifier = Verifier(oracle, challenger)
    verifier.phase = VerifierPhase(data["phase"])
    verifier.round = data["round"]
    verifier.challenges = deserialize_element_list(oracle.field, data["challenges"])
    verifier.polynomial = deserialize_poly(oracle.field, data["polynomial"])
    verifier.rejection = deserialize_rejection(oracle.field, data["rejection"])
    return verifier


# ─── Prover ───

def restore_prover(oracle, challenges, prover_cls=Prover):
    """저장된 챌린지를 다시 전달하여 Prover를 복원한다 (Prover는 결정론적)."""
    prover = prover_cls(oracle)
    for challenge in challenges:
        prover.receive_challenge(challenge)
    return prover


# ─── 라운드 메시지 ───

def serialize_messages(messages):
    """list[RoundMessage] → list[dict]"""
    return [
        {
            "round": m.round,
            "polynomial": serialize_poly(m.polynomial),
            "challenge": serialize_element(m.challenge),
        }
        for m in messages
    ]


def deserialize_messages(field, data):
    """list[dict] → list[RoundMessage]"""
    return [
        RoundMessage(d["round"], deserialize_poly(field, d["polynomial"]),
                     deserialize_element(field, d["challenge"]))
        for d in data
    ]


# ─── 세션 전체 ───

def serialize_session(protocol):
    """SumcheckProtocol → dict"""
    return {
        "oracle": serialize_oracle(protocol.oracle),
        "state": serialize_state(protocol.state),
        "verifier": serialize_verifier(protocol.verifier),
        "messages": serialize_messages(protocol.messages),
    }


def deserialize_session(data, prover=None):
    """dict → SumcheckProtocol

    prover를 주지 않으면 정직한 Prover를 챌린지 재전달로 복원한다.
    """
    oracle = deserialize_oracle(data["oracle"])
    field = oracle.field
    state = deserialize_state(field, data["state"])

    protocol = SumcheckProtocol.__new__(SumcheckProtocol)
    protocol.oracle = oracle
    protocol.state = state
    protocol.verifier = deserialize_verifier(oracle, data["verifier"])
    protocol.prover = prover or restore_prover(oracle, state.challenges)
    protocol.messages = deserialize_messages(field, data["messages"])
    return protocol
