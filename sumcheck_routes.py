"""
Sum-check Flask Blueprint — 대화식 sum-check 엔드포인트
=========================================================

학습 페이지 1개 + 단계별 POST 엔드포인트 + 외부 Prover용 JSON 전송 계층.

  GET  /sumcheck                  프로토콜 페이지
  POST /sumcheck/load-example     g(x) = x + x + x² (F61) 로드
  POST /sumcheck/setup            수식/변수/체/주장값으로 세션 시작
  POST /sumcheck/round            정직한 Prover로 한 라운드 진행
  POST /sumcheck/run              끝까지 진행
  POST /sumcheck/clear            세션 삭제

  GET  /sumcheck/api/state        세션 상태 (JSON)
  POST /sumcheck/api/round        외부 Prover가 라운드 다항식 제출 (JSON)

세션은 요청마다 DB에서 역직렬화하여 Prover/Verifier를 재구성한다.
"""

import logging

from flask import Blueprint, jsonify, redirect, render_template, request, url_for
from tinydb import Query

from zkp.sumcheck.errors import MalformedState
from zkp.sumcheck.expression import parse_polynomial, parse_variables
from zkp.sumcheck.field import field_by_name, FIELDS
from zkp.sumcheck.multivariate import hypercube_sum
from zkp.sumcheck.polynomial import UnivariatePolynomial
from zkp.sumcheck.protocol import SumcheckProtocol

from sumcheck_serializers import (
    serialize_session, deserialize_session,
    serialize_element, serialize_poly, serialize_rejection,
    element_short,
)

logger = logging.getLogger(__name__)

sumcheck_bp = Blueprint('sumcheck', __name__, url_prefix='/sumcheck')

DATA = Query()

# DB는 app.py에서 주입
DB = None

# 2ⁿ 평가 폭주 방지
MAX_NUM_VARS = 10

# 변수별 차수 상한 (라운드마다 d_j + 1개 점을 보간)
MAX_DEGREE = 32

DEFAULT_FIELD = "f61"

EXAMPLE_EXPRESSION = "x + x + x**2"
EXAMPLE_VARIABLES = "x"


def init_sumcheck_bp(db):
    """app.py에서 DB를 주입받는다."""
    global DB
    DB = db


# ─── DB 헬퍼 ───

def db_get(key):
    """DB에서 키로 데이터를 조회한다."""
    result = DB.search(DATA.type == key)
    if not result:
        return None
    return result[0].get("data")


def db_set(key, data):
    """DB에 키로 데이터를 저장한다."""
    DB.upsert({"type": key, "data": data}, DATA.type == key)


def db_remove(key):
    """DB에서 키를 삭제한다."""
    DB.remove(DATA.type == key)


def db_remove_prefix(prefix):
    """prefix로 시작하는 모든 키를 삭제한다."""
    DB.remove(DATA.type.test(lambda t: t.startswith(prefix)))


# ─── 세션 헬퍼 ───

def _start_session(expression, variables_text, field_key, claimed_text):
    """수식을 파싱해 새 세션을 만들고 저장한다.

    Raises:
        ValueError: 입력이 잘못되었을 때
    """
    field = field_by_name(field_key)
    variables = parse_variables(variables_text)
    if len(variables) > MAX_NUM_VARS:
        raise ValueError(f"변수는 최대 {MAX_NUM_VARS}개까지 허용됩니다")
    oracle = parse_polynomial(expression, variables, field)
    if max(oracle.degree_bounds) > MAX_DEGREE:
        raise ValueError(
            f"변수별 차수는 최대 {MAX_DEGREE}까지 허용됩니다: {list(oracle.degree_bounds)}"
        )

    honest_sum = hypercube_sum(oracle)
    claimed_text = (claimed_text or "").strip()
    claimed_sum = field(int(claimed_text)) if claimed_text else honest_sum

    protocol = SumcheckProtocol(oracle, claimed_sum=claimed_sum)
    db_remove_prefix("sumcheck.")
    db_set("sumcheck.session", serialize_session(protocol))
    db_set("sumcheck.setup", {
        "expression": expression,
        "variables": variables,
        "field": field_key,
        "honest_sum": serialize_element(honest_sum),
        "claimed_sum": serialize_element(claimed_sum),
        "degree_bounds": list(oracle.degree_bounds),
    })
    logger.info("세션 시작: g = %r, H = %d", oracle, int(claimed_sum))


def _load_protocol(prover=None):
    data = db_get("sumcheck.session")
    if data is None:
        return None
    return deserialize_session(data, prover=prover)


def _save_protocol(protocol):
    db_set("sumcheck.session", serialize_session(protocol))


def _state_summary(protocol):
    """JSON/템플릿 표시용 요약."""
    state = protocol.state
    return {
        "num_vars": state.num_vars,
        "round": state.round,
        "status": state.status.value,
        "claimed_sum": serialize_element(state.claimed_sum),
        "claim": serialize_element(state.claim),
        "challenges": [serialize_element(r) for r in state.challenges],
        "degree_bounds": list(protocol.oracle.degree_bounds),
        "rejection": serialize_rejection(state.rejection),
    }


def _rounds_table(protocol):
    rows = []
    for m in protocol.messages:
        rows.append({
            "round": m.round,
            "polynomial": repr(m.polynomial),
            "degree": m.polynomial.degree,
            "bound": protocol.oracle.degree_bound(m.round - 1),
            "sum": element_short(m.polynomial.sum_over_boolean()),
            "challenge": element_short(m.challenge),
        })
    return rows


# ──────────────────────────────────────────────────────────────
# 프로토콜 페이지
# ──────────────────────────────────────────────────────────────

@sumcheck_bp.route("")
def protocol_page():
    """sum-check 페이지 렌더."""
    setup = db_get("sumcheck.setup")
    error = db_get("sumcheck.error")
    if error is not None:
        db_remove("sumcheck.error")
    protocol = _load_protocol()
    summary = _state_summary(protocol) if protocol else None
    rounds = _rounds_table(protocol) if protocol else []

    return render_template("sumcheck/protocol.html",
                           setup=setup,
                           summary=summary,
                           rounds=rounds,
                           error=error,
                           fields=sorted(FIELDS),
                           default_field=DEFAULT_FIELD,
                           example_expression=EXAMPLE_EXPRESSION,
                           example_variables=EXAMPLE_VARIABLES)


@sumcheck_bp.route("/load-example", methods=["POST"])
def load_example():
    """g(x) = x + x + x² 예제를 로드한다 (H = 3)."""
    _start_session(EXAMPLE_EXPRESSION, EXAMPLE_VARIABLES, DEFAULT_FIELD, "")
    return redirect(url_for("sumcheck.protocol_page"))


@sumcheck_bp.route("/setup", methods=["POST"])
def setup():
    """폼 입력으로 세션을 시작한다."""
    try:
        _start_session(request.form.get("expression", ""),
                       request.form.get("variables", ""),
                       request.form.get("field", DEFAULT_FIELD),
                       request.form.get("claimed_sum", ""))
    except ValueError as exc:
        db_set("sumcheck.error", str(exc))
    return redirect(url_for("sumcheck.protocol_page"))


@sumcheck_bp.route("/round", methods=["POST"])
def advance_round():
    """정직한 Prover로 한 라운드를 진행한다."""
    protocol = _load_protocol()
    if protocol is None:
        return redirect(url_for("sumcheck.protocol_page"))
    if protocol.state.is_terminal:
        db_set("sumcheck.error", "프로토콜이 이미 종료되었습니다")
        return redirect(url_for("sumcheck.protocol_page"))

    protocol.advance_round()
    _save_protocol(protocol)
    return redirect(url_for("sumcheck.protocol_page"))


@sumcheck_bp.route("/run", methods=["POST"])
def run_all():
    """종료될 때까지 진행한다."""
    protocol = _load_protocol()
    if protocol is None:
        return redirect(url_for("sumcheck.protocol_page"))
    if not protocol.state.is_terminal:
        protocol.run()
        _save_protocol(protocol)
    return redirect(url_for("sumcheck.protocol_page"))


@sumcheck_bp.route("/clear", methods=["POST"])
def clear():
    """세션을 삭제한다."""
    db_remove_prefix("sumcheck.")
    return redirect(url_for("sumcheck.protocol_page"))


# ──────────────────────────────────────────────────────────────
# 외부 Prover용 JSON 전송 계층
# ──────────────────────────────────────────────────────────────

class SubmittedPolynomialProver:
    """외부 Prover가 보낸 다항식 하나를 그대로 내놓는 Prover.

    오케스트레이터의 라운드 진행 로직을 재사용하기 위한 어댑터이다.
    """

    def __init__(self, round, poly):
        self.submitted_round = round
        self.poly = poly

    def compute_round_polynomial(self, state):
        if state.round != self.submitted_round:
            raise MalformedState(
                f"제출된 라운드 {self.submitted_round} != 현재 라운드 {state.round}",
                round=state.round,
            )
        return self.poly

    def receive_challenge(self, challenge):
        pass


@sumcheck_bp.route("/api/state")
def api_state():
    """세션 상태를 JSON으로 반환한다."""
    protocol = _load_protocol()
    if protocol is None:
        return jsonify({"error": "세션이 없습니다"}), 404
    return jsonify(_state_summary(protocol))


@sumcheck_bp.route("/api/round", methods=["POST"])
def api_round():
    """외부 Prover의 라운드 다항식을 검사하고 챌린지를 돌려준다.

    요청:  {"round": j, "coeffs": ["c0", "c1", ...]}
    응답:  {"status", "round", "challenge", "next_claim", "rejection"}
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "JSON 객체가 필요합니다"}), 400
    try:
        round = int(payload["round"])
        coeffs = payload["coeffs"]
        if not isinstance(coeffs, list):
            raise TypeError("coeffs는 리스트여야 합니다")
        coeffs = [int(c) for c in coeffs]
    except (KeyError, TypeError, ValueError):
        return jsonify({"error": "round(정수)와 coeffs(정수 리스트)가 필요합니다"}), 400

    protocol = _load_protocol()
    if protocol is None:
        return jsonify({"error": "세션이 없습니다"}), 404
    if protocol.state.is_terminal:
        return jsonify({"error": "프로토콜이 이미 종료되었습니다",
                        **_state_summary(protocol)}), 409

    field = protocol.oracle.field
    protocol.prover = SubmittedPolynomialProver(round, UnivariatePolynomial(coeffs, field))
    state = protocol.advance_round()
    _save_protocol(protocol)

    response = {
        "status": state.status.value,
        "round": state.round,
        "challenge": None,
        "next_claim": None,
        "rejection": serialize_rejection(state.rejection),
        "polynomial": serialize_poly(protocol.messages[-1].polynomial)
        if protocol.messages and protocol.messages[-1].round == round else None,
    }
    if state.rejection is None:
        response["challenge"] = serialize_element(state.challenges[-1])
        response["next_claim"] = serialize_element(state.claim)
    return jsonify(response)
