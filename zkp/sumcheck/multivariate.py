"""
다변수 다항식 오라클(Multivariate Polynomial Oracle)
=====================================================

sum-check에서 g: Fⁿ → F 는 **평가만 가능한** 오라클로 취급된다.
Prover와 Verifier는 g의 내부 구조를 들여다보지 않고 다음 인터페이스만 쓴다.

  evaluate(point)       : 길이 n의 체 원소 시퀀스 → 체 원소
  degree_bound(i)       : i번째 변수(0부터)의 차수 상한 d_{i+1}
  num_vars              : 명시적으로 선언된 변수 개수 n

**차수 상한**:
  오라클을 만드는 쪽이 대수적 표현에서 정적으로 결정한다 (평가값으로 추정하지 않는다).
    - MultivariatePolynomial: 각 변수의 최대 지수
    - MultilinearExtension:   모든 변수에 대해 1
    - FunctionOracle:         생성자에서 명시적으로 선언

**변수 순서와 비트 순서**:
  x₁이 첫 번째 좌표이며, 불리언 하이퍼큐브를 정수 인덱스로 나열할 때
  x₁이 최상위 비트(MSB)이다. 예: n = 3, 인덱스 6 → (1, 1, 0)

사용 예시:
    >>> from zkp.sumcheck.field import F61
    >>> x0 = MultivariatePolynomial.variable(F61, 2, 0)
    >>> x1 = MultivariatePolynomial.variable(F61, 2, 1)
    >>> g = x0 * x1 + x0 ** 2
    >>> g.degree_bounds       # [2, 1]
    >>> hypercube_sum(g)      # F61(3)
"""

import itertools

from zkp.sumcheck.errors import EvaluationError
from zkp.sumcheck.field import to_field


# ─────────────────────────────────────────────────────────────────────
# 불리언 하이퍼큐브 헬퍼
# ─────────────────────────────────────────────────────────────────────

def to_bits(n, length):
    """정수 n을 길이 length의 비트 벡터로 변환한다 (MSB 먼저, 앞을 0으로 채움).

    예시:
        >>> to_bits(6, 3)   # [1, 1, 0]
        >>> to_bits(1, 4)   # [0, 0, 0, 1]
    """
    if n < 0 or n >= (1 << length):
        raise ValueError(f"{n}은 {length}비트로 표현할 수 없습니다")
    return [(n >> (length - 1 - i)) & 1 for i in range(length)]


def boolean_hypercube(k):
    """{0,1}^k의 모든 점을 to_bits와 같은 순서로 나열한다."""
    return itertools.product((0, 1), repeat=k)


def hypercube_sum(oracle):
    """정직한 주장값 H = Σ_{x∈{0,1}ⁿ} g(x). O(2ⁿ) 평가."""
    total = oracle.field(0)
    for point in boolean_hypercube(oracle.num_vars):
        total = total + oracle.evaluate(point)
    return total


# ─────────────────────────────────────────────────────────────────────
# 오라클 인터페이스
# ─────────────────────────────────────────────────────────────────────

class Oracle:
    """평가 전용 다변수 오라클의 기반 클래스.

    서브클래스는 _evaluate(point)만 구현하면 된다. 점의 길이 확인과
    체 변환은 evaluate()가 담당한다.

    속성:
        field: 체 클래스
        num_vars: 변수 개수 n (≥ 1)
        degree_bounds: [d_1, ..., d_n]
    """

    def __init__(self, field, num_vars, degree_bounds):
        if num_vars < 1:
            raise ValueError(f"변수 개수는 1 이상이어야 합니다: {num_vars}")
        degree_bounds = [int(d) for d in degree_bounds]
        if len(degree_bounds) != num_vars:
            raise ValueError(
                f"차수 상한 개수({len(degree_bounds)})가 변수 개수({num_vars})와 다릅니다"
            )
        if any(d < 0 for d in degree_bounds):
            raise ValueError(f"차수 상한은 음수일 수 없습니다: {degree_bounds}")
        self.field = field
        self.num_vars = num_vars
        self.degree_bounds = degree_bounds

    def degree_bound(self, index):
        """index번째 변수(0부터)의 차수 상한."""
        if not 0 <= index < self.num_vars:
            raise ValueError(f"변수 인덱스 범위 밖입니다: {index}")
        return self.degree_bounds[index]

    def total_degree_bound(self):
        """Σ d_j: Schwartz–Zippel 건전성 상한의 분자."""
        return sum(self.degree_bounds)

    def evaluate(self, point):
        """g(point)를 평가한다.

        Raises:
            EvaluationError: 점의 길이가 n이 아니거나 체 원소로 바꿀 수 없을 때
        """
        point = tuple(point)
        if len(point) != self.num_vars:
            raise EvaluationError(
                point, f"점의 길이 {len(point)} != 변수 개수 {self.num_vars}"
            )
        try:
            point = tuple(to_field(self.field, x) for x in point)
        except TypeError as exc:
            raise EvaluationError(point, exc) from exc
        return self._evaluate(point)

    def _evaluate(self, point):
        raise NotImplementedError


# ─────────────────────────────────────────────────────────────────────
# 희소(sparse) 다변수 다항식
# ─────────────────────────────────────────────────────────────────────

class MultivariatePolynomial(Oracle):
    """단항식(monomial) 사전으로 표현한 다변수 다항식.

    terms = {(e₁, ..., eₙ): c} → Σ c · x₁^e₁ ··· xₙ^eₙ

    차수 상한은 각 변수의 최대 지수로 정적으로 결정된다.
    더 느슨한 상한을 선언하고 싶다면 degree_bounds로 넘길 수 있지만,
    실제 지수보다 작은 상한은 거부한다.

    예시 (g(x) = x + x + x²):
        >>> g = MultivariatePolynomial(F61, 1, {(1,): 2, (2,): 1})
        >>> g.degree_bounds   # [2]
        >>> g.evaluate([F61(1)])  # F61(3)
    """

    def __init__(self, field, num_vars, terms=None, degree_bounds=None):
        cleaned = {}
        for exps, coeff in (terms or {}).items():
            exps = tuple(int(e) for e in exps)
            if len(exps) != num_vars or any(e < 0 for e in exps):
                raise ValueError(f"잘못된 지수 벡터입니다: {exps}")
            coeff = to_field(field, coeff)
            total = cleaned.get(exps, field(0)) + coeff
            if total == 0:
                cleaned.pop(exps, None)
            else:
                cleaned[exps] = total
        self.terms = cleaned

        derived = [0] * num_vars
        for exps in cleaned:
            for i, e in enumerate(exps):
                derived[i] = max(derived[i], e)
        if degree_bounds is None:
            degree_bounds = derived
        elif any(int(d) < e for d, e in zip(degree_bounds, derived)):
            raise ValueError(
                f"선언된 차수 상한 {list(degree_bounds)}이 실제 차수 {derived}보다 작습니다"
            )
        super().__init__(field, num_vars, degree_bounds)

    @classmethod
    def constant(cls, field, num_vars, value):
        """상수 다항식."""
        return cls(field, num_vars, {(0,) * num_vars: value})

    @classmethod
    def variable(cls, field, num_vars, index):
        """index번째 변수 x_index 자체."""
        exps = [0] * num_vars
        exps[index] = 1
        return cls(field, num_vars, {tuple(exps): 1})

    def _evaluate(self, point):
        result = self.field(0)
        for exps, coeff in self.terms.items():
            term = coeff
            for x, e in zip(point, exps):
                if e:
                    term = term * x ** e
            result = result + term
        return result

    def _coerce(self, other):
        if isinstance(other, MultivariatePolynomial):
            if other.num_vars != self.num_vars:
                raise ValueError("변수 개수가 다른 다항식끼리는 연산할 수 없습니다")
            return other
        return MultivariatePolynomial.constant(self.field, self.num_vars, other)

    def __add__(self, other):
        other = self._coerce(other)
        terms = dict(self.terms)
        for exps, coeff in other.terms.items():
            terms[exps] = terms.get(exps, self.field(0)) + coeff
        return MultivariatePolynomial(self.field, self.num_vars, terms)

    def __radd__(self, other):
        return self.__add__(other)

    def __neg__(self):
        return MultivariatePolynomial(
            self.field, self.num_vars, {e: -c for e, c in self.terms.items()}
        )

    def __sub__(self, other):
        return self + (-self._coerce(other))

    def __rsub__(self, other):
        return self._coerce(other) - self

    def __mul__(self, other):
        other = self._coerce(other)
        terms = {}
        for e1, c1 in self.terms.items():
            for e2, c2 in other.terms.items():
                exps = tuple(a + b for a, b in zip(e1, e2))
                terms[exps] = terms.get(exps, self.field(0)) + c1 * c2
        return MultivariatePolynomial(self.field, self.num_vars, terms)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __pow__(self, exponent):
        if not isinstance(exponent, int) or exponent < 0:
            raise ValueError(f"지수는 0 이상의 정수여야 합니다: {exponent!r}")
        result = MultivariatePolynomial.constant(self.field, self.num_vars, 1)
        base = self
        while exponent:
            if exponent & 1:
                result = result * base
            base = base * base
            exponent >>= 1
        return result

    def __eq__(self, other):
        if not isinstance(other, MultivariatePolynomial):
            return NotImplemented
        return (self.num_vars == other.num_vars
                and self.field.field_modulus == other.field.field_modulus
                and _int_terms(self.terms) == _int_terms(other.terms))

    __hash__ = None

    def __repr__(self):
        if not self.terms:
            return "MPoly(0)"
        parts = []
        for exps in sorted(self.terms, reverse=True):
            factors = [f"x{i}" if e == 1 else f"x{i}^{e}"
                       for i, e in enumerate(exps) if e]
            coeff = int(self.terms[exps])
            if not factors:
                parts.append(str(coeff))
            elif coeff == 1:
                parts.append("*".join(factors))
            else:
                parts.append(f"{coeff}*" + "*".join(factors))
        return "MPoly(" + " + ".join(parts) + ")"


def _int_terms(terms):
    return {e: int(c) for e, c in terms.items()}


# ─────────────────────────────────────────────────────────────────────
# 다중선형 확장 (Multilinear Extension)
# ─────────────────────────────────────────────────────────────────────

class MultilinearExtension(Oracle):
    """{0,1}ⁿ 위의 값 테이블을 확장한 다중선형 다항식.

    f̃(x) = Σ_{b∈{0,1}ⁿ} f(b) · Πᵢ (bᵢ·xᵢ + (1-bᵢ)(1-xᵢ))

    모든 변수에 대해 차수 ≤ 1이다. 평가는 x₁부터 차례로 테이블을 반으로 접어
    (fold) O(2ⁿ) 연산으로 수행한다.

    Args:
        field: 체 클래스
        values: 길이 2ⁿ (n ≥ 1)의 값 리스트. values[i]는 to_bits(i, n)에서의 값.

    예시:
        >>> mle = MultilinearExtension(F61, [1, 2, 3, 4])
        >>> mle.evaluate([0, 1])   # F61(2)
        >>> hypercube_sum(mle)     # F61(10)
    """

    def __init__(self, field, values):
        values = [to_field(field, v) for v in values]
        size = len(values)
        if size < 2 or size & (size - 1):
            raise ValueError(f"값 테이블의 길이는 2 이상인 2의 거듭제곱이어야 합니다: {size}")
        num_vars = size.bit_length() - 1
        super().__init__(field, num_vars, [1] * num_vars)
        self.values = values

    def _evaluate(self, point):
        table = self.values
        for r in point:
            table = fold_table(table, r)
        return table[0]


def fold_table(table, r):
    """첫 번째 변수를 r로 고정하여 테이블을 반으로 접는다.

    T'[i] = T[i] + r·(T[i + h] - T[i]),  h = len(T) / 2

    앞쪽 절반은 x₁ = 0, 뒤쪽 절반은 x₁ = 1에 해당한다 (x₁이 MSB).
    """
    half = len(table) // 2
    return [table[i] + r * (table[i + half] - table[i]) for i in range(half)]


# ─────────────────────────────────────────────────────────────────────
# 함수 래퍼
# ─────────────────────────────────────────────────────────────────────

class FunctionOracle(Oracle):
    """Python 호출 가능 객체를 명시적 변수 개수/차수 상한과 함께 감싼다.

    함수 시그니처를 들여다보아 변수 개수를 추정하지 않는다.
    degree_bounds는 호출하는 쪽이 함수의 대수적 형태로부터 선언해야 한다.

    예시:
        >>> g = FunctionOracle(F61, lambda a, b: a * b + a, num_vars=2,
        ...                    degree_bounds=[1, 1])
    """

    def __init__(self, field, fn, num_vars, degree_bounds):
        super().__init__(field, num_vars, degree_bounds)
        self.fn = fn

    def _evaluate(self, point):
        try:
            value = self.fn(*point)
            return to_field(self.field, value)
        except EvaluationError:
            raise
        except Exception as exc:
            raise EvaluationError(point, exc) from exc
