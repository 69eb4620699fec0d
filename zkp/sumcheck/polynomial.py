"""
Sum-check 기반 모듈: 단변수 다항식(UnivariatePolynomial)
=========================================================

매 라운드 Prover가 Verifier에게 보내는 메시지는 단변수 다항식 g_j(X)이다.

**표현**:
  계수(coefficient) 표현. g(X) = c₀ + c₁·X + c₂·X² + ...
  직렬화하면 길이 (차수 + 1)의 계수 리스트가 된다.

**평가 표현 → 계수 표현**:
  정직한 Prover는 g_j를 X = 0, 1, ..., d_j에서 평가한 뒤
  라그랑주 보간(Lagrange interpolation)으로 계수를 복원한다.
  d_j + 1개의 점으로 보간하므로 결과 차수는 자동으로 d_j 이하이다.

**체(field)**:
  다항식은 자신의 체(F61, FR, 작은 실험용 체)를 기억한다.
  계수는 모두 같은 체의 원소로 정규화된다.

사용 예시:
    >>> from zkp.sumcheck.field import F61
    >>> p = UnivariatePolynomial([1, 2, 3], F61)   # 1 + 2X + 3X²
    >>> p.evaluate(2)                              # F61(17)
    >>> q = UnivariatePolynomial.from_evaluations([F61(0), F61(3), F61(8)])
    >>> q                                          # Poly(2*X + 1*X^2)
"""

from zkp.sumcheck.field import to_field


class UnivariatePolynomial:
    """유한체 위의 단변수 다항식 (불변 값 타입으로 취급한다).

    coeffs = [c₀, c₁, c₂, ...] → c₀ + c₁X + c₂X² + ...

    예시:
        >>> p = UnivariatePolynomial([F61(1), F61(2)])   # 1 + 2X
        >>> q = UnivariatePolynomial([F61(3), F61(4)])   # 3 + 4X
        >>> p + q                                        # 4 + 6X
        >>> p * q                                        # 3 + 10X + 8X²
    """

    def __init__(self, coeffs, field=None):
        """다항식 생성.

        Args:
            coeffs: 체 원소 또는 정수의 리스트 [c₀, c₁, ...]
            field: 체 클래스. None이면 첫 번째 체 원소 계수의 타입을 쓴다.

        Raises:
            ValueError: 체를 결정할 수 없을 때 (정수만 주고 field 생략)
        """
        coeffs = list(coeffs)
        if field is None:
            field = next((type(c) for c in coeffs if not isinstance(c, int)), None)
            if field is None:
                raise ValueError("정수 계수만으로는 체를 알 수 없습니다: field를 지정하세요")
        self.field = field
        self.coeffs = [to_field(field, c) for c in coeffs] or [field(0)]
        self._trim()

    def _trim(self):
        """최고차 계수가 0인 항을 제거하여 정규화한다.

        예: [1, 2, 0, 0] → [1, 2]  (1 + 2X)
        """
        while len(self.coeffs) > 1 and self.coeffs[-1] == 0:
            self.coeffs.pop()

    @property
    def degree(self):
        """다항식의 차수. 영 다항식의 차수는 0으로 정의한다."""
        return len(self.coeffs) - 1

    def is_zero(self):
        """영 다항식인지 확인."""
        return len(self.coeffs) == 1 and self.coeffs[0] == 0

    def evaluate(self, point):
        """Horner's method로 다항식을 평가한다.

        Args:
            point: 체 원소 또는 정수

        Returns:
            체 원소 g(point)
        """
        point = to_field(self.field, point)
        result = self.field(0)
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    __call__ = evaluate

    def sum_over_boolean(self):
        """g(0) + g(1). Verifier의 라운드 일관성 검사에 쓰인다.

        g(0) = c₀, g(1) = Σcᵢ 이므로 평가 없이 바로 계산한다.
        """
        total = self.coeffs[0]
        for coeff in self.coeffs:
            total = total + coeff
        return total

    def coefficients(self):
        """계수 리스트의 복사본 (길이 = 차수 + 1)."""
        return list(self.coeffs)

    def _coerce(self, other):
        if isinstance(other, UnivariatePolynomial):
            return other
        return UnivariatePolynomial([to_field(self.field, other)], self.field)

    def __add__(self, other):
        """다항식 덧셈: p(X) + q(X)."""
        other = self._coerce(other)
        size = max(len(self.coeffs), len(other.coeffs))
        zero = self.field(0)
        result = []
        for i in range(size):
            a = self.coeffs[i] if i < len(self.coeffs) else zero
            b = other.coeffs[i] if i < len(other.coeffs) else zero
            result.append(a + b)
        return UnivariatePolynomial(result, self.field)

    def __radd__(self, other):
        return self.__add__(other)

    def __neg__(self):
        return UnivariatePolynomial([-c for c in self.coeffs], self.field)

    def __sub__(self, other):
        return self + (-self._coerce(other))

    def __rsub__(self, other):
        return self._coerce(other) - self

    def __mul__(self, other):
        """다항식 곱셈 (O(n²) 나이브 convolution) 또는 스칼라곱."""
        if not isinstance(other, UnivariatePolynomial):
            scalar = to_field(self.field, other)
            return UnivariatePolynomial([c * scalar for c in self.coeffs], self.field)
        result = [self.field(0)] * (len(self.coeffs) + len(other.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            for j, b in enumerate(other.coeffs):
                result[i + j] = result[i + j] + a * b
        return UnivariatePolynomial(result, self.field)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __eq__(self, other):
        """다항식 동등 비교 (같은 위수의 체, 같은 계수)."""
        if not isinstance(other, UnivariatePolynomial):
            return NotImplemented
        if self.field.field_modulus != other.field.field_modulus:
            return False
        return [int(c) for c in self.coeffs] == [int(c) for c in other.coeffs]

    def __hash__(self):
        return hash((self.field.field_modulus, tuple(int(c) for c in self.coeffs)))

    def __len__(self):
        """계수 개수 반환 (차수 + 1)."""
        return len(self.coeffs)

    def __repr__(self):
        terms = []
        for i, c in enumerate(self.coeffs):
            if c == 0:
                continue
            if i == 0:
                terms.append(str(int(c)))
            elif i == 1:
                terms.append(f"{int(c)}*X")
            else:
                terms.append(f"{int(c)}*X^{i}")
        return "Poly(" + " + ".join(terms) + ")" if terms else "Poly(0)"

    @classmethod
    def zero(cls, field):
        """영 다항식 g(X) = 0."""
        return cls([field(0)], field)

    @classmethod
    def from_evaluations(cls, evals, field=None):
        """X = 0, 1, ..., d 에서의 평가값으로부터 다항식을 복원한다.

        라그랑주 보간:
            g(X) = Σᵢ yᵢ · Πⱼ≠ᵢ (X - j) / (i - j)

        P(X) = Πⱼ (X - j)를 한 번 만들고, 각 i마다 P(X) / (X - i)를
        조립제법(synthetic division)으로 구한다. 분모는
            Πⱼ≠ᵢ (i - j) = i! · (-1)^(d-i) · (d-i)!
        이므로 전체 비용은 O(d²) 체 연산이다.

        d + 1개의 점을 쓰므로 결과 차수는 d 이하이다.

        Args:
            evals: [g(0), g(1), ..., g(d)]
            field: 체 클래스 (evals가 모두 정수일 때 필요)

        Returns:
            UnivariatePolynomial

        예시:
            >>> # g(X) = 2X + X²: g(0)=0, g(1)=3, g(2)=8
            >>> UnivariatePolynomial.from_evaluations([0, 3, 8], F61)
            Poly(2*X + 1*X^2)
        """
        evals = list(evals)
        if not evals:
            raise ValueError("보간하려면 최소 한 개의 평가값이 필요합니다")
        if field is None:
            field = type(evals[0])
        evals = [to_field(field, y) for y in evals]
        n = len(evals)
        if n > field.field_modulus:
            raise ValueError("평가점 0..d가 체 안에서 서로 달라야 합니다 (d < p)")

        # ── P(X) = (X - 0)(X - 1)...(X - d) ──
        full = [field(1)]
        for j in range(n):
            shifted = [field(0)] + full
            for k, c in enumerate(full):
                shifted[k] = shifted[k] - c * j
            full = shifted

        factorials = [field(1)]
        for k in range(1, n):
            factorials.append(factorials[-1] * k)

        result = [field(0)] * n
        for i, y in enumerate(evals):
            if y == 0:
                continue
            denom = factorials[i] * factorials[n - 1 - i]
            if (n - 1 - i) % 2 == 1:
                denom = -denom
            scale = y / denom
            # ── P(X) / (X - i), 최고차항부터 ──
            carry = field(0)
            for k in range(n, 0, -1):
                carry = full[k] + carry * i
                result[k - 1] = result[k - 1] + carry * scale
        return cls(result, field)
