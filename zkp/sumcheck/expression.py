"""
다항식 수식 파서
=================

사용자가 입력한 Python 산술식을 MultivariatePolynomial로 변환한다.

허용 문법:
  - 정수 리터럴:        3, 12345
  - 변수:               variables 리스트에 있는 이름만 (예: x0, x1, ...)
  - 이항 연산:          +, -, *, ** (지수는 0 이상의 정수 리터럴)
  - 단항 연산:          -x, +x
  - 괄호

변수 개수는 함수 시그니처가 아니라 명시적인 variables 리스트가 결정한다.
수식에 나타나지 않는 변수도 변수로 취급된다 (차수 상한 0).

사용 예시:
    >>> from zkp.sumcheck.field import F61
    >>> g = parse_polynomial("x0 + x0 + x0**2", ["x0"], F61)
    >>> g.degree_bounds    # [2]
    >>> g = parse_polynomial("2*a*b - (a + 1)**2", ["a", "b"], F61)
"""

import ast

from zkp.sumcheck.multivariate import MultivariatePolynomial


def parse_variables(text):
    """쉼표/공백으로 구분된 변수 이름 문자열을 리스트로 바꾼다.

    예시:
        >>> parse_variables("x0, x1 x2")   # ["x0", "x1", "x2"]
    """
    names = [name for name in text.replace(",", " ").split() if name]
    if not names:
        raise ValueError("변수가 최소 한 개 필요합니다")
    for name in names:
        if not name.isidentifier():
            raise ValueError(f"변수 이름이 올바르지 않습니다: {name!r}")
    if len(set(names)) != len(names):
        raise ValueError(f"변수 이름이 중복되었습니다: {names}")
    return names


def parse_polynomial(source, variables, field):
    """수식 문자열을 field 위의 MultivariatePolynomial로 파싱한다.

    Args:
        source: Python 산술식 문자열
        variables: 변수 이름 리스트 (순서가 곧 x₁, x₂, ... 순서)
        field: 체 클래스

    Returns:
        MultivariatePolynomial (차수 상한은 각 변수의 최대 지수)

    Raises:
        ValueError: 문법 오류, 알 수 없는 이름, 허용되지 않는 연산
    """
    variables = list(variables)
    if not variables:
        raise ValueError("변수가 최소 한 개 필요합니다")
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as exc:
        raise ValueError(f"수식 문법 오류: {exc.msg}") from exc
    builder = _PolynomialBuilder(variables, field)
    return builder.build(tree.body)


class _PolynomialBuilder:
    """ast 노드를 재귀적으로 MultivariatePolynomial로 바꾼다."""

    def __init__(self, variables, field):
        self.index = {name: i for i, name in enumerate(variables)}
        self.field = field
        self.num_vars = len(variables)

    def build(self, node):
        if isinstance(node, ast.Constant):
            if not isinstance(node.value, int) or isinstance(node.value, bool):
                raise ValueError(f"정수 상수만 허용됩니다: {node.value!r}")
            return MultivariatePolynomial.constant(self.field, self.num_vars, node.value)

        if isinstance(node, ast.Name):
            if node.id not in self.index:
                raise ValueError(f"선언되지 않은 변수입니다: {node.id}")
            return MultivariatePolynomial.variable(
                self.field, self.num_vars, self.index[node.id]
            )

        if isinstance(node, ast.UnaryOp):
            operand = self.build(node.operand)
            if isinstance(node.op, ast.USub):
                return -operand
            if isinstance(node.op, ast.UAdd):
                return operand
            raise ValueError(f"허용되지 않는 단항 연산입니다: {type(node.op).__name__}")

        if isinstance(node, ast.BinOp):
            if isinstance(node.op, ast.Pow):
                return self.build(node.left) ** self._exponent(node.right)
            left = self.build(node.left)
            right = self.build(node.right)
            if isinstance(node.op, ast.Add):
                return left + right
            if isinstance(node.op, ast.Sub):
                return left - right
            if isinstance(node.op, ast.Mult):
                return left * right
            raise ValueError(f"허용되지 않는 연산입니다: {type(node.op).__name__}")

        raise ValueError(f"허용되지 않는 구문입니다: {type(node).__name__}")

    @staticmethod
    def _exponent(node):
        if (isinstance(node, ast.Constant) and isinstance(node.value, int)
                and not isinstance(node.value, bool) and node.value >= 0):
            return node.value
        raise ValueError("지수는 0 이상의 정수 리터럴이어야 합니다")
