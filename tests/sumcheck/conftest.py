import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkp.sumcheck.field import F61, prime_field
from zkp.sumcheck.multivariate import MultilinearExtension, MultivariatePolynomial


# ── 테스트 상수 ──
EXAMPLE_TERMS = {(1,): 2, (2,): 1}          # g(x) = x + x + x²
MLE_VALUES = [3, 1, 4, 1, 5, 9, 2, 6]       # Σ = 31


class ScriptedChallenger:
    """정해진 챌린지를 순서대로 내놓는 챌린저. 수락된 다항식을 기록한다."""

    def __init__(self, challenges):
        self.challenges = list(challenges)
        self.observed = []

    def observe(self, round, poly):
        self.observed.append((round, poly))

    def challenge(self, field):
        return field(int(self.challenges.pop(0)))


@pytest.fixture(scope="session")
def F7():
    return prime_field(7)


@pytest.fixture(scope="session")
def F101():
    return prime_field(101)


@pytest.fixture
def example_oracle():
    """g(x) = x + x + x² over F61, H = 3."""
    return MultivariatePolynomial(F61, 1, EXAMPLE_TERMS)


@pytest.fixture
def two_var_oracle():
    """g(x0, x1) = x0·x1 + x0² over F61, 차수 상한 [2, 1], H = 3."""
    x0 = MultivariatePolynomial.variable(F61, 2, 0)
    x1 = MultivariatePolynomial.variable(F61, 2, 1)
    return x0 * x1 + x0 ** 2


@pytest.fixture
def mle3():
    """n = 3 다중선형 확장, H = 31."""
    return MultilinearExtension(F61, MLE_VALUES)


@pytest.fixture
def scripted():
    """ScriptedChallenger 생성 함수."""
    return ScriptedChallenger
