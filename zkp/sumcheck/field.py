"""
Sum-check 기반 모듈: 유한체(Finite Field)
==========================================

이 모듈은 sum-check 프로토콜 전체에서 사용되는 유한체 원소 타입을 정의한다.

**왜 유한체인가?**
  sum-check의 건전성(soundness)은 Schwartz–Zippel 보조정리에 기대고 있다:
    P[거짓 주장이 통과] ≤ (d_1 + ... + d_n) / |F|
  정수(무한 집합) 위에서는 이 확률 상한이 성립하지 않으므로,
  모든 오라클과 라운드 다항식은 소수체(prime field) 위에서 정의된다.

**제공하는 체(field)**:
  - F61: 메르센 소수 p = 2^61 - 1. 데모/테스트 기본값.
  - FR:  bn128 곡선의 스칼라 필드 (p ≈ 2^254).
  - prime_field(p): 임의의 소수 p에 대한 체 클래스 (작은 체에서 건전성 실험용)

**직렬화**:
  체 원소는 고정 폭 빅엔디안(big-endian) 바이트열로 인코딩한다.
  폭 = ceil(bits(p) / 8). Fiat-Shamir 트랜스크립트에서 사용한다.

사용 예시:
    >>> from zkp.sumcheck.field import F61, random_element
    >>> a = F61(3)
    >>> a * a + F61(1)     # F61(10)
    >>> r = random_element(F61)
"""

import secrets

from py_ecc import bn128
from py_ecc.fields.field_elements import FQ

from zkp.sumcheck.errors import RandomnessUnavailable


# ─────────────────────────────────────────────────────────────────────
# 체 클래스
# ─────────────────────────────────────────────────────────────────────

# 메르센 소수 2^61 - 1
MERSENNE_61 = (1 << 61) - 1

# bn128 곡선 위수 (스칼라 필드 크기)
CURVE_ORDER = bn128.curve_order


class F61(FQ):
    """메르센 소수 2^61 - 1 위의 유한체 원소.

    61비트 체는 데모 예제(g(x) = x + x + x²)에서 값이 감싸지지(wrap-around)
    않을 만큼 크고, Python 정수 연산으로도 충분히 빠르다.

    예시:
        >>> F61(MERSENNE_61 + 5) == F61(5)  # True
        >>> F61(1) / F61(3)                  # 3의 모듈러 역원
    """
    field_modulus = MERSENNE_61
    field_name = "f61"


class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.
    """
    field_modulus = CURVE_ORDER
    field_name = "bn128"


FIELDS = {
    F61.field_name: F61,
    FR.field_name: FR,
}


def prime_field(modulus, name=None):
    """소수 modulus 위의 체 클래스를 만든다.

    작은 체(p = 7, 101, ...)에서 건전성 상한을 정확히 세어 보는 실험에 쓴다.
    modulus가 소수가 아니면 나눗셈(역원)이 정의되지 않으므로 거부한다.

    Args:
        modulus: 소수 p (≥ 2)
        name: 체 이름 (기본값: "f{p}")

    Returns:
        type: FQ를 상속한 새 체 클래스

    Raises:
        ValueError: modulus가 소수가 아닐 때

    예시:
        >>> F7 = prime_field(7)
        >>> F7(5) + F7(4)   # F7(2)
    """
    if not _is_probable_prime(modulus):
        raise ValueError(f"체의 위수는 소수여야 합니다: {modulus}")
    name = name or f"f{modulus}"
    return type(name.upper(), (FQ,), {"field_modulus": modulus, "field_name": name})


def field_by_name(name):
    """이름으로 등록된 체 클래스를 찾는다 ("f61", "bn128")."""
    try:
        return FIELDS[name]
    except KeyError:
        raise ValueError(f"알 수 없는 체 이름입니다: {name!r}") from None


def field_name(field):
    """체 클래스의 이름. prime_field()로 만든 체도 포함한다."""
    return getattr(field, "field_name", f"f{field.field_modulus}")


def _is_probable_prime(n):
    """Miller-Rabin 소수 판정 (고정 밑 → 2^64 미만에서 결정적)."""
    if n < 2:
        return False
    small = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)
    for p in small:
        if n % p == 0:
            return n == p
    d, s = n - 1, 0
    while d % 2 == 0:
        d //= 2
        s += 1
    for a in small:
        x = pow(a, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


# ─────────────────────────────────────────────────────────────────────
# 원소 변환 / 직렬화
# ─────────────────────────────────────────────────────────────────────

def to_field(field, value):
    """정수 또는 체 원소를 field의 원소로 변환한다.

    py_ecc의 FQ(other_fq)는 다른 체의 원소를 나머지 연산 없이 복사하므로,
    체 원소는 항상 int를 거쳐 변환한다.
    """
    if isinstance(value, field):
        return value
    if isinstance(value, FQ):
        return field(int(value))
    if isinstance(value, int):
        return field(value)
    raise TypeError(f"체 원소로 변환할 수 없습니다: {value!r}")


def byte_length(field):
    """field 원소의 고정 폭 인코딩 길이 (바이트)."""
    return (field.field_modulus.bit_length() + 7) // 8


def element_to_bytes(element):
    """체 원소 → 고정 폭 빅엔디안 바이트열.

    예시:
        >>> element_to_bytes(F61(1))
        b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return int(element).to_bytes(byte_length(type(element)), "big")


def element_from_bytes(field, data):
    """고정 폭 빅엔디안 바이트열 → 체 원소.

    Raises:
        ValueError: 길이가 맞지 않거나 값이 p 이상일 때
    """
    if len(data) != byte_length(field):
        raise ValueError(
            f"인코딩 길이가 맞지 않습니다: {len(data)} != {byte_length(field)}"
        )
    value = int.from_bytes(data, "big")
    if value >= field.field_modulus:
        raise ValueError("정규화되지 않은 체 원소 인코딩입니다 (값 ≥ p)")
    return field(value)


# ─────────────────────────────────────────────────────────────────────
# 랜덤 원소
# ─────────────────────────────────────────────────────────────────────

def random_element(field):
    """암호학적으로 안전한 난수로 field에서 균등하게 원소를 뽑는다.

    secrets 모듈(OS 엔트로피)을 사용한다.

    Raises:
        RandomnessUnavailable: OS 난수 소스를 사용할 수 없을 때
    """
    try:
        return field(secrets.randbelow(field.field_modulus))
    except (NotImplementedError, OSError) as exc:
        raise RandomnessUnavailable(f"난수 소스를 사용할 수 없습니다: {exc}") from exc
