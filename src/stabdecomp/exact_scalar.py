"""Exact scalars in the ring Z[omega][1/2], with omega = e^(i*pi/4).

Every scalar that appears in a Clifford+T stabilizer decomposition lives in this
ring, so sums over thousands of terms can be accumulated without rounding.
A value is stored as (a + b*omega + c*i + d*omega^-1) / 2^k.
"""

from __future__ import annotations

import cmath
import math
from fractions import Fraction
from typing import Sequence

import mpmath
from pyzx.graph.scalar import Scalar

# omega^j for j = 0..7 as (a, b, c, d) coefficients
_UNIT_PHASES = (
    (1, 0, 0, 0),
    (0, 1, 0, 0),
    (0, 0, 1, 0),
    (0, 0, 0, -1),
    (-1, 0, 0, 0),
    (0, -1, 0, 0),
    (0, 0, -1, 0),
    (0, 0, 0, 1),
)


def _omega_index(phase) -> int:
    """Return j such that e^(i*pi*phase) = omega^j."""
    j = Fraction(phase) * 4
    if j.denominator != 1:
        raise ValueError(f"Phase {phase} is not a multiple of 1/4")
    return int(j) % 8


class ExactScalar:
    k: int
    a: int
    b: int
    c: int
    d: int

    __slots__ = ("k", "a", "b", "c", "d")

    def __init__(self, k: int = 0, a: int = 0, b: int = 0, c: int = 0, d: int = 0):
        if a == 0 and b == 0 and c == 0 and d == 0:
            k = 0
        else:
            while a % 2 == 0 and b % 2 == 0 and c % 2 == 0 and d % 2 == 0:
                a //= 2
                b //= 2
                c //= 2
                d //= 2
                k -= 1

        self.k = k
        self.a = a
        self.b = b
        self.c = c
        self.d = d

    @staticmethod
    def zero() -> ExactScalar:
        return ExactScalar()

    @staticmethod
    def one() -> ExactScalar:
        return ExactScalar(0, 1, 0, 0, 0)

    @staticmethod
    def sqrt2() -> ExactScalar:
        return ExactScalar(0, 0, 1, 0, 1)

    @staticmethod
    def sqrt2_pow(n: int) -> ExactScalar:
        """Return sqrt(2)^n for any integer n."""
        if n % 2 == 0:
            return ExactScalar(-(n // 2), 1, 0, 0, 0)
        return ExactScalar(-((n - 1) // 2), 0, 1, 0, 1)

    @staticmethod
    def from_phase(phase) -> ExactScalar:
        """Return e^(i*pi*phase). The phase must be a multiple of 1/4."""
        return ExactScalar(0, *_UNIT_PHASES[_omega_index(phase)])

    @staticmethod
    def from_omega_coeffs(pow2: int, coeffs: Sequence[int]) -> ExactScalar:
        """Build 2^pow2 * (c0 + c1*omega + c2*omega^2 + c3*omega^3).

        Args:
            pow2: Power of two multiplying the polynomial.
            coeffs: The four integer coefficients of 1, omega, omega^2, omega^3.
        """
        if len(coeffs) != 4:
            raise ValueError(f"Expected 4 coefficients, got {len(coeffs)}")
        c0, c1, c2, c3 = coeffs
        # omega^3 = -omega^-1
        return ExactScalar(-pow2, c0, c1, c2, -c3)

    @staticmethod
    def from_pyzx(scalar: Scalar) -> ExactScalar:
        """Convert a pyzx scalar into an exact scalar.

        The global phase and all phase nodes must be multiples of pi/4. A float
        factor other than one is reconstructed with :meth:`from_complex`. If the
        result disagrees with ``scalar.to_number()``, the scalar carries terms
        that are not read here and the whole number is reconstructed instead.
        """
        if scalar.is_unknown:
            raise ValueError("Cannot convert an unknown scalar")
        if scalar.is_zero:
            return ExactScalar.zero()

        result = ExactScalar.from_phase(scalar.phase) * ExactScalar.sqrt2_pow(
            scalar.power2
        )
        for node in scalar.phasenodes:
            result = result * (ExactScalar.one() + ExactScalar.from_phase(node))

        if scalar.floatfactor != 1:
            result = result * ExactScalar.from_complex(complex(scalar.floatfactor))

        number = complex(scalar.to_number())
        if not cmath.isclose(result.to_complex(), number, rel_tol=1e-9, abs_tol=1e-12):
            return ExactScalar.from_complex(number)
        return result

    @property
    def is_zero(self) -> bool:
        return self.a == 0 and self.b == 0 and self.c == 0 and self.d == 0

    def to_complex(self) -> complex:
        return (
            self.a
            + self.b * cmath.exp(1j * math.pi / 4)
            + self.c * 1j
            + self.d * cmath.exp(-1j * math.pi / 4)
        ) / (2**self.k)

    def __complex__(self) -> complex:
        return self.to_complex()

    def conjugate(self) -> ExactScalar:
        return ExactScalar(self.k, self.a, self.d, -self.c, self.b)

    def __add__(self, other: ExactScalar) -> ExactScalar:
        if not isinstance(other, ExactScalar):
            return NotImplemented
        if self.is_zero:
            return other
        if other.is_zero:
            return self
        k = max(self.k, other.k)
        s = 2 ** (k - self.k)
        t = 2 ** (k - other.k)
        return ExactScalar(
            k,
            self.a * s + other.a * t,
            self.b * s + other.b * t,
            self.c * s + other.c * t,
            self.d * s + other.d * t,
        )

    def __neg__(self) -> ExactScalar:
        return ExactScalar(self.k, -self.a, -self.b, -self.c, -self.d)

    def __sub__(self, other: ExactScalar) -> ExactScalar:
        if not isinstance(other, ExactScalar):
            return NotImplemented
        return self + (-other)

    def __mul__(self, other: ExactScalar) -> ExactScalar:
        if not isinstance(other, ExactScalar):
            return NotImplemented
        return ExactScalar(
            self.k + other.k,
            self.a * other.a + self.b * other.d - self.c * other.c + self.d * other.b,
            self.a * other.b + self.b * other.a + self.c * other.d + self.d * other.c,
            self.a * other.c + self.b * other.b + self.c * other.a - self.d * other.d,
            self.a * other.d - self.b * other.c - self.c * other.b + self.d * other.a,
        )

    @staticmethod
    def from_complex(z: complex, max_k: int = 20, precision: int = 15) -> ExactScalar:
        """Reconstruct an exact scalar from a floating point approximation.

        Uses PSLQ to find integer relations between the real and imaginary parts
        and {1, sqrt(2)}, then searches for the smallest power of two that makes
        all four coefficients integral.
        """
        # A float input only carries ~15-16 significant digits, so a much higher
        # PSLQ precision finds spurious relations in the noise.
        with mpmath.workdps(precision):
            re_z = mpmath.mpf(complex(z).real)
            im_z = mpmath.mpf(complex(z).imag)

            # Re(z) = (2a + (b+d)sqrt(2)) / 2^(k+1)
            if abs(re_z) < 1e-12:
                rel_re = [1, 0, 0]
            else:
                rel_re = mpmath.pslq([re_z, mpmath.mpf(1), mpmath.sqrt(2)])
            if rel_re is None:
                raise ValueError("PSLQ failed to find relation for real part", z)

            # Im(z) = (2c + (b-d)sqrt(2)) / 2^(k+1)
            if abs(im_z) < 1e-12:
                rel_im = [1, 0, 0]
            else:
                rel_im = mpmath.pslq([im_z, mpmath.mpf(1), mpmath.sqrt(2)])
            if rel_im is None:
                raise ValueError("PSLQ failed to find relation for imaginary part", z)

        q1, q2, q3 = rel_re
        p1, p2, p3 = rel_im
        if q1 < 0:
            q1, q2, q3 = -q1, -q2, -q3
        if p1 < 0:
            p1, p2, p3 = -p1, -p2, -p3
        if q1 == 0 or p1 == 0:
            raise ValueError("Found zero denominator coefficient in PSLQ relation", z)

        common_denom = (q1 * p1) // math.gcd(q1, p1)
        k_exp = common_denom.bit_length()
        if (1 << (k_exp - 1)) == common_denom:
            k_exp -= 1

        for d_exp in range(k_exp, max_k + 2):
            denom = 1 << d_exp
            if denom % q1 != 0 or denom % p1 != 0:
                continue

            a2 = -q2 * (denom // q1)
            b_plus_d = -q3 * (denom // q1)
            c2 = -p2 * (denom // p1)
            b_minus_d = -p3 * (denom // p1)

            if a2 % 2 != 0 or c2 % 2 != 0 or (b_plus_d + b_minus_d) % 2 != 0:
                continue

            return ExactScalar(
                d_exp - 1,
                int(a2 // 2),
                int((b_plus_d + b_minus_d) // 2),
                int(c2 // 2),
                int((b_plus_d - b_minus_d) // 2),
            )

        raise ValueError(f"Could not reconstruct exact scalar within max_k={max_k}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExactScalar):
            return NotImplemented
        return (
            self.k == other.k
            and self.a == other.a
            and self.b == other.b
            and self.c == other.c
            and self.d == other.d
        )

    def __hash__(self) -> int:
        return hash((self.k, self.a, self.b, self.c, self.d))

    def __repr__(self) -> str:
        return f"ExactScalar(k={self.k}, a={self.a}, b={self.b}, c={self.c}, d={self.d})"
