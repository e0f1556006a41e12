"""
The secp256k1 curve used for every key in BitKey
"""
import json
from dataclasses import dataclass
from typing import Optional, Tuple

from .ecc_math import is_quadratic_residue, sqrt_mod_p

__all__ = ["EllipticCurve", "Point", "SECP256K1"]


@dataclass(frozen=True)
class Point:
    """Affine point. (None, None) is the point at infinity"""
    x: Optional[int] = None
    y: Optional[int] = None

    def __post_init__(self):
        if (self.x is None) != (self.y is None):
            raise ValueError("Point at infinity must have both coordinates as None")

    def __bool__(self) -> bool:
        return self.x is not None

    def __iter__(self):
        """Allow tuple unpacking: x, y = point"""
        return iter((self.x, self.y))


class EllipticCurve:
    """
    A short Weierstrass curve y^2 = x^3 + ax + b (mod p) with a cyclic group of prime order generated by G.
    Powers-of-two multiples of G are cached at construction so that k * G is a sequence of additions only.
    """

    def __init__(self, a: int, b: int, p: int, order: int, generator: Tuple[int, int], name: Optional[str] = None):
        if (4 * pow(a, 3) + 27 * pow(b, 2)) % p == 0:
            raise ValueError("Cannot use Singular curve in ECC")

        self.a = a
        self.b = b
        self.p = p
        self.order = order
        self.generator = Point(*generator)
        self.name = name
        self._generator_doubles = self._precompute_generator_doubles()

    def __repr__(self):
        return json.dumps({
            "name": self.name,
            "p": hex(self.p),
            "order": hex(self.order),
            "generator": (hex(self.generator.x), hex(self.generator.y)),
        })

    def _precompute_generator_doubles(self) -> list[Point]:
        doubles = []
        current = self.generator
        for _ in range(self.order.bit_length()):
            doubles.append(current)
            current = self.double_point(current)
        return doubles

    # --- CURVE MEMBERSHIP --- #

    def x_terms(self, x: int) -> int:
        """x^3 + ax + b mod p"""
        return (pow(x, 3, self.p) + self.a * x + self.b) % self.p

    def is_point_on_curve(self, point: Point) -> bool:
        if not point:
            return True
        return (point.y * point.y - self.x_terms(point.x)) % self.p == 0

    def is_x_on_curve(self, x: int) -> bool:
        return is_quadratic_residue(self.x_terms(x), self.p)

    def find_y_from_x(self, x: int) -> int:
        """Returns the even y-coordinate for x"""
        if not self.is_x_on_curve(x):
            raise ValueError(f"Given x coordinate {x} is not on the curve.")
        y = sqrt_mod_p(self.x_terms(x), self.p)
        return y if y % 2 == 0 else self.p - y

    # --- GROUP LAW --- #

    def double_point(self, point: Point) -> Point:
        if not point or point.y == 0:
            return Point()

        x, y = point
        m = ((3 * x * x + self.a) * pow(2 * y, -1, self.p)) % self.p
        x3 = (m * m - 2 * x) % self.p
        y3 = (m * (x - x3) - y) % self.p
        return Point(x3, y3)

    def add_points(self, point1: Point, point2: Point) -> Point:
        if not point1:
            return point2
        if not point2:
            return point1

        x1, y1 = point1
        x2, y2 = point2
        if x1 == x2:
            return self.double_point(point1) if y1 == y2 else Point()

        m = ((y2 - y1) * pow(x2 - x1, -1, self.p)) % self.p
        x3 = (m * m - x1 - x2) % self.p
        y3 = (m * (x1 - x3) - y1) % self.p
        return Point(x3, y3)

    def scalar_multiplication(self, n: int, point: Point) -> Point:
        """Double-and-add. Multiples of the generator use the cached doubles"""
        n = n % self.order
        if n == 0 or not point:
            return Point()
        if point == self.generator:
            return self.multiply_generator(n)

        result, addend = Point(), point
        while n:
            if n & 1:
                result = self.add_points(result, addend)
            addend = self.double_point(addend)
            n >>= 1
        return result

    def multiply_generator(self, n: int) -> Point:
        n = n % self.order
        result = Point()
        bit = 0
        while n:
            if n & 1:
                result = self.add_points(result, self._generator_doubles[bit])
            n >>= 1
            bit += 1
        return result


# Created once at import
SECP256K1 = EllipticCurve(
    a=0,
    b=7,
    p=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F,
    order=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141,
    generator=(0x79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798,
               0x483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8),
    name="secp256k1"
)
