"""N-dimensional vectors of floats, with the usual geometric helpers."""

from __future__ import annotations

import math
import operator
import random as _random
from typing import Callable, Iterable, Iterator, Union

Number = Union[int, float]

_generator = _random.Random()


def random_double(low: float = 0.0, high: float = 1.0) -> float:
    """Return a random float in the half-open range [low, high)."""
    return low + (high - low) * _generator.random()


class Vec:
    """Immutable N-dimensional vector with element-wise arithmetic.

    Arithmetic works between two vectors of the same dimension, or between a
    vector and a scalar. A scalar on the left-hand side behaves exactly as if
    it were on the right: ``2 - v`` equals ``v - 2``.
    """

    __slots__ = ("_data",)

    def __init__(self, *args: Number) -> None:
        self._data = tuple(float(value) for value in args)

    @classmethod
    def _of(cls, values: Iterable[Number]) -> "Vec":
        obj = object.__new__(cls)
        obj._data = tuple(float(value) for value in values)
        return obj

    @classmethod
    def zeros(cls, n: int) -> "Vec":
        """Return the zero vector of dimension ``n``."""
        return cls._of([0.0] * n)

    @classmethod
    def random(cls, n: int, low: float = 0.0, high: float = 1.0) -> "Vec":
        """Return a vector whose components are random in [low, high)."""
        return cls._of(random_double(low, high) for _ in range(n))

    @classmethod
    def random_unit(cls) -> "Vec":
        """Return a random 3D unit vector, uniformly distributed on the sphere."""
        while True:
            p = cls.random(3, -1.0, 1.0)
            squared = dot(p, p)
            if 0.0 < squared <= 1.0:
                return p / math.sqrt(squared)

    def length(self) -> float:
        """Euclidean length of the vector."""
        return math.sqrt(sum(x * x for x in self._data))

    def normalized(self) -> "Vec":
        """Return the unit vector in the same direction; a zero vector stays zero."""
        norm = self.length()
        if norm == 0.0:
            return type(self)._of(self._data)
        return type(self)._of(x / norm for x in self._data)

    def clamped(self, low: float, high: float) -> "Vec":
        """Return a copy with every component clamped to [low, high]."""
        return type(self)._of(min(max(x, low), high) for x in self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[float]:
        return iter(self._data)

    def __getitem__(self, index: int) -> float:
        return self._data[index]

    def _apply(self, other: object, op: Callable[[float, float], float]) -> "Vec":
        if isinstance(other, Vec):
            if len(other) != len(self):
                raise ValueError(
                    f"dimension mismatch: {len(self)} and {len(other)}"
                )
            return type(self)._of(map(op, self._data, other._data))
        if isinstance(other, (int, float)):
            scalar = float(other)
            return type(self)._of(op(x, scalar) for x in self._data)
        return NotImplemented

    def __add__(self, other: object) -> "Vec":
        return self._apply(other, operator.add)

    def __radd__(self, other: object) -> "Vec":
        return self._apply(other, operator.add)

    def __sub__(self, other: object) -> "Vec":
        return self._apply(other, operator.sub)

    def __rsub__(self, other: object) -> "Vec":
        return self._apply(other, operator.sub)

    def __mul__(self, other: object) -> "Vec":
        return self._apply(other, operator.mul)

    def __rmul__(self, other: object) -> "Vec":
        return self._apply(other, operator.mul)

    def __truediv__(self, other: object) -> "Vec":
        return self._apply(other, operator.truediv)

    def __rtruediv__(self, other: object) -> "Vec":
        return self._apply(other, operator.truediv)

    def __neg__(self) -> "Vec":
        return type(self)._of(-x for x in self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec):
            return NotImplemented
        return self._data == other._data

    def __hash__(self) -> int:
        return hash(self._data)

    def __repr__(self) -> str:
        inner = ", ".join(repr(x) for x in self._data)
        return f"{type(self).__name__}({inner})"


Color = Vec


def dot(lhs: Vec, rhs: Vec) -> float:
    """Dot product of two vectors of the same dimension."""
    if len(lhs) != len(rhs):
        raise ValueError(f"dimension mismatch: {len(lhs)} and {len(rhs)}")
    return sum(a * b for a, b in zip(lhs, rhs))


def cross(lhs: Vec, rhs: Vec) -> Vec:
    """Cross product of two 3D vectors."""
    if len(lhs) != 3 or len(rhs) != 3:
        raise ValueError("cross product is defined for 3D vectors only")
    return Vec(
        lhs[1] * rhs[2] - lhs[2] * rhs[1],
        lhs[2] * rhs[0] - lhs[0] * rhs[2],
        lhs[0] * rhs[1] - lhs[1] * rhs[0],
    )


def reflect(lhs: Vec, rhs: Vec) -> Vec:
    """Reflect ``lhs`` across the (normally unit) vector ``rhs``."""
    return lhs - 2 * dot(lhs, rhs) * rhs