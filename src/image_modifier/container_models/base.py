from __future__ import annotations

import re
from collections.abc import Callable
from operator import add, mul, sub
from typing import Final, NamedTuple

_MAXIMUM_TOKEN: Final[re.Pattern[str]] = re.compile(r"max_([1-9]\d*)", re.IGNORECASE)


class Dimensions(NamedTuple):
    width: int
    height: int

    def _apply(self, op: Callable, other: Dimensions | int) -> Dimensions:
        if isinstance(other, tuple):
            return Dimensions(*map(op, self, other))
        return Dimensions(op(self.width, other), op(self.height, other))

    def __add__(self, other: Dimensions | int) -> Dimensions:  # type: ignore[override]
        return self._apply(add, other)

    def __sub__(self, other: Dimensions | int) -> Dimensions:
        return self._apply(sub, other)

    def __mul__(self, other: Dimensions | int) -> Dimensions:  # type: ignore[override]
        return self._apply(mul, other)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def is_landscape(self) -> bool:
        """Landscape or square."""
        return self.aspect_ratio >= 1

    @property
    def is_positive(self) -> bool:
        return self.width > 0 and self.height > 0

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


class Maximum(NamedTuple):
    """
    Upper bound for one side of a resize.

    The bounded side is derived from the other (exact) side to preserve the
    aspect ratio, and clamped to ``value`` when it would exceed it.
    """

    value: int

    @classmethod
    def parse(cls, token: object) -> Maximum | None:
        """
        Parse a ``max_<N>`` token.

        :param token: Any resize argument.
        :returns: A `Maximum` for tokens like ``"max_300"``, otherwise `None`.
        """
        if isinstance(token, Maximum):
            return token
        if isinstance(token, str) and (match := _MAXIMUM_TOKEN.fullmatch(token.strip())):
            return cls(int(match.group(1)))
        return None

    def __str__(self) -> str:
        return f"max_{self.value}"
