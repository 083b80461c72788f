from __future__ import annotations

from typing import ClassVar, Tuple, Union

TokenLike = Union["Token", int]


class Token:
    """
    Token count of a single place: a non-negative integer or :attr:`OMEGA`.

    ``OMEGA`` stands for "unboundedly many tokens". It absorbs addition and
    subtraction of finite amounts and compares strictly greater than every
    finite count. Finite counts are Python ints, so repeated additions
    never overflow.

    Instances are immutable and hashable. Use :meth:`value_of` instead of
    the constructor; small counts are interned.
    """

    __slots__ = ("_value", "_omega")

    OMEGA: ClassVar["Token"]
    ZERO: ClassVar["Token"]
    _cache: ClassVar[Tuple["Token", ...]]

    def __init__(self, value: int, omega: bool = False) -> None:
        if not omega and value < 0:
            raise ValueError(f"Token count must be non-negative, got {value}")
        object.__setattr__(self, "_value", 0 if omega else int(value))
        object.__setattr__(self, "_omega", omega)

    def __setattr__(self, name, value):
        raise AttributeError("Token is immutable")

    @classmethod
    def value_of(cls, value: TokenLike) -> "Token":
        """
        Return the token for ``value``.

        :param value: A :class:`Token` (returned unchanged) or a
            non-negative integer.
        :raises ValueError: If ``value`` is negative.
        """
        if isinstance(value, Token):
            return value
        if 0 <= value < len(cls._cache):
            return cls._cache[value]
        return cls(value)

    @property
    def is_omega(self) -> bool:
        return self._omega

    @property
    def value(self) -> int:
        """
        Finite token count.

        :raises ValueError: For :attr:`OMEGA`.
        """
        if self._omega:
            raise ValueError("OMEGA has no finite value")
        return self._value

    def add(self, other: TokenLike) -> "Token":
        """
        Add a token or a (possibly negative) integer.

        ``OMEGA`` absorbs every finite amount, and adding ``OMEGA`` to a
        finite count yields ``OMEGA``.

        :raises ValueError: If a finite result would become negative.
        """
        if self._omega:
            return self
        if isinstance(other, Token):
            if other._omega:
                return other
            other = other._value
        result = self._value + other
        if result < 0:
            raise ValueError(f"Token count would become negative: {self} + {other}")
        return Token.value_of(result)

    def __add__(self, other: TokenLike) -> "Token":
        if not isinstance(other, (Token, int)):
            return NotImplemented
        return self.add(other)

    __radd__ = __add__

    def __sub__(self, other: int) -> "Token":
        if not isinstance(other, int):
            return NotImplemented
        return self.add(-other)

    def compare(self, other: TokenLike) -> int:
        """Three-way comparison returning -1, 0 or 1."""
        other = Token.value_of(other)
        if self._omega:
            return 0 if other._omega else 1
        if other._omega:
            return -1
        return (self._value > other._value) - (self._value < other._value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, int) and not isinstance(other, bool):
            return not self._omega and self._value == other
        if not isinstance(other, Token):
            return NotImplemented
        return self._omega == other._omega and self._value == other._value

    def __hash__(self) -> int:
        # finite tokens hash like the int they compare equal to
        return hash(self._value) if not self._omega else hash((True, "OMEGA"))

    def __lt__(self, other: TokenLike) -> bool:
        return self.compare(other) < 0

    def __le__(self, other: TokenLike) -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: TokenLike) -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: TokenLike) -> bool:
        return self.compare(other) >= 0

    def __str__(self) -> str:
        return "OMEGA" if self._omega else str(self._value)

    def __repr__(self) -> str:
        return "Token.OMEGA" if self._omega else f"Token({self._value})"


Token.OMEGA = Token(0, omega=True)
Token._cache = tuple(Token(i) for i in range(256))
Token.ZERO = Token._cache[0]
