"""
Password specifications: generation and conformance checking of passwords.
"""

import secrets
from enum import IntFlag
from typing import Any, ClassVar, Iterable, Optional

from pydantic import BaseModel, ConfigDict, PrivateAttr, StrictInt, field_validator, model_validator

from credx.errors import InvalidSpecificationError
from credx.models.base import ProtocolMessage

LOWER_ALPHA = "abcdefghijklmnopqrstuvwxyz"
LOWER_ALPHA_DISTINGUISHABLE = "abcdefghijkmnopqrstxyz"
UPPER_ALPHA = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
UPPER_ALPHA_DISTINGUISHABLE = "ABCDEFGHJKLMNPQRSTXY"
NUMERALS = "1234567890"
NUMERALS_DISTINGUISHABLE = "3456789"
ALPHANUMERIC = LOWER_ALPHA + UPPER_ALPHA + NUMERALS
ALPHANUMERIC_DISTINGUISHABLE = LOWER_ALPHA_DISTINGUISHABLE + UPPER_ALPHA_DISTINGUISHABLE + NUMERALS_DISTINGUISHABLE
SYMBOLS = " !\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"
ALL_PRINTABLE = LOWER_ALPHA + UPPER_ALPHA + NUMERALS + SYMBOLS

DEFAULT_MIN_PASSWORD_LENGTH = 12
DEFAULT_MAX_PASSWORD_LENGTH = 16

_PRINTABLE_LOWER = 0x20
_PRINTABLE_UPPER = 0x7E

_random = secrets.SystemRandom()


class ConformanceFlag(IntFlag):
    CONFORMS = 0
    LENGTH_MISMATCH = 1
    REQUIRED_CHARACTER_MISSING = 2
    DISALLOWED_CHARACTER = 4


def check_result_for_error(result: int, flag: int) -> bool:
    """True when the conformance result has the given error bit set."""
    return (result & flag) != 0


def _is_printable(c: str) -> bool:
    return _PRINTABLE_LOWER <= ord(c) <= _PRINTABLE_UPPER


def normalize_chars(chars: Any, name: str) -> str:
    """Sort and deduplicate a character set, rejecting empty or non-printable input."""
    if not isinstance(chars, str) or not chars:
        raise InvalidSpecificationError(f"{name} cannot be empty")
    for c in chars:
        if not _is_printable(c):
            raise InvalidSpecificationError(f"{name} must only contain ASCII printable characters")
    return "".join(sorted(set(chars)))


class RequiredCharSet(BaseModel):
    """At least ``count`` characters of a password must be drawn from ``chars``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    chars: str
    count: StrictInt

    @field_validator("chars", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> str:
        return normalize_chars(value, "required chars")

    @field_validator("count")
    @classmethod
    def _check_count(cls, value: int) -> int:
        if value < 1:
            raise InvalidSpecificationError("count must be at least 1")
        return value

    def sort_key(self) -> tuple[int, str]:
        return (self.count, self.chars)


def _check_specification(
    allowed: str,
    required_sets: Iterable[RequiredCharSet],
    min_length: Optional[int],
    max_length: Optional[int],
) -> None:
    if not allowed:
        raise InvalidSpecificationError("no allowed characters specified")
    if min_length is None or max_length is None:
        raise InvalidSpecificationError("minimum and maximum size of password not specified")
    if min_length < 1:
        raise InvalidSpecificationError("minimum size must be at least 1")
    if min_length > max_length:
        raise InvalidSpecificationError("maximum size must be greater than or equal to minimum size")

    required_sets = list(required_sets)
    if sum(s.count for s in required_sets) > max_length:
        raise InvalidSpecificationError("required character count cannot be greater than the max password size")

    allowed_set = set(allowed)
    seen: set[str] = set()
    for required in required_sets:
        for c in required.chars:
            if c in seen:
                raise InvalidSpecificationError(f"character {c!r} occurs in more than one required character set")
            if c not in allowed_set:
                raise InvalidSpecificationError(f"required character {c!r} is not allowed")
            seen.add(c)


class PasswordSpecification(ProtocolMessage):
    """Acceptable password shape: allowed characters, required character sets and a length range.

    Build instances with :class:`PasswordSpecificationBuilder`; keyword
    construction and decoding apply the same checks.
    """

    MESSAGE_TYPE: ClassVar[str] = "password_specification"
    INVALID_ERROR: ClassVar[type] = InvalidSpecificationError

    DEFAULT: ClassVar["PasswordSpecification"]
    DEFAULT_FOR_VALIDATION: ClassVar["PasswordSpecification"]

    allowed: str
    required_sets: tuple[RequiredCharSet, ...] = ()
    min_length: StrictInt
    max_length: StrictInt

    _allowed_set: frozenset = PrivateAttr(default=frozenset())
    _required_index: dict = PrivateAttr(default_factory=dict)
    _required_counts: tuple = PrivateAttr(default=())

    @field_validator("allowed", mode="before")
    @classmethod
    def _normalize_allowed(cls, value: Any) -> str:
        return normalize_chars(value, "allowed chars")

    @field_validator("required_sets")
    @classmethod
    def _sort_required(cls, value: tuple[RequiredCharSet, ...]) -> tuple[RequiredCharSet, ...]:
        return tuple(sorted(set(value), key=RequiredCharSet.sort_key))

    @model_validator(mode="after")
    def _check(self) -> "PasswordSpecification":
        _check_specification(self.allowed, self.required_sets, self.min_length, self.max_length)
        return self

    def model_post_init(self, context: Any) -> None:
        index = {}
        for i, required in enumerate(self.required_sets):
            for c in required.chars:
                index[c] = i
        self._required_index = index
        self._required_counts = tuple(s.count for s in self.required_sets)
        self._allowed_set = frozenset(self.allowed)

    @property
    def required_count(self) -> int:
        return sum(self._required_counts)

    def generate(self) -> str:
        """Generate a random password that conforms to this specification."""
        length = _random.randint(self.min_length, self.max_length)
        chars: list[str] = []
        for required in self.required_sets:
            chars.extend(_random.choice(required.chars) for _ in range(required.count))
        chars.extend(_random.choice(self.allowed) for _ in range(length - len(chars)))
        _random.shuffle(chars)
        return "".join(chars)

    def check_conformance(self, password: Optional[str]) -> ConformanceFlag:
        """Check a password, returning the OR of every problem found (CONFORMS when none)."""
        result = ConformanceFlag.CONFORMS
        if not password:
            password = ""
            result |= ConformanceFlag.LENGTH_MISMATCH
        if not self.min_length <= len(password) <= self.max_length:
            result |= ConformanceFlag.LENGTH_MISMATCH

        remaining = list(self._required_counts)
        for c in password:
            if c not in self._allowed_set:
                result |= ConformanceFlag.DISALLOWED_CHARACTER
            index = self._required_index.get(c)
            if index is not None:
                remaining[index] -= 1

        if any(count > 0 for count in remaining):
            result |= ConformanceFlag.REQUIRED_CHARACTER_MISSING
        return result

    def conforms(self, password: Optional[str]) -> bool:
        return self.check_conformance(password) == ConformanceFlag.CONFORMS


class PasswordSpecificationBuilder:
    """Staged construction of a PasswordSpecification, validated by ``build()``.

    Example::

        spec = (
            PasswordSpecificationBuilder()
            .of_length(8, 16)
            .allow(ALPHANUMERIC)
            .require(NUMERALS, 1)
            .build()
        )
    """

    def __init__(self):
        self._allowed: set[str] = set()
        self._required: list[RequiredCharSet] = []
        self._min_length: Optional[int] = None
        self._max_length: Optional[int] = None

    @classmethod
    def from_specification(cls, spec: PasswordSpecification) -> "PasswordSpecificationBuilder":
        builder = cls()
        builder._allowed.update(spec.allowed)
        builder._required.extend(spec.required_sets)
        builder._min_length = spec.min_length
        builder._max_length = spec.max_length
        return builder

    def allow(self, chars: str) -> "PasswordSpecificationBuilder":
        """Characters that may appear in a password any number of times."""
        self._allowed.update(normalize_chars(chars, "allowed chars"))
        return self

    def require(self, chars: str, count: int) -> "PasswordSpecificationBuilder":
        """At least ``count`` characters drawn from ``chars``. The characters are also allowed."""
        if count < 1:
            raise InvalidSpecificationError("count must be at least 1")
        normalized = normalize_chars(chars, "required chars")
        self._allowed.update(normalized)
        self._required.append(RequiredCharSet(chars=normalized, count=count))
        return self

    def of_length(self, min_length: int, max_length: int) -> "PasswordSpecificationBuilder":
        if min_length < 1:
            raise InvalidSpecificationError("minimum size must be at least 1")
        if min_length > max_length:
            raise InvalidSpecificationError("maximum size must be greater than or equal to minimum size")
        self._min_length = min_length
        self._max_length = max_length
        return self

    def build(self) -> PasswordSpecification:
        allowed = "".join(sorted(self._allowed))
        required = sorted(set(self._required), key=RequiredCharSet.sort_key)
        _check_specification(allowed, required, self._min_length, self._max_length)
        return PasswordSpecification(
            allowed=allowed,
            required_sets=tuple(required),
            min_length=self._min_length,
            max_length=self._max_length,
        )


PasswordSpecification.DEFAULT = (
    PasswordSpecificationBuilder()
    .of_length(DEFAULT_MIN_PASSWORD_LENGTH, DEFAULT_MAX_PASSWORD_LENGTH)
    .allow(ALPHANUMERIC_DISTINGUISHABLE)
    .require(LOWER_ALPHA_DISTINGUISHABLE, 1)
    .require(UPPER_ALPHA_DISTINGUISHABLE, 1)
    .require(NUMERALS_DISTINGUISHABLE, 1)
    .build()
)

PasswordSpecification.DEFAULT_FOR_VALIDATION = (
    PasswordSpecificationBuilder()
    .of_length(DEFAULT_MIN_PASSWORD_LENGTH, DEFAULT_MAX_PASSWORD_LENGTH)
    .allow(ALPHANUMERIC)
    .require(LOWER_ALPHA, 1)
    .require(UPPER_ALPHA, 1)
    .require(NUMERALS, 1)
    .build()
)
