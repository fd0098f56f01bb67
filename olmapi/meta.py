"""Shared object metadata, group/version naming and duration helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

GROUP_NAME = "operators.coreos.com"


@dataclass(frozen=True)
class GroupKind:
    group: str
    kind: str


@dataclass(frozen=True)
class GroupResource:
    group: str
    resource: str


@dataclass(frozen=True)
class GroupVersionKind:
    group: str
    version: str
    kind: str

    def group_kind(self) -> GroupKind:
        return GroupKind(self.group, self.kind)


@dataclass(frozen=True)
class GroupVersionResource:
    group: str
    version: str
    resource: str

    def group_resource(self) -> GroupResource:
        return GroupResource(self.group, self.resource)


@dataclass(frozen=True)
class GroupVersion:
    group: str
    version: str

    def with_kind(self, kind: str) -> GroupVersionKind:
        return GroupVersionKind(self.group, self.version, kind)

    def with_resource(self, resource: str) -> GroupVersionResource:
        return GroupVersionResource(self.group, self.version, resource)

    def __str__(self) -> str:
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version


V1ALPHA1_GROUP_VERSION = GroupVersion(GROUP_NAME, "v1alpha1")
V1ALPHA2_GROUP_VERSION = GroupVersion(GROUP_NAME, "v1alpha2")
V2_GROUP_VERSION = GroupVersion(GROUP_NAME, "v2")


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


@dataclass
class ObjectMeta:
    """Metadata common to every stored object."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    resource_version: str = ""
    generation: int = 0
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    creation_timestamp: datetime | None = None


@dataclass
class ObjectReference:
    kind: str = ""
    namespace: str = ""
    name: str = ""
    uid: str = ""
    api_version: str = ""
    resource_version: str = ""
    field_path: str = ""


@dataclass
class Condition:
    type: str
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    observed_generation: int = 0
    last_transition_time: datetime | None = None


@dataclass
class LabelSelector:
    match_labels: dict[str, str] = field(default_factory=dict)
    match_expressions: list[dict[str, Any]] = field(default_factory=list)


def kind(kind: str, group_version: GroupVersion = V1ALPHA1_GROUP_VERSION) -> GroupKind:
    """Qualify an unqualified kind with the group of ``group_version``."""
    return group_version.with_kind(kind).group_kind()


def resource(
    resource: str, group_version: GroupVersion = V1ALPHA1_GROUP_VERSION
) -> GroupResource:
    """Qualify an unqualified resource with the group of ``group_version``."""
    return group_version.with_resource(resource).group_resource()


_NANOSECOND = 1
_MICROSECOND = 1_000
_MILLISECOND = 1_000_000
_SECOND = 1_000_000_000
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE

_UNITS = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "\u00b5s": _MICROSECOND,
    "\u03bcs": _MICROSECOND,
    "ms": _MILLISECOND,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}

_LIMIT = 1 << 63
_DIGITS = re.compile(r"[0-9]*")
_UNIT = re.compile(r"[^0-9.]*")


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _invalid(text: str) -> ValueError:
    return ValueError(f"time: invalid duration {_quote(text)}")


def _nanoseconds_to_timedelta(nanoseconds: int) -> timedelta:
    sign = -1 if nanoseconds < 0 else 1
    return sign * timedelta(microseconds=abs(nanoseconds) // _MICROSECOND)


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``"1h30m"`` or ``"-1.5s"``.

    Raises ValueError for malformed text.
    """
    rest = text
    negative = False
    if rest and rest[0] in "-+":
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise _invalid(text)

    total = 0
    while rest:
        if rest[0] not in ".0123456789":
            raise _invalid(text)

        whole_digits = _DIGITS.match(rest).group()
        rest = rest[len(whole_digits):]
        value = int(whole_digits) if whole_digits else 0
        if value > _LIMIT:
            raise _invalid(text)

        fraction, scale, has_fraction = 0, 1.0, False
        if rest.startswith("."):
            rest = rest[1:]
            frac_digits = _DIGITS.match(rest).group()
            rest = rest[len(frac_digits):]
            has_fraction = bool(frac_digits)
            overflow = False
            for ch in frac_digits:
                if overflow:
                    continue
                candidate = fraction * 10 + int(ch)
                if candidate > _LIMIT:
                    overflow = True
                    continue
                fraction = candidate
                scale *= 10
        if not whole_digits and not has_fraction:
            raise _invalid(text)

        unit_text = _UNIT.match(rest).group()
        if not unit_text:
            raise ValueError(f"time: missing unit in duration {_quote(text)}")
        rest = rest[len(unit_text):]
        unit = _UNITS.get(unit_text)
        if unit is None:
            raise ValueError(
                f"time: unknown unit {_quote(unit_text)} in duration {_quote(text)}"
            )

        if value > _LIMIT // unit:
            raise _invalid(text)
        value *= unit
        if fraction > 0:
            value += int(float(fraction) * (unit / scale))
            if value > _LIMIT:
                raise _invalid(text)
        total += value
        if total > _LIMIT:
            raise _invalid(text)

    if negative:
        return _nanoseconds_to_timedelta(-total)
    if total > _LIMIT - 1:
        raise _invalid(text)
    return _nanoseconds_to_timedelta(total)


def _format_fraction(value: int, precision: int) -> tuple[str, int]:
    digits: list[str] = []
    printed = False
    for _ in range(precision):
        value, digit = divmod(value, 10)
        printed = printed or digit != 0
        if printed:
            digits.append(str(digit))
    text = "." + "".join(reversed(digits)) if printed else ""
    return text, value


def format_duration(duration: timedelta) -> str:
    """Format a duration in the ``72h3m0.5s`` style that parse_duration reads."""
    nanoseconds = (
        (duration.days * 86_400 + duration.seconds) * _SECOND
        + duration.microseconds * _MICROSECOND
    )
    negative = nanoseconds < 0
    magnitude = abs(nanoseconds)

    if magnitude == 0:
        return "0s"
    if magnitude < _SECOND:
        if magnitude < _MICROSECOND:
            precision, suffix = 0, "ns"
        elif magnitude < _MILLISECOND:
            precision, suffix = 3, "\u00b5s"
        else:
            precision, suffix = 6, "ms"
        fraction, whole = _format_fraction(magnitude, precision)
        text = f"{whole}{fraction}{suffix}"
    else:
        fraction, whole_seconds = _format_fraction(magnitude, 9)
        minutes, seconds = divmod(whole_seconds, 60)
        text = f"{seconds}{fraction}s"
        if minutes:
            hours, minutes = divmod(minutes, 60)
            text = f"{minutes}m{text}"
            if hours:
                text = f"{hours}h{text}"
    return f"-{text}" if negative else text