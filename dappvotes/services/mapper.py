"""Conversion of raw contract tuples into domain records."""

import math
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from dappvotes.core.exceptions import MalformedRecordError
from dappvotes.models.voting import Contestant, Poll

# Struct member order as declared in the contract ABI
POLL_FIELDS = (
    "id",
    "image",
    "title",
    "description",
    "votes",
    "contestants",
    "deleted",
    "director",
    "startsAt",
    "endsAt",
    "timestamp",
    "voters",
    "avatars",
)
CONTESTANT_FIELDS = ("id", "image", "name", "voter", "votes", "voters")


def parse_int(value: Any, field: str) -> int:
    """
    Strictly parse an on-chain integer.

    Accepts ints, integral floats and decimal or ``0x`` strings. Vote counts
    are integrity-critical, so anything else raises instead of becoming 0.
    """
    if isinstance(value, bool):
        raise MalformedRecordError(field, value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        raise MalformedRecordError(field, value)
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            return int(text, 10)
        except ValueError as e:
            raise MalformedRecordError(field, value) from e
    raise MalformedRecordError(field, value)


def parse_count(value: Any, field: str) -> int:
    """Parse a non-negative counter."""
    number = parse_int(value, field)
    if number < 0:
        raise MalformedRecordError(field, value)
    return number


def parse_bool(value: Any, field: str) -> bool:
    """Accept only a real boolean; strings such as ``"false"`` are malformed."""
    if not isinstance(value, bool):
        raise MalformedRecordError(field, value)
    return value


def parse_address(value: Any, field: str) -> str:
    """Lowercase an address."""
    if not isinstance(value, str):
        raise MalformedRecordError(field, value)
    return value.lower()


def _as_mapping(raw: Any, fields: tuple[str, ...]) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        if len(raw) != len(fields):
            raise MalformedRecordError("record", raw)
        return dict(zip(fields, raw))
    raise MalformedRecordError("record", raw)


def _field(record: Mapping[str, Any], name: str) -> Any:
    if name not in record:
        raise MalformedRecordError(name, None)
    return record[name]


def _address_list(record: Mapping[str, Any], name: str) -> list[str]:
    values = _field(record, name)
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise MalformedRecordError(name, values)
    return [parse_address(v, name) for v in values]


def structure_poll(raw: Any) -> Poll:
    """Convert one raw poll tuple."""
    record = _as_mapping(raw, POLL_FIELDS)
    try:
        return Poll(
            id=parse_int(_field(record, "id"), "id"),
            image=_field(record, "image"),
            title=_field(record, "title"),
            description=_field(record, "description"),
            votes=parse_count(_field(record, "votes"), "votes"),
            contestants=parse_count(_field(record, "contestants"), "contestants"),
            deleted=parse_bool(_field(record, "deleted"), "deleted"),
            director=parse_address(_field(record, "director"), "director"),
            starts_at=parse_int(_field(record, "startsAt"), "startsAt"),
            ends_at=parse_int(_field(record, "endsAt"), "endsAt"),
            timestamp=parse_int(_field(record, "timestamp"), "timestamp"),
            voters=_address_list(record, "voters"),
            avatars=list(_field(record, "avatars")),
        )
    except ValidationError as e:
        raise MalformedRecordError("poll", raw) from e


def structure_polls(raw_polls: Sequence[Any]) -> list[Poll]:
    """Convert raw polls, newest first. Ties keep input order."""
    polls = [structure_poll(raw) for raw in raw_polls]
    return sorted(polls, key=lambda p: p.timestamp, reverse=True)


def structure_contestant(raw: Any) -> Contestant:
    """Convert one raw contestant tuple."""
    record = _as_mapping(raw, CONTESTANT_FIELDS)
    try:
        return Contestant(
            id=parse_int(_field(record, "id"), "id"),
            image=_field(record, "image"),
            name=_field(record, "name"),
            voter=parse_address(_field(record, "voter"), "voter"),
            votes=parse_count(_field(record, "votes"), "votes"),
            voters=_address_list(record, "voters"),
        )
    except ValidationError as e:
        raise MalformedRecordError("contestant", raw) from e


def structure_contestants(raw_contestants: Sequence[Any]) -> list[Contestant]:
    """Convert raw contestants, most votes first. Ties keep input order."""
    contestants = [structure_contestant(raw) for raw in raw_contestants]
    return sorted(contestants, key=lambda c: c.votes, reverse=True)
