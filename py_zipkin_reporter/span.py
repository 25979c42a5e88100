"""Finished spans, as handed over by the host tracing runtime."""
from dataclasses import dataclass
from typing import Mapping
from typing import NamedTuple
from typing import Optional
from typing import Union

from py_zipkin_reporter.exception import ZipkinError


class Identifier(NamedTuple):
    """Opaque trace or span identity token.

    :param string: printable form of the identifier, usually hex
    :param bytes: byte form of the identifier
    """

    string: str
    bytes: bytes


# Dataclasses rather than tuples, so that Boolean(True) != Number(1).
@dataclass(frozen=True)
class Boolean:
    value: bool


@dataclass(frozen=True)
class String:
    text: str


@dataclass(frozen=True)
class Number:
    number: int


TagValue = Union[Boolean, String, Number]

TRUE = Boolean(True)
FALSE = Boolean(False)


def to_tag_value(value: Union[bool, str, int, float]) -> TagValue:
    """Wraps a plain python value into the matching TagValue.

    Floats are truncated, since the host runtime only keeps integer numbers.

    :param value: bool, str, int or float
    :returns: TagValue
    :raises ZipkinError: for any other type
    """
    # bool first, it's a subclass of int
    if isinstance(value, bool):
        return TRUE if value else FALSE
    if isinstance(value, str):
        return String(value)
    if isinstance(value, (int, float)):
        return Number(int(value))
    raise ZipkinError(f"Invalid tag value {value!r}. Must be bool, str or number.")


class SpanContext(NamedTuple):
    trace_id: Optional[Identifier]
    span_id: Optional[Identifier]
    parent_id: Optional[Identifier] = None


class FinishedSpan(NamedTuple):
    """A span that has been closed by the host tracing runtime.

    :param context: trace, span and parent identifiers
    :param operation_name: name of the traced operation
    :param start: start instant, in nanoseconds since epoch
    :param end: end instant, in nanoseconds since epoch
    :param tags: tag key -> TagValue
    """

    context: SpanContext
    operation_name: str
    start: int
    end: int
    tags: Mapping[str, TagValue]
