from typing import Mapping
from typing import NamedTuple
from typing import Optional

from py_zipkin_reporter.encoding._types import SpanKind
from py_zipkin_reporter.span import FinishedSpan
from py_zipkin_reporter.span import Number
from py_zipkin_reporter.span import String
from py_zipkin_reporter.span import TagValue

SPAN_KIND_TAG = "span.kind"

PEER_HOST_TAG = "peer.host"
PEER_IPV4_TAG = "peer.ipv4"
PEER_PORT_TAG = "peer.port"
PEER_SERVICE_TAG = "peer.service"
HTTP_METHOD_TAG = "http.method"
HTTP_URL_TAG = "http.url"


class Peer(NamedTuple):
    """Remote side of a server or client span, as described by its tags."""

    host: Optional[str] = None
    ipv4: Optional[int] = None
    port: Optional[int] = None
    service: Optional[str] = None
    method: Optional[str] = None
    url: Optional[str] = None


def _to_int32(value: int) -> int:
    # Same wrap-around as a long -> int cast.
    return (int(value) + 2 ** 31) % 2 ** 32 - 2 ** 31


def get_string_tag(tags: Mapping[str, TagValue], key: str) -> Optional[str]:
    """Returns the tag's text, or None if it's missing or not a String."""
    value = tags.get(key)
    if isinstance(value, String):
        return value.text
    return None


def get_int32_tag(tags: Mapping[str, TagValue], key: str) -> Optional[int]:
    """Returns the tag's number narrowed to 32 bits, or None if it's missing
    or not a Number.
    """
    value = tags.get(key)
    if isinstance(value, Number):
        return _to_int32(value.number)
    return None


def extract_peer(span: FinishedSpan) -> Peer:
    """Reads the well known peer tags off a span.

    Mistyped tags are treated as missing ones.

    :param span: finished span
    :returns: Peer, with None for every field that couldn't be read
    """
    tags = span.tags
    return Peer(
        host=get_string_tag(tags, PEER_HOST_TAG),
        ipv4=get_int32_tag(tags, PEER_IPV4_TAG),
        port=get_int32_tag(tags, PEER_PORT_TAG),
        service=get_string_tag(tags, PEER_SERVICE_TAG),
        method=get_string_tag(tags, HTTP_METHOD_TAG),
        url=get_string_tag(tags, HTTP_URL_TAG),
    )


def get_span_kind(span: FinishedSpan) -> SpanKind:
    """Classifies a span as server, client or local through its `span.kind`
    tag. Anything but the exact strings "server" and "client" is local.
    """
    kind = get_string_tag(span.tags, SPAN_KIND_TAG)
    if kind == "server":
        return SpanKind.SERVER
    if kind == "client":
        return SpanKind.CLIENT
    return SpanKind.LOCAL
