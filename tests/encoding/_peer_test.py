import pytest

from py_zipkin_reporter.encoding._peer import extract_peer
from py_zipkin_reporter.encoding._peer import get_span_kind
from py_zipkin_reporter.encoding._peer import Peer
from py_zipkin_reporter.encoding._types import SpanKind
from py_zipkin_reporter.span import Number
from py_zipkin_reporter.span import String
from py_zipkin_reporter.span import TRUE


@pytest.mark.parametrize(
    "tags,expected",
    [
        ({"span.kind": String("server")}, SpanKind.SERVER),
        ({"span.kind": String("client")}, SpanKind.CLIENT),
        ({"span.kind": String("Server")}, SpanKind.LOCAL),
        ({"span.kind": String("producer")}, SpanKind.LOCAL),
        ({"span.kind": String("")}, SpanKind.LOCAL),
        ({"span.kind": Number(1)}, SpanKind.LOCAL),
        ({"span.kind": TRUE}, SpanKind.LOCAL),
        ({"component": String("server")}, SpanKind.LOCAL),
        ({}, SpanKind.LOCAL),
    ],
)
def test_get_span_kind(make_span, tags, expected):
    assert get_span_kind(make_span(tags)) == expected


def test_extract_peer(make_span):
    span = make_span(
        {
            "peer.host": String("10.0.0.1"),
            "peer.ipv4": Number(42),
            "peer.port": Number(8080),
            "peer.service": String("checkout"),
            "http.method": String("POST"),
            "http.url": String("/orders"),
        }
    )
    assert extract_peer(span) == Peer(
        host="10.0.0.1",
        ipv4=42,
        port=8080,
        service="checkout",
        method="POST",
        url="/orders",
    )


def test_extract_peer_without_tags(make_span):
    assert extract_peer(make_span()) == Peer()


def test_extract_peer_ignores_mistyped_tags(make_span):
    span = make_span(
        {
            "peer.host": String("10.0.0.1"),
            "peer.ipv4": String("42"),
            "peer.port": TRUE,
            "peer.service": Number(1),
            "http.method": TRUE,
            "http.url": Number(404),
        }
    )
    assert extract_peer(span) == Peer(host="10.0.0.1")


def test_extract_peer_narrows_numbers_to_32_bits(make_span):
    span = make_span(
        {"peer.ipv4": Number(2 ** 32 + 5), "peer.port": Number(2 ** 31)}
    )
    peer = extract_peer(span)
    assert peer.ipv4 == 5
    assert peer.port == -(2 ** 31)
