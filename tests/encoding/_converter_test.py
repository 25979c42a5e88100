from py_zipkin_reporter import thrift
from py_zipkin_reporter.encoding._converter import convert_span
from py_zipkin_reporter.encoding._converter import tag_binary_annotations
from py_zipkin_reporter.span import Identifier
from py_zipkin_reporter.span import Number
from py_zipkin_reporter.span import SpanContext
from py_zipkin_reporter.span import String
from py_zipkin_reporter.span import TRUE
from py_zipkin_reporter.util import identifier_from_hex
from tests.test_helpers import END_NS
from tests.test_helpers import START_NS

zipkinCore = thrift.zipkinCore


def test_convert_span_ids_and_timing(make_span, local_endpoint):
    span = convert_span(make_span(), local_endpoint)

    assert span.trace_id == 7
    assert span.id == 3
    assert span.parent_id == 1
    assert span.name == "get_user"
    assert span.timestamp == 1538544126115900
    # 10000999ns, the sub-microsecond remainder is dropped
    assert span.duration == 10000


def test_convert_client_span_without_parent(make_span, local_endpoint):
    context = SpanContext(
        trace_id=Identifier("0000000000000007", bytes([0, 0, 0, 0, 0, 0, 0, 7])),
        span_id=Identifier("0000000000000003", bytes([0, 0, 0, 0, 0, 0, 0, 3])),
        parent_id=None,
    )
    span = convert_span(
        make_span(
            {"span.kind": String("client"), "peer.service": String("checkout")},
            context=context,
        ),
        local_endpoint,
    )

    assert span.trace_id == 7
    assert span.id == 3
    assert span.parent_id is None
    assert [(a.value, a.timestamp) for a in span.annotations] == [
        ("cs", START_NS // 1000),
        ("cr", END_NS // 1000),
    ]
    address = span.binary_annotations[0]
    assert address.key == "ca"
    assert address.host.service_name == "checkout"


def test_convert_span_with_empty_parent_id(make_span, local_endpoint):
    context = SpanContext(
        trace_id=identifier_from_hex("0000000000000007"),
        span_id=identifier_from_hex("0000000000000003"),
        parent_id=Identifier("", b""),
    )
    span = convert_span(make_span(context=context), local_endpoint)
    assert span.parent_id is None


def test_convert_span_with_malformed_ids(make_span, local_endpoint):
    context = SpanContext(
        trace_id=Identifier("7", b"\x07"),
        span_id=None,
        parent_id=Identifier("abc", b"\x0a\xbc"),
    )
    span = convert_span(make_span(context=context), local_endpoint)

    assert span.trace_id == 0
    assert span.id == 0
    # A parent that is there but unreadable is still reported, as 0
    assert span.parent_id == 0


def test_convert_server_span(make_span, local_endpoint):
    tags = {
        "span.kind": String("server"),
        "peer.host": String("10.0.0.2"),
        "http.method": String("GET"),
        "http.url": String("/users/1"),
    }
    span = convert_span(make_span(tags), local_endpoint)

    assert [(a.value, a.timestamp, a.host) for a in span.annotations] == [
        ("sr", START_NS // 1000, local_endpoint),
        ("ss", END_NS // 1000, local_endpoint),
    ]
    assert [b.key for b in span.binary_annotations] == [
        # core annotations first
        "http.path",
        "http.method",
        "sa",
        # then one per tag
        "span.kind",
        "peer.host",
        "http.method",
        "http.url",
    ]


def test_convert_local_span(make_span, local_endpoint):
    span = convert_span(make_span(name="compute_total"), local_endpoint)

    assert span.annotations == []
    assert span.binary_annotations == [
        thrift.create_binary_annotation(
            "lc", b"compute_total", zipkinCore.AnnotationType.STRING, local_endpoint
        )
    ]


def test_convert_local_span_keeps_peer_tags_as_plain_tags(make_span, local_endpoint):
    span = convert_span(
        make_span({"span.kind": String("producer"), "peer.host": String("db")}),
        local_endpoint,
    )

    assert span.annotations == []
    keys = [b.key for b in span.binary_annotations]
    assert keys == ["lc", "span.kind", "peer.host"]
    assert "sa" not in keys and "ca" not in keys


def test_tag_binary_annotations(make_span, local_endpoint):
    span = make_span({"error": TRUE, "http.status_code": Number(500)})

    assert tag_binary_annotations(span, local_endpoint) == [
        thrift.create_binary_annotation(
            "error", b"\x01", zipkinCore.AnnotationType.BOOL, local_endpoint
        ),
        thrift.create_binary_annotation(
            "http.status_code",
            b"\x01\xf4",
            zipkinCore.AnnotationType.I64,
            local_endpoint,
        ),
    ]


def test_convert_span_is_idempotent(make_span, local_endpoint):
    finished_span = make_span(
        {
            "span.kind": String("server"),
            "peer.ipv4": Number(42),
            "error": TRUE,
        }
    )

    first = convert_span(finished_span, local_endpoint)
    second = convert_span(finished_span, local_endpoint)

    assert first == second
    assert first is not second
    assert first.binary_annotations is not second.binary_annotations
