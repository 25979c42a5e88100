import pytest

from py_zipkin_reporter import thrift
from py_zipkin_reporter.encoding._annotations import annotate_client_span
from py_zipkin_reporter.encoding._annotations import annotate_local_span
from py_zipkin_reporter.encoding._annotations import annotate_server_span
from py_zipkin_reporter.encoding._annotations import build_core_annotations
from py_zipkin_reporter.encoding._peer import Peer
from py_zipkin_reporter.encoding._types import SpanKind
from tests.test_helpers import END_NS
from tests.test_helpers import START_NS

zipkinCore = thrift.zipkinCore


@pytest.fixture
def peer():
    return Peer(
        host="10.0.0.2",
        ipv4=thrift.ipv4_to_int("10.0.0.2"),
        port=8080,
        service="checkout",
        method="POST",
        url="/orders",
    )


def test_annotate_server_span(make_span, local_endpoint, peer):
    annotations, binary_annotations = annotate_server_span(
        make_span(), peer, local_endpoint
    )

    assert annotations == [
        thrift.create_annotation(START_NS // 1000, "sr", local_endpoint),
        thrift.create_annotation(END_NS // 1000, "ss", local_endpoint),
    ]
    assert binary_annotations == [
        thrift.create_binary_annotation(
            "http.path", b"/orders", zipkinCore.AnnotationType.STRING, local_endpoint
        ),
        thrift.create_binary_annotation(
            "http.method", b"POST", zipkinCore.AnnotationType.STRING, local_endpoint
        ),
        thrift.create_binary_annotation(
            "sa",
            b"10.0.0.2",
            zipkinCore.AnnotationType.STRING,
            thrift.create_endpoint("checkout", thrift.ipv4_to_int("10.0.0.2")),
        ),
    ]


def test_annotate_server_span_without_peer_tags(make_span, local_endpoint):
    annotations, binary_annotations = annotate_server_span(
        make_span(), Peer(), local_endpoint
    )

    assert [a.value for a in annotations] == ["sr", "ss"]
    assert binary_annotations == [
        thrift.create_binary_annotation(
            "sa",
            b"",
            zipkinCore.AnnotationType.STRING,
            thrift.create_endpoint("", 0),
        )
    ]


def test_annotate_client_span(make_span, local_endpoint, peer):
    annotations, binary_annotations = annotate_client_span(
        make_span(), peer, local_endpoint
    )

    assert annotations == [
        thrift.create_annotation(START_NS // 1000, "cs", local_endpoint),
        thrift.create_annotation(END_NS // 1000, "cr", local_endpoint),
    ]
    # http tags only get dedicated annotations on the server side
    assert len(binary_annotations) == 1
    address = binary_annotations[0]
    assert address.key == "ca"
    assert address.value == b"10.0.0.2"
    assert address.host.service_name == "checkout"
    assert address.host.ipv4 == thrift.ipv4_to_int("10.0.0.2")
    assert address.host.port is None


def test_annotate_local_span(make_span, local_endpoint):
    annotations, binary_annotations = annotate_local_span(
        make_span(name="compute_total"), None, local_endpoint
    )

    assert annotations == []
    assert binary_annotations == [
        thrift.create_binary_annotation(
            "lc",
            b"compute_total",
            zipkinCore.AnnotationType.STRING,
            local_endpoint,
        )
    ]


@pytest.mark.parametrize(
    "kind,labels",
    [
        (SpanKind.SERVER, ["sr", "ss"]),
        (SpanKind.CLIENT, ["cs", "cr"]),
        (SpanKind.LOCAL, []),
    ],
)
def test_build_core_annotations_dispatches_on_kind(
    make_span, local_endpoint, kind, labels
):
    annotations, _ = build_core_annotations(kind, make_span(), Peer(), local_endpoint)
    assert [a.value for a in annotations] == labels
