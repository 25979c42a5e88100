from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple

from py_zipkin_reporter import thrift
from py_zipkin_reporter.encoding._peer import Peer
from py_zipkin_reporter.encoding._tags import narrow_string
from py_zipkin_reporter.encoding._types import SpanKind
from py_zipkin_reporter.span import FinishedSpan
from py_zipkin_reporter.util import epoch_micros

zipkinCore = thrift.zipkinCore

CoreAnnotations = Tuple[
    List["thrift.zipkinCore.Annotation"], List["thrift.zipkinCore.BinaryAnnotation"]
]


def _create_address(key: str, peer: Peer) -> "thrift.zipkinCore.BinaryAnnotation":
    """Builds the `sa`/`ca` annotation pointing at the remote side."""
    return thrift.create_string_binary_annotation(
        key,
        peer.host or "",
        thrift.create_endpoint(peer.service or "", peer.ipv4 or 0),
    )


def _create_narrow_string_annotation(
    key: str, value: str, host: "thrift.zipkinCore.Endpoint"
) -> "thrift.zipkinCore.BinaryAnnotation":
    return thrift.create_binary_annotation(
        key, narrow_string(value), zipkinCore.AnnotationType.STRING, host
    )


def annotate_server_span(
    span: FinishedSpan,
    peer: Optional[Peer],
    local_endpoint: "thrift.zipkinCore.Endpoint",
) -> CoreAnnotations:
    """Adds `sr`/`ss`, the `sa` address and the http annotations, if any."""
    peer = peer or Peer()
    annotations = [
        thrift.create_annotation(
            epoch_micros(span.start), zipkinCore.SERVER_RECV, local_endpoint
        ),
        thrift.create_annotation(
            epoch_micros(span.end), zipkinCore.SERVER_SEND, local_endpoint
        ),
    ]

    binary_annotations = []
    if peer.url is not None:
        binary_annotations.append(
            _create_narrow_string_annotation(
                zipkinCore.HTTP_PATH, peer.url, local_endpoint
            )
        )
    if peer.method is not None:
        binary_annotations.append(
            _create_narrow_string_annotation(
                zipkinCore.HTTP_METHOD, peer.method, local_endpoint
            )
        )
    binary_annotations.append(_create_address(zipkinCore.SERVER_ADDR, peer))

    return annotations, binary_annotations


def annotate_client_span(
    span: FinishedSpan,
    peer: Optional[Peer],
    local_endpoint: "thrift.zipkinCore.Endpoint",
) -> CoreAnnotations:
    """Adds `cs`/`cr` and the `ca` address."""
    peer = peer or Peer()
    annotations = [
        thrift.create_annotation(
            epoch_micros(span.start), zipkinCore.CLIENT_SEND, local_endpoint
        ),
        thrift.create_annotation(
            epoch_micros(span.end), zipkinCore.CLIENT_RECV, local_endpoint
        ),
    ]
    return annotations, [_create_address(zipkinCore.CLIENT_ADDR, peer)]


def annotate_local_span(
    span: FinishedSpan,
    peer: Optional[Peer],
    local_endpoint: "thrift.zipkinCore.Endpoint",
) -> CoreAnnotations:
    """Local spans only get an `lc` annotation holding the operation name."""
    local_component = thrift.create_string_binary_annotation(
        zipkinCore.LOCAL_COMPONENT, span.operation_name, local_endpoint
    )
    return [], [local_component]


_ANNOTATION_BUILDERS: Dict[
    SpanKind,
    Callable[
        [FinishedSpan, Optional[Peer], "thrift.zipkinCore.Endpoint"], CoreAnnotations
    ],
] = {
    SpanKind.SERVER: annotate_server_span,
    SpanKind.CLIENT: annotate_client_span,
    SpanKind.LOCAL: annotate_local_span,
}


def build_core_annotations(
    kind: SpanKind,
    span: FinishedSpan,
    peer: Optional[Peer],
    local_endpoint: "thrift.zipkinCore.Endpoint",
) -> CoreAnnotations:
    """Builds the annotations the Zipkin protocol expects for a span kind.

    :param kind: server, client or local
    :param span: finished span
    :param peer: remote side of the span, unused for local spans
    :param local_endpoint: endpoint of this process
    :returns: (annotations, binary annotations) tuple
    """
    return _ANNOTATION_BUILDERS[kind](span, peer, local_endpoint)
