from typing import List

from py_zipkin_reporter import thrift
from py_zipkin_reporter.encoding._annotations import build_core_annotations
from py_zipkin_reporter.encoding._peer import extract_peer
from py_zipkin_reporter.encoding._peer import get_span_kind
from py_zipkin_reporter.encoding._tags import encode_tag_value
from py_zipkin_reporter.encoding._types import SpanKind
from py_zipkin_reporter.span import FinishedSpan
from py_zipkin_reporter.util import epoch_micros
from py_zipkin_reporter.util import identifier_to_long
from py_zipkin_reporter.util import is_empty_identifier
from py_zipkin_reporter.util import micros_between


def tag_binary_annotations(
    span: FinishedSpan, local_endpoint: "thrift.zipkinCore.Endpoint"
) -> List["thrift.zipkinCore.BinaryAnnotation"]:
    """One binary annotation per span tag, keyed by the tag's own key."""
    binary_annotations = []
    for key, value in span.tags.items():
        annotation_type, encoded = encode_tag_value(value)
        binary_annotations.append(
            thrift.create_binary_annotation(
                key, encoded, annotation_type, local_endpoint
            )
        )
    return binary_annotations


def convert_span(
    span: FinishedSpan, local_endpoint: "thrift.zipkinCore.Endpoint"
) -> "thrift.zipkinCore.Span":
    """Converts a finished span into a Zipkin v1 thrift span.

    The conversion never fails for well formed spans: identifiers that can't
    be read become 0 and mistyped peer tags are ignored. Root spans have no
    `parent_id` at all.

    :param span: finished span to convert
    :param local_endpoint: endpoint of the process that recorded the span
    :returns: new thrift Span
    """
    context = span.context
    parent_id = None
    if not is_empty_identifier(context.parent_id):
        parent_id = identifier_to_long(context.parent_id)

    kind = get_span_kind(span)
    peer = extract_peer(span) if kind != SpanKind.LOCAL else None
    annotations, binary_annotations = build_core_annotations(
        kind, span, peer, local_endpoint
    )
    binary_annotations.extend(tag_binary_annotations(span, local_endpoint))

    return thrift.create_span(
        span_id=identifier_to_long(context.span_id),
        parent_span_id=parent_id,
        trace_id=identifier_to_long(context.trace_id),
        span_name=span.operation_name,
        annotations=annotations,
        binary_annotations=binary_annotations,
        timestamp_us=epoch_micros(span.start),
        duration_us=micros_between(span.start, span.end),
    )
