import json
from typing import List
from typing import Optional
from typing import Union

from typing_extensions import TypedDict
from typing_extensions import TypeGuard

from py_zipkin_reporter import thrift
from py_zipkin_reporter.encoding._types import Encoding
from py_zipkin_reporter.exception import ZipkinError
from py_zipkin_reporter.util import signed_int_to_unsigned_hex

AnnotationType = thrift.zipkinCore.AnnotationType

_JSON_TYPE_NAMES = {
    AnnotationType.BOOL: "BOOL",
    AnnotationType.I16: "I16",
    AnnotationType.I32: "I32",
    AnnotationType.I64: "I64",
}


def get_encoder(encoding: Encoding) -> "IEncoder":
    """Creates encoder object for the given encoding.

    :param encoding: desired output encoding protocol.
    :type encoding: Encoding
    :return: corresponding IEncoder object
    :rtype: IEncoder
    """
    if encoding == Encoding.V1_THRIFT:
        return _V1ThriftEncoder()
    if encoding == Encoding.V1_JSON:
        return _V1JSONEncoder()
    raise ZipkinError(f"Unknown encoding: {encoding}")


class IEncoder:
    """Encoder interface."""

    def fits(
        self,
        current_count: int,
        current_size: int,
        max_size: int,
        new_span: Union[str, bytes],
    ) -> bool:
        """Returns whether the new span will fit in the list.

        :param current_count: number of spans already in the list.
        :type current_count: int
        :param current_size: sum of the sizes of all the spans already in the list.
        :type current_size: int
        :param max_size: max supported transport payload size.
        :type max_size: int
        :param new_span: encoded span object that we want to add the the list.
        :type new_span: str or bytes
        :return: True if the new span can be added to the list, False otherwise.
        :rtype: bool
        """
        raise NotImplementedError()

    def encode_span(self, span: "thrift.zipkinCore.Span") -> Union[str, bytes]:
        """Encodes a single converted span.

        :param span: thrift Span returned by `convert_span`.
        :type span: zipkinCore.Span
        :return: encoded span.
        :rtype: str or bytes
        """
        raise NotImplementedError()

    def encode_queue(self, queue: List[Union[str, bytes]]) -> Union[str, bytes]:
        """Encodes a list of pre-encoded spans.

        :param queue: list of encoded spans.
        :type queue: list
        :return: encoded list, type depends on the encoding.
        :rtype: str or bytes
        """
        raise NotImplementedError()


def _is_bytes_list(any_list: List[Union[str, bytes]]) -> TypeGuard[List[bytes]]:
    return all(isinstance(element, bytes) for element in any_list)


def _is_str_list(any_list: List[Union[str, bytes]]) -> TypeGuard[List[str]]:
    return all(isinstance(element, str) for element in any_list)


class _V1ThriftEncoder(IEncoder):
    """Thrift encoder for V1 spans."""

    def fits(
        self,
        current_count: int,
        current_size: int,
        max_size: int,
        new_span: Union[str, bytes],
    ) -> bool:
        """Checks if the new span fits in the max payload size.

        Thrift lists have a fixed-size header and no delimiters between elements
        so it's easy to compute the list size.
        """
        return thrift.LIST_HEADER_SIZE + current_size + len(new_span) <= max_size

    def encode_span(self, span: "thrift.zipkinCore.Span") -> bytes:
        """Encodes the span to TBinaryProtocol bytes."""
        return thrift.span_to_bytes(span)

    def encode_queue(self, queue: List[Union[str, bytes]]) -> bytes:
        """Converts the queue to a thrift list"""
        assert _is_bytes_list(queue)
        return thrift.encode_bytes_list(queue)


class JSONEndpoint(TypedDict, total=False):
    serviceName: str
    ipv4: str
    port: int


class JSONv1Annotation(TypedDict):
    endpoint: JSONEndpoint
    timestamp: int
    value: str


class JSONv1BinaryAnnotation(TypedDict, total=False):
    key: str
    value: Union[str, bool, int]
    type: str
    endpoint: JSONEndpoint


class JSONv1Span(TypedDict, total=False):
    traceId: str
    name: str
    id: str
    parentId: str
    timestamp: int
    duration: int
    annotations: List[JSONv1Annotation]
    binaryAnnotations: List[JSONv1BinaryAnnotation]


class _V1JSONEncoder(IEncoder):
    """JSON encoder for V1 spans, as accepted by /api/v1/spans."""

    def fits(
        self,
        current_count: int,
        current_size: int,
        max_size: int,
        new_span: Union[str, bytes],
    ) -> bool:
        """Checks if the new span fits in the max payload size.

        Json lists only have a 2 bytes overhead from '[]' plus 1 byte from
        ',' between elements
        """
        return 2 + current_count + current_size + len(new_span) <= max_size

    def _create_json_endpoint(
        self, endpoint: Optional["thrift.zipkinCore.Endpoint"]
    ) -> JSONEndpoint:
        """Converts a thrift Endpoint to a JSON endpoint dict.

        serviceName is mandatory in v1, so it defaults to an empty string.
        A zero address or port means unknown and is dropped.
        """
        json_endpoint: JSONEndpoint = {"serviceName": ""}
        if endpoint is None:
            return json_endpoint

        if endpoint.service_name:
            json_endpoint["serviceName"] = endpoint.service_name
        if endpoint.ipv4:
            json_endpoint["ipv4"] = thrift.int_to_ipv4(endpoint.ipv4)
        if endpoint.port:
            json_endpoint["port"] = endpoint.port & 0xFFFF
        return json_endpoint

    def _create_json_binary_annotation(
        self, binary_annotation: "thrift.zipkinCore.BinaryAnnotation"
    ) -> JSONv1BinaryAnnotation:
        raw = binary_annotation.value or b""
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        annotation_type = binary_annotation.annotation_type

        json_annotation: JSONv1BinaryAnnotation = {"key": binary_annotation.key}
        if annotation_type == AnnotationType.BOOL:
            json_annotation["value"] = raw[:1] == b"\x01"
        elif annotation_type in _JSON_TYPE_NAMES:
            json_annotation["value"] = int.from_bytes(raw, "big", signed=True)
        else:
            json_annotation["value"] = raw.decode("utf-8", "replace")

        if annotation_type in _JSON_TYPE_NAMES:
            json_annotation["type"] = _JSON_TYPE_NAMES[annotation_type]
        json_annotation["endpoint"] = self._create_json_endpoint(
            binary_annotation.host
        )
        return json_annotation

    def encode_span(self, span: "thrift.zipkinCore.Span") -> str:
        """Encodes a single span to JSON."""
        json_span: JSONv1Span = {
            "traceId": signed_int_to_unsigned_hex(span.trace_id),
            "name": span.name,
            "id": signed_int_to_unsigned_hex(span.id),
        }

        if span.parent_id is not None:
            json_span["parentId"] = signed_int_to_unsigned_hex(span.parent_id)
        if span.timestamp is not None:
            json_span["timestamp"] = span.timestamp
        if span.duration is not None:
            json_span["duration"] = span.duration

        json_span["annotations"] = [
            {
                "endpoint": self._create_json_endpoint(annotation.host),
                "timestamp": annotation.timestamp,
                "value": annotation.value,
            }
            for annotation in span.annotations or []
        ]
        json_span["binaryAnnotations"] = [
            self._create_json_binary_annotation(binary_annotation)
            for binary_annotation in span.binary_annotations or []
        ]

        return json.dumps(json_span)

    def encode_queue(self, queue: List[Union[str, bytes]]) -> str:
        """Concatenates the list to a JSON list"""
        assert _is_str_list(queue)
        return "[" + ",".join(queue) + "]"
