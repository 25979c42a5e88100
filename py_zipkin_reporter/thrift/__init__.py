import logging
import os
import socket
import struct
from typing import List
from typing import Optional
from typing import TYPE_CHECKING

import thriftpy2
from thriftpy2.protocol import TBinaryProtocol
from thriftpy2.protocol.binary import write_list_begin
from thriftpy2.thrift import TType
from thriftpy2.transport import TMemoryBuffer
from typing_extensions import TypedDict


log = logging.getLogger("py_zipkin_reporter.thrift")

thrift_filepath = os.path.join(os.path.dirname(__file__), "zipkinCore.thrift")

# zipkinCore isn't a "real" module, only the .pyi file pretends it is, so it
# can be imported for type checking but has to be loaded through thriftpy2.
if TYPE_CHECKING:  # pragma: no cover
    from . import zipkinCore
else:
    # load this as `zipkinCore` so that thrift-pyi generation matches
    zipkinCore = thriftpy2.load(thrift_filepath, module_name="zipkinCore_thrift")

LIST_HEADER_SIZE = 5  # size in bytes of the encoded list header


def ipv4_to_int(address: str) -> int:
    """Packs a dotted IPv4 address into a signed 32 bit int.

    Thrift has no unsigned types, so addresses above 127.255.255.255 come
    out negative.

    :param address: dotted IPv4 address, such as '10.0.0.1'
    :returns: signed int in network byte order
    """
    return struct.unpack("!i", socket.inet_pton(socket.AF_INET, address))[0]


def int_to_ipv4(value: int) -> str:
    """Inverse of :func:`ipv4_to_int`."""
    return socket.inet_ntop(socket.AF_INET, struct.pack("!i", value))


def create_endpoint(
    service_name: str,
    ipv4: int = 0,
    port: Optional[int] = None,
) -> "zipkinCore.Endpoint":
    """Create a zipkin Endpoint object.

    An Endpoint object holds information about the network context of a span.

    :param service_name: service name as a str
    :param ipv4: ipv4 host address, already packed into a signed int
    :param port: int value of the port. Left unset if None
    :returns: thrift Endpoint object
    """
    if port is not None:
        # Zipkin passes unsigned values in signed types because Thrift has no
        # unsigned types, so we have to convert the value.
        port = struct.unpack("h", struct.pack("H", port & 0xFFFF))[0]
    return zipkinCore.Endpoint(
        ipv4=ipv4,
        port=port,
        service_name=service_name,
    )


def create_local_endpoint(
    service_name: str, host: Optional[str] = None
) -> "zipkinCore.Endpoint":
    """Creates the Endpoint describing the process that records spans.

    `host` is resolved to an IPv4 address. If it's missing or can't be
    resolved, the address of the local host name is used instead, and
    127.0.0.1 if even that fails.

    :param service_name: name of the local service
    :param host: advertised host name or address of this process
    :returns: thrift Endpoint object
    """
    address = None
    if host:
        try:
            address = socket.gethostbyname(host)
        except OSError:
            log.debug("Could not resolve host %r, using the local host", host)

    if address is None:
        try:
            address = socket.gethostbyname(socket.gethostname())
        except OSError:
            address = "127.0.0.1"

    return create_endpoint(service_name, ipv4_to_int(address))


def create_annotation(
    timestamp: int, value: str, host: "zipkinCore.Endpoint"
) -> "zipkinCore.Annotation":
    """
    Create a zipkin annotation object

    :param timestamp: timestamp of when the annotation occured in microseconds
    :param value: name of the annotation, such as 'sr'
    :param host: zipkin endpoint object

    :returns: zipkin annotation object
    """
    return zipkinCore.Annotation(timestamp=timestamp, value=value, host=host)


def create_binary_annotation(
    key: str,
    value: bytes,
    annotation_type: "zipkinCore.AnnotationType",
    host: "zipkinCore.Endpoint",
) -> "zipkinCore.BinaryAnnotation":
    """
    Create a zipkin binary annotation object

    :param key: name of the annotation, such as 'http.path'
    :param value: encoded value of the annotation
    :param annotation_type: type of annotation, such as AnnotationType.I64
    :param host: zipkin endpoint object

    :returns: zipkin binary annotation object
    """
    return zipkinCore.BinaryAnnotation(
        key=key,
        value=value,
        annotation_type=annotation_type,
        host=host,
    )


def create_string_binary_annotation(
    key: str, value: str, host: "zipkinCore.Endpoint"
) -> "zipkinCore.BinaryAnnotation":
    """Creates a STRING binary annotation with a UTF-8 encoded value."""
    return create_binary_annotation(
        key, value.encode("utf-8"), zipkinCore.AnnotationType.STRING, host
    )


class SpanKwargs(TypedDict, total=False):
    trace_id: int
    name: str
    id: int
    annotations: List["zipkinCore.Annotation"]
    binary_annotations: List["zipkinCore.BinaryAnnotation"]
    timestamp: int
    duration: int
    parent_id: int


def create_span(
    span_id: int,
    parent_span_id: Optional[int],
    trace_id: int,
    span_name: str,
    annotations: List["zipkinCore.Annotation"],
    binary_annotations: List["zipkinCore.BinaryAnnotation"],
    timestamp_us: int,
    duration_us: int,
) -> "zipkinCore.Span":
    """Takes a bunch of span attributes and returns a thriftpy2 representation
    of the span. Ids are already signed 64 bit ints and times are already in
    microseconds. `parent_id` is only set when `parent_span_id` isn't None.
    """
    span_dict: SpanKwargs = {
        "trace_id": trace_id,
        "name": span_name,
        "id": span_id,
        "annotations": annotations,
        "binary_annotations": binary_annotations,
        "timestamp": timestamp_us,
        "duration": duration_us,
    }
    if parent_span_id is not None:
        span_dict["parent_id"] = parent_span_id
    return zipkinCore.Span(**span_dict)


def span_to_bytes(thrift_span: "zipkinCore.Span") -> bytes:
    """
    Returns a TBinaryProtocol encoded Thrift span.

    :param thrift_span: thrift object to encode.
    :returns: thrift object in TBinaryProtocol format bytes.
    """
    transport = TMemoryBuffer()
    protocol = TBinaryProtocol(transport)
    # thrift-pyi is not complete in its type annotations
    thrift_span.write(protocol)  # type: ignore[attr-defined]

    return bytes(transport.getvalue())


def encode_bytes_list(binary_thrift_obj_list: List[bytes]) -> bytes:
    """
    Returns a TBinaryProtocol encoded list of Thrift objects.

    :param binary_thrift_obj_list: list of TBinaryProtocol objects to encode.
    :returns: bynary object representing the encoded list.
    """
    transport = TMemoryBuffer()
    write_list_begin(transport, TType.STRUCT, len(binary_thrift_obj_list))
    for thrift_bin in binary_thrift_obj_list:
        transport.write(thrift_bin)

    return bytes(transport.getvalue())
