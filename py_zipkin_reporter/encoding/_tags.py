from typing import Tuple

from py_zipkin_reporter import thrift
from py_zipkin_reporter.exception import ZipkinError
from py_zipkin_reporter.span import Boolean
from py_zipkin_reporter.span import Number
from py_zipkin_reporter.span import String
from py_zipkin_reporter.span import TagValue

AnnotationType = thrift.zipkinCore.AnnotationType


def int_to_bytes(value: int) -> bytes:
    """Minimal big endian two's complement representation of an int.

    Examples:
        0    => b'\\x00'
        128  => b'\\x00\\x80'
        -128 => b'\\x80'
    """
    magnitude = ~value if value < 0 else value
    return value.to_bytes(magnitude.bit_length() // 8 + 1, "big", signed=True)


def narrow_string(text: str) -> bytes:
    """Keeps the low byte of every UTF-16 code unit of `text`.

    Characters outside of latin-1 lose their high bits.
    """
    return text.encode("utf-16-be", "surrogatepass")[1::2]


def encode_tag_value(value: TagValue) -> Tuple[int, bytes]:
    """Encodes a tag value into a binary annotation type and payload.

    :param value: Boolean, String or Number tag value
    :returns: (AnnotationType, encoded bytes) tuple
    """
    if isinstance(value, Boolean):
        return AnnotationType.BOOL, int_to_bytes(1 if value.value else 0)
    if isinstance(value, String):
        return AnnotationType.STRING, narrow_string(value.text)
    if isinstance(value, Number):
        return AnnotationType.I64, int_to_bytes(int(value.number))
    raise ZipkinError(f"Invalid tag value {value!r}. Must be of type TagValue.")
