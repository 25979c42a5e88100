from enum import Enum


class Encoding(Enum):
    """Supported output encodings."""

    V1_THRIFT = "V1_THRIFT"
    V1_JSON = "V1_JSON"


class SpanKind(Enum):
    """Role a span played, as read from its `span.kind` tag."""

    SERVER = "server"
    CLIENT = "client"
    LOCAL = None
