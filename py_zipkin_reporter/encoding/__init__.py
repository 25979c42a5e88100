from py_zipkin_reporter.encoding._converter import convert_span  # noqa: F401
from py_zipkin_reporter.encoding._encoders import get_encoder  # noqa: F401
from py_zipkin_reporter.encoding._encoders import IEncoder  # noqa: F401
from py_zipkin_reporter.encoding._peer import extract_peer  # noqa: F401
from py_zipkin_reporter.encoding._peer import get_span_kind  # noqa: F401
from py_zipkin_reporter.encoding._peer import Peer  # noqa: F401
from py_zipkin_reporter.encoding._tags import encode_tag_value  # noqa: F401
from py_zipkin_reporter.encoding._types import Encoding  # noqa: F401
from py_zipkin_reporter.encoding._types import SpanKind  # noqa: F401
