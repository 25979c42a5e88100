# Export useful functions and types from private modules.
from py_zipkin_reporter.encoding._types import Encoding  # noqa
from py_zipkin_reporter.encoding._types import SpanKind  # noqa
