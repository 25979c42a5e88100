from typing import Any
from typing import Mapping
from typing import NamedTuple
from typing import Optional

from py_zipkin_reporter.encoding import Encoding
from py_zipkin_reporter.exception import ZipkinError

HOST_CONFIG_KEY = "zipkin.host"
PORT_CONFIG_KEY = "zipkin.port"
ENCODING_CONFIG_KEY = "zipkin.encoding"
MAX_SPAN_BATCH_SIZE_CONFIG_KEY = "zipkin.max-span-batch-size"
JOIN_REMOTE_PARENTS_CONFIG_KEY = "trace.join-remote-parents-with-same-span-id"


class Environment(NamedTuple):
    """Metadata about the running process, owned by the host runtime.

    :param service: name of the local service
    :param host: host name or address this process advertises
    """

    service: str
    host: Optional[str] = None


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "yes", "on", "1"):
        return True
    if isinstance(value, str) and value.lower() in ("false", "no", "off", "0"):
        return False
    raise ZipkinError(f"Invalid value for {key}: {value!r}. Must be a boolean.")


def _parse_int(key: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ZipkinError(f"Invalid value for {key}: {value!r}. Must be an int.")


class ReporterConfig(NamedTuple):
    """Settings read at startup and on every reconfiguration.

    :param host: zipkin collector host
    :param port: zipkin collector port
    :param encoding: wire encoding of the reported spans
    :param max_span_batch_size: max number of spans per payload, defaults
        to the batch sender's own limit when None
    :param join_remote_parents_with_same_span_id: whether the host runtime
        reuses the remote span id on the server side of a request
    """

    host: str = "localhost"
    port: int = 9411
    encoding: Encoding = Encoding.V1_JSON
    max_span_batch_size: Optional[int] = None
    join_remote_parents_with_same_span_id: bool = False

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "ReporterConfig":
        """Builds a ReporterConfig out of flat, dotted configuration keys.

        Missing keys fall back to the defaults.

        :param config: mapping such as {'zipkin.host': 'zipkin', 'zipkin.port': 9411}
        :raises ZipkinError: if a value can't be parsed
        """
        defaults = cls()

        encoding = config.get(ENCODING_CONFIG_KEY, defaults.encoding)
        if not isinstance(encoding, Encoding):
            try:
                encoding = Encoding[str(encoding).upper()]
            except KeyError:
                raise ZipkinError(f"Unknown encoding: {encoding}")

        max_span_batch_size = config.get(MAX_SPAN_BATCH_SIZE_CONFIG_KEY)
        if max_span_batch_size is not None:
            max_span_batch_size = _parse_int(
                MAX_SPAN_BATCH_SIZE_CONFIG_KEY, max_span_batch_size
            )

        return cls(
            host=str(config.get(HOST_CONFIG_KEY, defaults.host)),
            port=_parse_int(PORT_CONFIG_KEY, config.get(PORT_CONFIG_KEY, defaults.port)),
            encoding=encoding,
            max_span_batch_size=max_span_batch_size,
            join_remote_parents_with_same_span_id=_parse_bool(
                JOIN_REMOTE_PARENTS_CONFIG_KEY,
                config.get(
                    JOIN_REMOTE_PARENTS_CONFIG_KEY,
                    defaults.join_remote_parents_with_same_span_id,
                ),
            ),
        )
