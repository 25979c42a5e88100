import logging
import os
import threading
from types import TracebackType
from typing import Callable
from typing import Iterable
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Type
from typing import Union

from py_zipkin_reporter import thrift
from py_zipkin_reporter.config import Environment
from py_zipkin_reporter.config import ReporterConfig
from py_zipkin_reporter.encoding import convert_span
from py_zipkin_reporter.encoding import get_encoder
from py_zipkin_reporter.encoding import IEncoder
from py_zipkin_reporter.exception import ZipkinError
from py_zipkin_reporter.span import FinishedSpan
from py_zipkin_reporter.transport import BaseTransportHandler
from py_zipkin_reporter.transport import SimpleHTTPTransport

log = logging.getLogger("py_zipkin_reporter.reporter")


TransportHandler = Union[BaseTransportHandler, Callable[[Union[str, bytes]], None]]


class ZipkinBatchSender:

    MAX_PORTION_SIZE = 100

    def __init__(
        self,
        transport_handler: Optional[TransportHandler],
        max_portion_size: Optional[int],
        encoder: IEncoder,
    ) -> None:
        self.transport_handler = transport_handler
        self.max_portion_size = max_portion_size or self.MAX_PORTION_SIZE
        self.encoder = encoder

        if isinstance(self.transport_handler, BaseTransportHandler):
            self.max_payload_bytes = self.transport_handler.get_max_payload_bytes()
        else:
            self.max_payload_bytes = None

    def __enter__(self) -> "ZipkinBatchSender":
        self._reset_queue()
        return self

    def __exit__(
        self,
        _exc_type: Optional[Type[BaseException]],
        _exc_value: Optional[BaseException],
        _exc_traceback: Optional[TracebackType],
    ) -> None:
        if any((_exc_type, _exc_value, _exc_traceback)):
            assert _exc_type is not None
            assert _exc_value is not None
            assert _exc_traceback is not None
            filename = os.path.split(_exc_traceback.tb_frame.f_code.co_filename)[1]
            error = "({}:{}) {}: {}".format(
                filename,
                _exc_traceback.tb_lineno,
                _exc_type.__name__,
                _exc_value,
            )
            raise ZipkinError(error)
        else:
            self.flush()

    def _reset_queue(self) -> None:
        self.queue: List[Union[str, bytes]] = []
        self.current_size = 0

    def add_span(self, zipkin_span: "thrift.zipkinCore.Span") -> None:
        encoded_span = self.encoder.encode_span(zipkin_span)

        # If we've already reached the max batch size or the new span doesn't
        # fit in max_payload_bytes, send what we've collected until now and
        # start a new batch.
        is_over_size_limit = (
            self.max_payload_bytes is not None
            and not self.encoder.fits(
                current_count=len(self.queue),
                current_size=self.current_size,
                max_size=self.max_payload_bytes,
                new_span=encoded_span,
            )
        )
        is_over_portion_limit = len(self.queue) >= self.max_portion_size
        if is_over_size_limit or is_over_portion_limit:
            self.flush()

        self.queue.append(encoded_span)
        self.current_size += len(encoded_span)

    def flush(self) -> None:
        if self.transport_handler and len(self.queue) > 0:
            log.debug("Sending %d spans", len(self.queue))
            message = self.encoder.encode_queue(self.queue)
            self.transport_handler(message)
        self._reset_queue()


class _ReporterState(NamedTuple):
    local_endpoint: "thrift.zipkinCore.Endpoint"
    transport_handler: TransportHandler
    encoder: IEncoder
    max_span_batch_size: Optional[int]


class ZipkinReporter:
    """Converts finished spans to Zipkin v1 spans and sends them to a collector.

    The local endpoint, transport and encoder live in an immutable snapshot.
    `reconfigure` builds a new snapshot and publishes it with a single
    assignment, so concurrent `report_spans` calls always see either the old
    or the new one as a whole.

    .. code-block:: python

        reporter = ZipkinReporter(
            Environment(service='my_service', host='10.0.0.1'),
            ReporterConfig.from_mapping({'zipkin.host': 'zipkin'}),
        )
        reporter.start()
        reporter.report_spans(finished_spans)
    """

    def __init__(
        self,
        environment: Environment,
        config: Optional[ReporterConfig] = None,
        transport_handler: Optional[TransportHandler] = None,
    ) -> None:
        """
        :param environment: service name and advertised host of this process
        :param config: reporter settings, defaults to ReporterConfig()
        :param transport_handler: transport used to send the spans. If None,
            a SimpleHTTPTransport pointing at the configured collector is used.
        """
        self._transport_handler = transport_handler
        self._lock = threading.Lock()
        self._state = self._build_state(environment, config or ReporterConfig())

    def _build_state(
        self, environment: Environment, config: ReporterConfig
    ) -> _ReporterState:
        self._check_join_parameter(config)
        transport_handler = self._transport_handler or SimpleHTTPTransport(
            config.host, config.port, config.encoding
        )
        return _ReporterState(
            local_endpoint=thrift.create_local_endpoint(
                environment.service, environment.host
            ),
            transport_handler=transport_handler,
            encoder=get_encoder(config.encoding),
            max_span_batch_size=config.max_span_batch_size,
        )

    def _check_join_parameter(self, config: ReporterConfig) -> None:
        if not config.join_remote_parents_with_same_span_id:
            log.warning(
                "For full Zipkin compatibility enable "
                "`trace.join-remote-parents-with-same-span-id` to preserve span "
                "id across client/server sides of a Span."
            )

    @property
    def local_endpoint(self) -> "thrift.zipkinCore.Endpoint":
        return self._state.local_endpoint

    def start(self) -> None:
        log.info("Started the Zipkin reporter.")

    def stop(self) -> None:
        log.info("Stopped the Zipkin reporter.")

    def reconfigure(self, environment: Environment, config: ReporterConfig) -> None:
        """Rebuilds the local endpoint and the transport from new settings."""
        with self._lock:
            self._state = self._build_state(environment, config)
        log.debug("Reconfigured the Zipkin reporter for %s", environment.service)

    def convert_span(self, span: FinishedSpan) -> "thrift.zipkinCore.Span":
        return convert_span(span, self._state.local_endpoint)

    def report_spans(self, spans: Iterable[FinishedSpan]) -> None:
        """Converts and sends a batch of finished spans.

        :raises ZipkinError: if encoding or sending the spans fails
        """
        state = self._state
        with ZipkinBatchSender(
            state.transport_handler, state.max_span_batch_size, state.encoder
        ) as span_sender:
            for span in spans:
                span_sender.add_span(convert_span(span, state.local_endpoint))
