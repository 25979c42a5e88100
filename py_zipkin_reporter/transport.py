from typing import Optional
from typing import Union
from urllib.request import Request
from urllib.request import urlopen

from py_zipkin_reporter.encoding import Encoding
from py_zipkin_reporter.exception import ZipkinError

_CONTENT_TYPES = {
    Encoding.V1_JSON: "application/json",
    Encoding.V1_THRIFT: "application/x-thrift",
}


class BaseTransportHandler:
    def get_max_payload_bytes(self) -> Optional[int]:  # pragma: no cover
        """Returns the maximum payload size for this transport.

        Most transports have a maximum packet size that can be sent. For example,
        UDP has a 65507 bytes MTU.
        Spans are batched before being sent. The batch size is going to be the
        minimum between `get_max_payload_bytes` and `max_span_batch_size`.

        If you don't want to enforce a max payload size, return None.

        :returns: max payload size in bytes or None.
        """
        raise NotImplementedError("get_max_payload_bytes is not implemented")

    def send(self, payload: Union[bytes, str]) -> None:  # pragma: no cover
        """Sends the encoded payload over the transport.

        :argument payload: encoded list of spans.
        """
        raise NotImplementedError("send is not implemented")

    def __call__(self, payload: Union[bytes, str]) -> None:
        """Internal wrapper around `send`. Do not override."""
        self.send(payload)


class SimpleHTTPTransport(BaseTransportHandler):
    def __init__(
        self, address: str, port: int, encoding: Encoding = Encoding.V1_JSON
    ) -> None:
        """A simple HTTP transport for the zipkin v1 api.

        This is not production ready (not async, no retries) but
        it's helpful for tests or people trying out the reporter.

        :param address: zipkin server address.
        :type address: str
        :param port: zipkin server port.
        :type port: int
        :param encoding: encoding of the payloads that will be sent.
        :type encoding: Encoding
        """
        super().__init__()
        if encoding not in _CONTENT_TYPES:
            raise ZipkinError(f"Unknown encoding: {encoding}")
        self.address = address
        self.port = port
        self.encoding = encoding

    @property
    def url(self) -> str:
        return f"http://{self.address}:{self.port}/api/v1/spans"

    def get_max_payload_bytes(self) -> Optional[int]:
        return None

    def send(self, payload: Union[str, bytes]) -> None:
        encoded_payload = (
            payload.encode("utf-8") if isinstance(payload, str) else payload
        )
        req = Request(
            self.url,
            encoded_payload,
            {"Content-Type": _CONTENT_TYPES[self.encoding]},
        )
        response = urlopen(req)

        assert response.getcode() == 202
