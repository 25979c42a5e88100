from py_zipkin_reporter.testing.mock_transport import MockTransportHandler  # noqa
