import pytest

from py_zipkin_reporter import thrift
from tests.test_helpers import create_finished_span


@pytest.fixture
def local_endpoint():
    return thrift.create_endpoint("test_service", thrift.ipv4_to_int("10.0.0.1"))


@pytest.fixture
def make_span():
    return create_finished_span
