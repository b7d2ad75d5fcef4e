import itertools

import pytest

from ocppj import utils
from ocppj.validation import set_message_validation

from mock_transport import MockClientTransport, MockServerTransport


@pytest.fixture(autouse=True)
def reset_globals():
    """Restore process-wide settings changed by a test."""
    fmt = utils.get_date_time_format()
    yield
    utils.set_date_time_format(fmt)
    set_message_validation(True)


@pytest.fixture
def server_transport():
    return MockServerTransport()


@pytest.fixture
def client_transport():
    return MockClientTransport()


@pytest.fixture
def fixed_ids():
    """Message id generator yielding "1234", "1235", ..."""
    counter = itertools.count(1234)
    return lambda: str(next(counter))
