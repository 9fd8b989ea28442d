import pytest

from classroom.core.logging.builder import setup_logging
from classroom.tests.test_fixtures.settings import TEST_SETTINGS


@pytest.fixture(autouse=True)
def restore_logging():
    """Logging tests reconfigure the root logger; put the suite configuration back afterwards."""
    yield
    setup_logging(TEST_SETTINGS)
