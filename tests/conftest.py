"""
Shared test fixtures for the Courier test suite.
"""

import pytest

# Register Courier testing fixtures
from courier.testing.fixtures import courier_fixtures
courier_fixtures()

# Import fixtures so pytest can discover them
from courier.testing.fixtures import (  # noqa: F401
    mail_assertions,
    mail_service,
    mailer_config,
    queue_adapter,
)


@pytest.fixture
def adapter(queue_adapter):
    """Short alias for the active :class:`TestAdapter`."""
    return queue_adapter
