import pytest
from loguru import logger


@pytest.fixture
def log_records():
    """Collect loguru records emitted during a test."""
    records = []
    sink_id = logger.add(lambda m: records.append(m.record), level="DEBUG")
    yield records
    logger.remove(sink_id)
