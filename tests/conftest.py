import pytest
import recordmap
from recordmap.connection import dispose_all_engines
from recordmap.records import clear_descriptor_cache
from recordmap.strategy import get_strategy


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear registered record types and engines around each test."""
    clear_descriptor_cache()
    yield
    clear_descriptor_cache()
    dispose_all_engines()


@pytest.fixture
def sqlite_mapper(tmp_path):
    """Mapper on a file-backed SQLite database private to the test."""
    return recordmap.connect(drivername='sqlite', database=str(tmp_path / 'records-test.db'))


@pytest.fixture
def memory_mapper():
    """Mapper on an in-memory SQLite database."""
    return recordmap.connect(drivername='sqlite', database=':memory:')


@pytest.fixture
def sqlite_strategy():
    return get_strategy('sqlite')


@pytest.fixture
def postgres_strategy():
    return get_strategy('postgresql')
