"""
Integration tests for on-demand table creation and its per-mapper cache.
"""
import threading
from dataclasses import dataclass

import recordmap
from recordmap import CallState, SchemaRegistry


@dataclass
class Employee:
    id: int | None = None
    firstName: str | None = None


@dataclass
class Department:
    id: int | None = None
    title: str | None = None


def table_names(mapper):
    result = mapper.store.query("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {row['name'] for row in result}


def test_table_created_on_first_use(sqlite_mapper):
    assert 'EMPLOYEE' not in table_names(sqlite_mapper)
    sqlite_mapper.find_all(Employee)
    assert 'EMPLOYEE' in table_names(sqlite_mapper)


def test_ddl_runs_once_per_type(sqlite_mapper):
    """Test that only the first operation on a type issues the DDL."""
    sqlite_mapper.create(Employee(firstName='a'))
    assert sqlite_mapper.store.calls == 2

    sqlite_mapper.create(Employee(firstName='b'))
    sqlite_mapper.find_all(Employee)
    assert sqlite_mapper.store.calls == 4

    sqlite_mapper.find_all(Department)
    assert sqlite_mapper.store.calls == 6
    assert len(sqlite_mapper.registry) == 2


def test_ensure_table_is_idempotent(sqlite_mapper, tmp_path):
    """Test that a fresh mapper re-ensuring an existing table is harmless."""
    sqlite_mapper.create(Employee(firstName='kept'))

    other = recordmap.connect(database=str(tmp_path / 'records-test.db'))
    other.ensure_table(Employee)
    other.ensure_table(Employee)

    assert other.store.calls == 1
    assert [e.firstName for e in other.find_all(Employee)] == ['kept']


def test_shared_registry(tmp_path):
    registry = SchemaRegistry()
    database = str(tmp_path / 'shared.db')
    first = recordmap.connect(database=database, registry=registry)
    second = recordmap.connect(database=database, registry=registry)

    first.ensure_table(Employee)
    second.find_all(Employee)

    assert first.store.calls == 1
    assert second.store.calls == 1
    assert Employee in registry


def test_schema_state_reached(sqlite_mapper):
    sqlite_mapper.ensure_table(Employee)
    sqlite_mapper.find_all(Employee)
    assert sqlite_mapper.last_state is CallState.POPULATED


def test_concurrent_first_use(sqlite_mapper):
    """Test that threads racing on a new type all succeed."""
    errors = []
    barrier = threading.Barrier(4)

    def worker(i):
        try:
            barrier.wait()
            sqlite_mapper.create(Employee(firstName=f'worker{i}'))
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert Employee in sqlite_mapper.registry
    names = sorted(e.firstName for e in sqlite_mapper.find_all(Employee))
    assert names == [f'worker{i}' for i in range(4)]


def test_last_state_is_per_thread(sqlite_mapper):
    sqlite_mapper.find_by_id(Employee, 1)
    assert sqlite_mapper.last_state is CallState.ABSENT

    seen = []
    thread = threading.Thread(target=lambda: seen.append(sqlite_mapper.last_state))
    thread.start()
    thread.join()
    assert seen == [None]
