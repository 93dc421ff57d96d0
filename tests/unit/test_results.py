"""
Unit tests for ResultSet access.
"""
import pytest
from recordmap.results import ResultSet


class FakeCursor:

    def __init__(self, description, rows):
        self.description = description
        self._rows = rows

    def fetchall(self):
        return self._rows


@pytest.fixture
def result():
    return ResultSet(['ID', 'FIRST_NAME'], [(1, 'John'), (2, 'Ann')])


def test_len_and_columns(result):
    assert len(result) == 2
    assert result.column_count == 2
    assert result.columns == ['ID', 'FIRST_NAME']


def test_iter_yields_dicts(result):
    assert list(result) == [{'ID': 1, 'FIRST_NAME': 'John'}, {'ID': 2, 'FIRST_NAME': 'Ann'}]


def test_value_by_name_is_case_insensitive(result):
    assert result.value(0, 'first_name') == 'John'
    assert result.value(1, 'ID') == 2


def test_value_by_position(result):
    assert result.value(1, 1) == 'Ann'


def test_unknown_column(result):
    assert result.position('missing') is None
    with pytest.raises(KeyError):
        result.value(0, 'missing')


def test_from_cursor():
    cursor = FakeCursor([('ID', None), ('NAME', None)], [(1, 'x')])
    result = ResultSet.from_cursor(cursor)
    assert result.columns == ['ID', 'NAME']
    assert result.rows == [(1, 'x')]


def test_from_cursor_without_result():
    """Test a cursor that ran a statement with no result set"""
    result = ResultSet.from_cursor(FakeCursor(None, []))
    assert len(result) == 0
    assert result.column_count == 0
