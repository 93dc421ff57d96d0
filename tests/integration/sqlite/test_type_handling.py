"""
Integration tests for field type round trips through SQLite.
"""
import datetime
import decimal
import enum
import uuid
from dataclasses import dataclass

import numpy as np
import pytest


class Status(enum.Enum):
    ACTIVE = 'active'
    RETIRED = 'retired'


@dataclass
class Sample:
    id: int | None = None
    label: str | None = None
    amount: decimal.Decimal | None = None
    enabled: bool | None = None
    tiny: np.int8 | None = None
    small: np.int16 | None = None
    medium: np.int32 | None = None
    large: np.int64 | None = None
    ratio: np.float32 | None = None
    score: float | None = None
    payload: bytes | None = None
    birthDate: datetime.date | None = None
    updatedAt: datetime.datetime | None = None
    startTime: datetime.time | None = None
    status: Status | None = None
    token: uuid.UUID | None = None


@pytest.fixture
def sample():
    return Sample(
        label='widget',
        amount=decimal.Decimal('1234.56'),
        enabled=True,
        tiny=np.int8(-8),
        small=np.int16(300),
        medium=np.int32(70000),
        large=np.int64(2**40),
        ratio=np.float32(0.25),
        score=3.75,
        payload=b'\x00\x01\xff',
        birthDate=datetime.date(1985, 7, 14),
        updatedAt=datetime.datetime(2023, 11, 5, 8, 15, 30, 125000),
        startTime=datetime.time(9, 30, 15),
        status=Status.RETIRED,
        token=uuid.UUID('c0ffee00-1234-4abc-9def-0123456789ab'),
        )


def test_every_supported_type_round_trips(sqlite_mapper, sample):
    """Test that each supported field type reads back equal and typed."""
    sqlite_mapper.create(sample)
    found = sqlite_mapper.find_by_id(Sample, sample.id)

    assert found == sample
    assert isinstance(found.amount, decimal.Decimal)
    assert found.enabled is True
    assert type(found.tiny) is np.int8
    assert type(found.large) is np.int64
    assert type(found.ratio) is np.float32
    assert type(found.birthDate) is datetime.date
    assert type(found.updatedAt) is datetime.datetime
    assert type(found.startTime) is datetime.time
    assert found.status is Status.RETIRED
    assert isinstance(found.token, uuid.UUID)


def test_false_is_stored(sqlite_mapper):
    """Test that False is written rather than treated as unset."""
    sample = Sample(label='off', enabled=False)
    sqlite_mapper.create(sample)
    assert sqlite_mapper.find_by_id(Sample, sample.id).enabled is False


def test_datetime_keeps_millisecond_precision(sqlite_mapper):
    sample = Sample(updatedAt=datetime.datetime(2024, 2, 29, 23, 59, 59, 999999))
    sqlite_mapper.create(sample)

    found = sqlite_mapper.find_by_id(Sample, sample.id)
    assert found.updatedAt == datetime.datetime(2024, 2, 29, 23, 59, 59, 999000)


def test_dates_are_stored_as_epoch_millis(sqlite_mapper):
    sample = Sample(birthDate=datetime.date(1970, 1, 2))
    sqlite_mapper.create(sample)

    result = sqlite_mapper.store.query('SELECT "BIRTH_DATE" FROM "SAMPLE" WHERE "ID" = ?', (sample.id,))
    assert result.value(0, 'BIRTH_DATE') == 86400000


def test_iso_text_dates_are_read(sqlite_mapper):
    """Test that dates written as ISO text by other tools still load."""
    sample = Sample(label='external')
    sqlite_mapper.create(sample)
    sqlite_mapper.store.execute('UPDATE "SAMPLE" SET "UPDATED_AT" = ?, "BIRTH_DATE" = ? WHERE "ID" = ?',
                                ('2022-01-02T03:04:05', '2001-09-30', sample.id))

    found = sqlite_mapper.find_by_id(Sample, sample.id)
    assert found.updatedAt == datetime.datetime(2022, 1, 2, 3, 4, 5)
    assert found.birthDate == datetime.date(2001, 9, 30)


def test_memory_database(memory_mapper, sample):
    """Test that an in-memory database survives across round trips."""
    memory_mapper.create(sample)
    assert memory_mapper.find_all(Sample) == [sample]


@pytest.mark.parametrize('amount', [
    decimal.Decimal('12345678901234567.891'),
    decimal.Decimal('-0.000000000000000000001'),
    decimal.Decimal('2020'),
])
def test_decimal_keeps_every_digit(sqlite_mapper, amount):
    """Test that decimals wider than a double read back unchanged."""
    sample = Sample(amount=amount)
    sqlite_mapper.create(sample)

    found = sqlite_mapper.find_by_id(Sample, sample.id)
    assert found.amount == amount
    assert str(found.amount) == str(amount)
