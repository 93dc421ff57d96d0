"""
Value conversion between record fields and SQL parameters.

Encoding (Python -> store):
- None stays None; INSERT statements omit such columns entirely
- numbers stay numbers (NumPy scalars are unwrapped to Python scalars)
- date, datetime and time become epoch milliseconds (UTC; naive values are
  taken to be UTC, aware values are converted to UTC, a time is measured
  from 1970-01-01 midnight)
- enums become their value, byte sequences become bytes
- anything else becomes its text representation

Decoding (store -> Python) runs the field "setter" (`coerce`) first. When the
setter rejects the shape of the stored value, the value is reinterpreted by
the fallback strategies in order; the first one whose result the setter
accepts wins. A date stored as an epoch-millisecond integer round-trips this
way without the mapper ever looking at the field's type name.

Decoded datetimes and times are always naive UTC. The offset of an aware
value is not stored, so it reads back as its naive UTC equivalent and does
not compare equal to the original.
"""
import datetime
import decimal
import enum
import logging
from collections.abc import Callable
from typing import Any

import dateutil.parser
import numpy as np
from recordmap.exceptions import TypeConversionError

logger = logging.getLogger(__name__)

EPOCH = datetime.datetime(1970, 1, 1)
ONE_MILLISECOND = datetime.timedelta(milliseconds=1)


class DecodeStrategy(enum.Enum):
    """How a column value became a field value."""
    DIRECT = 'direct'
    EPOCH_MILLIS = 'epoch_millis'
    ISO_TEXT = 'iso_text'
    CONSTRUCT = 'construct'


def to_epoch_millis(value: datetime.date | datetime.time) -> int:
    """Milliseconds since 1970-01-01T00:00 UTC, sub-millisecond part dropped.

    Aware datetimes and times are converted to UTC first; an aware time is
    placed on 1970-01-01 for the conversion.
    """
    if isinstance(value, datetime.time):
        value = datetime.datetime.combine(EPOCH.date(), value)
    elif not isinstance(value, datetime.date):
        raise TypeError(f'Cannot convert {type(value).__name__} to epoch milliseconds')
    elif not isinstance(value, datetime.datetime):
        value = datetime.datetime.combine(value, datetime.time())
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return (value - EPOCH) // ONE_MILLISECOND


def from_epoch_millis(millis: int) -> datetime.datetime:
    """Naive UTC datetime for an epoch-millisecond integer."""
    return EPOCH + datetime.timedelta(milliseconds=int(millis))


def _is_integral(value: Any) -> bool:
    return isinstance(value, int | np.integer) and not isinstance(value, bool | np.bool_)


def _is_real(value: Any) -> bool:
    return _is_integral(value) or isinstance(value, float | np.floating)


def encode(value: Any) -> Any:
    """Convert a field value to a bound SQL parameter.
    """
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        return encode(value.value)
    if isinstance(value, np.generic):
        return encode(value.item())
    if isinstance(value, bool | int | float | decimal.Decimal | str):
        return value
    if isinstance(value, datetime.date | datetime.time):
        return to_epoch_millis(value)
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value)
    return str(value)


def coerce(value: Any, python_type: Any) -> Any:
    """Assign `value` to a field declared as `python_type`.

    Accepts values of the declared type and lossless widenings of them
    (integer to float or Decimal, 0/1 to bool, datetime to date or time).
    Raises TypeError when the value's shape is rejected.
    """
    if value is None or not isinstance(python_type, type) or python_type is object:
        return value

    if python_type is bool or python_type is np.bool_:
        if isinstance(value, bool | np.bool_) or (_is_integral(value) and value in {0, 1}):
            return python_type(value)
    elif issubclass(python_type, enum.Enum):
        if isinstance(value, python_type):
            return value
    elif python_type is datetime.datetime:
        if isinstance(value, datetime.datetime):
            return value
    elif python_type is datetime.date:
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
    elif python_type is datetime.time:
        if isinstance(value, datetime.datetime):
            return value.time()
        if isinstance(value, datetime.time):
            return value
    elif issubclass(python_type, int | np.integer):
        if _is_integral(value):
            return python_type(value)
    elif issubclass(python_type, float | np.floating):
        if _is_real(value):
            return python_type(value)
    elif issubclass(python_type, decimal.Decimal):
        if isinstance(value, decimal.Decimal):
            return value
        if _is_real(value):
            return decimal.Decimal(str(value))
    elif issubclass(python_type, bytes | bytearray):
        if isinstance(value, bytes | bytearray | memoryview):
            return python_type(value)
    elif isinstance(value, python_type):
        return value

    raise TypeError(f'{python_type.__name__} field rejects {type(value).__name__} value {value!r}')


def _reinterpret_epoch_millis(value: Any, python_type: Any) -> Any:
    if not _is_integral(value):
        raise TypeError('not an integer')
    return from_epoch_millis(value)


def _reinterpret_iso_text(value: Any, python_type: Any) -> Any:
    if not isinstance(value, str):
        raise TypeError('not text')
    if python_type is datetime.time:
        return datetime.time.fromisoformat(value)
    return dateutil.parser.isoparse(value)


def _reinterpret_construct(value: Any, python_type: Any) -> Any:
    if not isinstance(python_type, type) or python_type is bool or python_type is np.bool_:
        raise TypeError('no constructor fallback')
    if not (isinstance(value, str) or python_type is str or issubclass(python_type, enum.Enum)):
        raise TypeError('no constructor fallback')
    return python_type(value)


_FALLBACKS: list[tuple[DecodeStrategy, Callable[[Any, Any], Any]]] = [
    (DecodeStrategy.EPOCH_MILLIS, _reinterpret_epoch_millis),
    (DecodeStrategy.ISO_TEXT, _reinterpret_iso_text),
    (DecodeStrategy.CONSTRUCT, _reinterpret_construct),
]


def resolve(value: Any, python_type: Any) -> tuple[Any, DecodeStrategy]:
    """Decode a column value and report which strategy produced it.

    Raises TypeConversionError when neither direct assignment nor any
    fallback yields a value the field accepts.
    """
    if value is None:
        return None, DecodeStrategy.DIRECT

    try:
        return coerce(value, python_type), DecodeStrategy.DIRECT
    except TypeError as err:
        rejection = err

    for strategy, reinterpret in _FALLBACKS:
        try:
            result = coerce(reinterpret(value, python_type), python_type)
        except (TypeError, ValueError, OverflowError, ArithmeticError):
            continue
        logger.debug(f'Decoded {value!r} via {strategy.value} fallback ({rejection})')
        return result, strategy

    raise TypeConversionError(f'Cannot decode {value!r}: {rejection}') from rejection


def decode(value: Any, python_type: Any) -> Any:
    """Convert a column value to a field value of `python_type`.
    """
    return resolve(value, python_type)[0]
