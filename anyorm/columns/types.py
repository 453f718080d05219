"""Built-in column types."""

from __future__ import annotations

import math
import threading
import uuid
from decimal import Decimal
from typing import Any

from anyorm.columns.base import Column
from anyorm.core.exceptions import UnexpectColumnValueError


class NumericColumn(Column):
    """Finite floating point numbers.

    Numeric strings are coerced; ``""`` and ``None`` store and retrieve as
    ``None``. Booleans become 0.0/1.0 unless the column is strict.
    """

    type_name = "numeric"

    def is_null(self, value: Any) -> bool:
        return value is None or value == ""

    def normalize(self, value: Any) -> Any:
        if isinstance(value, bool):
            if self.options.strict:
                raise UnexpectColumnValueError(self.type_name, value, "boolean is not a number")
            value = int(value)

        if isinstance(value, (int, float, Decimal)):
            number = float(value)
        elif isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                raise UnexpectColumnValueError(self.type_name, value) from None
        else:
            raise UnexpectColumnValueError(self.type_name, value)

        if not math.isfinite(number):
            raise UnexpectColumnValueError(self.type_name, value, "not a finite number")
        return number


class IntegerColumn(NumericColumn):
    """Integers; non-integral input is truncated, or rejected when strict."""

    type_name = "integer"

    def normalize(self, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return value

        # integral str and Decimal input must not round-trip through float
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise UnexpectColumnValueError(self.type_name, value, "not a finite number")
            if self.options.strict and value != value.to_integral_value():
                raise UnexpectColumnValueError(self.type_name, value, "not an integral value")
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass

        number = super().normalize(value)
        if self.options.strict and not number.is_integer():
            raise UnexpectColumnValueError(self.type_name, value, "not an integral value")
        return int(number)


class TextColumn(Column):
    """Strings. ``""`` is kept apart from ``None`` unless ``empty_to_null`` is set."""

    type_name = "text"

    def is_null(self, value: Any) -> bool:
        return value is None or (value == "" and bool(self.option("empty_to_null", False)))

    def normalize(self, value: Any) -> Any:
        if isinstance(value, str):
            return value
        if self.options.strict:
            raise UnexpectColumnValueError(self.type_name, value, "expected a string")
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)


class UUIDColumn(Column):
    """Version 4 UUIDs as 36-char text, lowercase unless ``upper_case`` is set.

    ``auto_generate`` makes the default a freshly generated id; when left
    unset it follows the ``primary`` flag.
    """

    type_name = "uuid"

    @property
    def auto_generate(self) -> bool:
        value = self.option("auto_generate")
        return self.options.primary if value is None else bool(value)

    @property
    def upper_case(self) -> bool:
        return bool(self.option("upper_case", False))

    def generate(self) -> str:
        return self._format(uuid.uuid4())

    def get_default_value(self) -> Any:
        if self.auto_generate:
            return self.generate()
        return super().get_default_value()

    def normalize(self, value: Any) -> Any:
        if isinstance(value, uuid.UUID):
            return self._format(value)
        if self.options.strict and not isinstance(value, str):
            raise UnexpectColumnValueError(self.type_name, value, "expected a UUID string")
        try:
            return self._format(uuid.UUID(str(value)))
        except ValueError:
            raise UnexpectColumnValueError(self.type_name, value) from None

    def _format(self, value: uuid.UUID) -> str:
        text = str(value)
        return text.upper() if self.upper_case else text


class SequenceColumn(IntegerColumn):
    """Client-side sequence numbers.

    The counter starts at ``start`` (default 1) and lives as long as the
    column instance, across every entity that shares it.
    """

    type_name = "sequence"

    def __init__(self, **options: Any) -> None:
        super().__init__(**options)
        self._next = int(self.option("start", 1))
        self._lock = threading.Lock()

    def get_next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def get_default_value(self) -> Any:
        return self.get_next()

    def peek_default_value(self) -> Any:
        """The number the next insert will take, without advancing the counter."""
        with self._lock:
            return self._next
