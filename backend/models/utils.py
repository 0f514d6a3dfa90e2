"""Shared utilities for ORM models."""

import uuid
from decimal import Decimal

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid.uuid4())


class DecimalString(TypeDecorator):
    """Decimal stored as its string form.

    SQLite keeps ``Numeric`` as a float, which rounds values past ~15
    significant digits. Text storage returns exactly the Decimal written.
    """

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(str(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)
