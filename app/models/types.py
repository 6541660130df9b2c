from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import DECIMAL, String
from sqlalchemy.types import TypeDecorator


class Money(TypeDecorator):
    """
    Fixed-point amount that round-trips exactly on every backend.

    MySQL gets a native DECIMAL(precision, scale). SQLite has no decimal
    storage (it would keep a float), so the value is written as text there;
    money columns are never compared or summed in SQL.
    """

    impl = DECIMAL
    cache_ok = True

    def __init__(self, precision: int = 20, scale: int = 2):
        super().__init__(precision, scale)
        self.precision = precision
        self.scale = scale
        self._quantum = Decimal(1).scaleb(-scale)

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(self.precision + 2))
        return dialect.type_descriptor(DECIMAL(self.precision, self.scale))

    def _quantize(self, value) -> Decimal:
        if isinstance(value, float):
            value = str(value)
        return Decimal(value).quantize(self._quantum, rounding=ROUND_HALF_UP)

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = self._quantize(value)
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self._quantize(value)
