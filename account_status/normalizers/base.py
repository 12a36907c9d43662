# account_status/normalizers/base.py
from typing import Protocol
from account_status.records import Value


class Normalizer(Protocol):
    def normalize_value(self, column: str, value: Value) -> Value:
        """Return the canonical form of one field, or `value` unchanged."""
        ...
