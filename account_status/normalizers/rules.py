import logging
import re

from dateutil import parser as date_parser

from .base import Normalizer
from account_status.records import Value

log = logging.getLogger(__name__)

INTEGER_PATTERN = re.compile(r"-?\d+")
# Loose on purpose: 1/5/2016, 2016-01-05, 5-1-16 all qualify; field order is left to the parser
DATE_PATTERN = re.compile(r"\d{1,4}[/-]\d{1,2}[/-]\d{1,4}")


class IntegerRule(Normalizer):
    """
    Whole-number strings become ints.
    Decimals ("3.14") are left alone: only integers are coerced.
    """
    def normalize_value(self, column: str, value: Value) -> Value:
        if isinstance(value, str) and INTEGER_PATTERN.fullmatch(value):
            try:
                return int(value)
            except ValueError:
                # past the interpreter's int digit limit
                log.debug("integer too long to convert, keeping as text (%d digits)", len(value))
        return value


class DateRule(Normalizer):
    """
    Date-looking strings are rewritten as YYYY-MM-DD.
    Ambiguous slash dates read month first (1/5/2016 is January 5th).
    Values the parser rejects pass through untouched.
    """
    def __init__(self, dayfirst: bool = False):
        self.dayfirst = dayfirst

    def normalize_value(self, column: str, value: Value) -> Value:
        if not isinstance(value, str) or not DATE_PATTERN.search(value):
            return value
        return parse_date(value, dayfirst=self.dayfirst)


def parse_date(s: str, dayfirst: bool = False) -> str:
    """Return `s` as an ISO date string, or `s` itself if it isn't a date."""
    try:
        return date_parser.parse(s, dayfirst=dayfirst).date().isoformat()
    except (ValueError, OverflowError) as e:
        log.debug("not a date, keeping as text: %r (%s)", s, e)
        return s
