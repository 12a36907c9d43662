import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from account_status.errors import CorrelationError
from account_status.normalizers import IntegerRule
from account_status.records import EnrichmentRecord, Row, Value

log = logging.getLogger(__name__)

_key_rule = IntegerRule()


def record_key(record: EnrichmentRecord, key_field: str) -> Optional[Value]:
    """
    The correlation key of a status record, normalized like a row key
    so "42" from the service still matches row key 42.
    """
    if key_field not in record:
        return None
    return _key_rule.normalize_value(key_field, record[key_field])


def index_records(records: Iterable[EnrichmentRecord], key_field: str) -> Dict[Value, EnrichmentRecord]:
    """Index records by key. The first record seen for a key wins."""
    idx: Dict[Value, EnrichmentRecord] = {}
    for rec in records:
        k = record_key(rec, key_field)
        if k is None:
            log.warning("status record without %r field ignored: %r", key_field, rec)
            continue
        idx.setdefault(k, rec)
    return idx


def merge_row(row: Row, record: EnrichmentRecord, key_field: str) -> List[Any]:
    """
    Row values in header order, then the record's values minus its key
    field (the row already carries the id).
    """
    extra = [v for k, v in record.items() if k != key_field]
    out = list(row.values) + extra
    if len(out) != len(row.values) + len(record) - 1:
        raise CorrelationError([row.key])
    return out


def blank_record(key: Value, key_field: str, width: int) -> EnrichmentRecord:
    """Stand-in record for a key whose lookup failed: the key plus `width` empty fields."""
    rec: EnrichmentRecord = {key_field: key}
    rec.update({f"_blank_{i}": "" for i in range(width)})
    return rec


def merge_rows(
    rows: Sequence[Row],
    records: Iterable[EnrichmentRecord],
    key_field: str,
    skip_unmatched: bool = False,
) -> Tuple[List[List[Any]], List[Row]]:
    """
    Correlate every row with its status record by key, keeping input order.

    Returns (merged rows, rows skipped for lack of a record). Skipping only
    happens with skip_unmatched=True.

    Raises:
        CorrelationError: listing every unmatched row key, unless skip_unmatched.
    """
    idx = index_records(records, key_field)
    out: List[List[Any]] = []
    unmatched: List[Row] = []
    for row in rows:
        rec = idx.get(row.key)
        if rec is None:
            unmatched.append(row)
            continue
        out.append(merge_row(row, rec, key_field))
    if unmatched and not skip_unmatched:
        raise CorrelationError([r.key for r in unmatched])
    for r in unmatched:
        log.warning("no status record for key=%r (line %d), row skipped", r.key, r.line)
    return out, unmatched
