"""Data shapes passed between the pipeline stages.

A run moves through these in order:
    Table (raw strings) -> Row (normalized, keyed) -> OutputTable -> CsvDocument

Enrichment records stay plain dicts: the status service owns their shape,
we only rely on the key field.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel

Value = Union[str, int]
EnrichmentRecord = Dict[str, Any]


@dataclass
class Table:
    header: List[str]
    rows: Iterator[Tuple[int, List[str]]]  # lazy (line number, fields)


@dataclass(frozen=True)
class Row:
    header: tuple
    values: tuple
    line: int = 0

    @property
    def key(self) -> Value:
        # First column identifies the row, after normalization
        return self.values[0]

    def as_dict(self) -> Dict[str, Value]:
        # Duplicate column names collapse here; use `values` for positional access
        return dict(zip(self.header, self.values))


@dataclass
class OutputTable:
    header: List[str]
    rows: List[List[Any]] = field(default_factory=list)
    rows_in: int = 0


@dataclass(frozen=True)
class CsvDocument:
    content: bytes
    filename: str
    media_type: str = "text/csv"

    @property
    def headers(self) -> Dict[str, str]:
        """Transport headers for delivering the file as a download."""
        return {
            "Content-Disposition": f"attachment; filename={self.filename}",
            "Pragma": "no-cache",
            "Expires": "0",
        }


class RowError(BaseModel):
    kind: str                   # parse | timeout | unreachable | bad_status | bad_payload | correlation
    error: str
    key: Optional[Any] = None
    line: Optional[int] = None


class PipelineResult(BaseModel):
    ok: bool
    rows_in: int = 0
    rows_out: int = 0
    errors: List[RowError] = []
    document: Optional[Any] = None  # CsvDocument when ok

    @property
    def content(self) -> Optional[bytes]:
        return self.document.content if self.document is not None else None
