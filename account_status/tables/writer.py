from typing import Any, Iterable, Sequence

from account_status.records import CsvDocument, OutputTable

# Characters that force a field to be quoted; a bare \r ends a line for the reader too
_RESERVED = (",", '"', "\n", "\r")


def encode_field(value: Any) -> str:
    """
    Encode one CSV field, quoting only when required.
    Reserved characters wrap the field in double quotes and
    internal quotes are doubled. Numbers are never quoted.
    """
    if value is None:
        return ""
    s = value if isinstance(value, str) else str(value)
    if any(c in s for c in _RESERVED):
        return '"' + s.replace('"', '""') + '"'
    return s


def render_line(fields: Iterable[Any]) -> str:
    return ",".join(encode_field(f) for f in fields) + "\n"


def render_table(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> bytes:
    """Serialize a header plus rows into UTF-8 CSV bytes."""
    lines = [render_line(header)]
    lines.extend(render_line(r) for r in rows)
    return "".join(lines).encode("utf-8")


def build_document(table: OutputTable, filename: str) -> CsvDocument:
    return CsvDocument(content=render_table(table.header, table.rows), filename=filename)
