import csv
import io
import logging
from pathlib import Path
from typing import IO, Iterator, List, Tuple, Union

from account_status.errors import ParseError
from account_status.records import Table

log = logging.getLogger(__name__)

Source = Union[str, Path, IO]


def _open_text(source: Source) -> IO[str]:
    """
    Open a path or wrap a stream as text.
    newline="" lets the csv module handle \\n, \\r\\n and bare \\r endings,
    utf-8-sig drops a leading BOM if Excel left one.
    """
    if isinstance(source, (str, Path)):
        try:
            return open(source, "r", encoding="utf-8-sig", newline="")
        except OSError as e:
            raise ParseError(f"cannot open {source}: {e}") from e
    if isinstance(source, io.TextIOBase):
        return source
    try:
        return io.TextIOWrapper(source, encoding="utf-8-sig", newline="")
    except (AttributeError, TypeError, ValueError) as e:
        raise ParseError(f"cannot read input stream: {e}") from e


def _rows(fh: IO[str], reader, width: int) -> Iterator[Tuple[int, List[str]]]:
    try:
        for fields in reader:
            line = reader.line_num
            if not fields or fields == [""]:
                continue  # blank line
            if len(fields) < width:
                raise ParseError(
                    f"expected {width} fields, got {len(fields)}", line=line
                )
            if len(fields) > width:
                log.debug("line %d: truncating %d extra field(s)", line, len(fields) - width)
            yield line, fields[:width]
    except csv.Error as e:
        raise ParseError(str(e), line=reader.line_num) from e
    except UnicodeDecodeError as e:
        raise ParseError(f"input is not valid UTF-8: {e}") from e
    finally:
        fh.close()


def read_table(source: Source) -> Table:
    """
    Parse a CSV source into a header and a lazy iterator of raw rows.

    The header is read eagerly so a broken file fails here; data rows are
    validated as they are consumed. The underlying handle is closed once the
    rows are exhausted or a row fails to parse.

    Raises:
        ParseError: unreadable source, empty input, or a short row.
    """
    fh = _open_text(source)
    reader = csv.reader(fh)
    try:
        header = next(reader)
    except StopIteration:
        fh.close()
        raise ParseError("input is empty, expected a header row")
    except (csv.Error, UnicodeDecodeError) as e:
        fh.close()
        raise ParseError(f"cannot read header: {e}", line=1) from e

    if not header or not any(h.strip() for h in header):
        fh.close()
        raise ParseError("header row is blank", line=1)

    return Table(header=header, rows=_rows(fh, reader, len(header)))
