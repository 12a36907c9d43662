import logging
from typing import List, Optional, Tuple

from account_status.errors import CorrelationError, ParseError, PipelineAborted, StatusLookupError
from account_status.lookup import StatusClient
from account_status.merger import blank_record, merge_rows
from account_status.normalizers import NormalizerPipeline, get_default_normalizer
from account_status.records import OutputTable, PipelineResult, Row, RowError
from account_status.settings import PipelineConfig, default_config
from account_status.tables import build_document, read_table
from account_status.tables.reader import Source

log = logging.getLogger(__name__)


class StatusPipeline:
    """
    Given a CSV of accounts, append each account's current status and
    return a new CSV.

    One instance per run; pass in a StatusClient to reuse its HTTP session.
    A client built here is closed by close(), or on leaving a `with` block.

    Typical usage:
        result = StatusPipeline(client).run("accounts.csv")
        if result.ok:
            data = result.content
    """
    def __init__(
        self,
        client: Optional[StatusClient] = None,
        config: Optional[PipelineConfig] = None,
        normalizer: Optional[NormalizerPipeline] = None,
    ):
        self.config = config or default_config()
        self._owns_client = client is None
        self.client = client or StatusClient(self.config.api_url, timeout=self.config.timeout)
        self.normalizer = normalizer or get_default_normalizer()

    def close(self):
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------
    def read_rows(self, source: Source) -> Tuple[List[str], List[Row]]:
        """Parse and normalize the whole input. Raises ParseError."""
        table = read_table(source)
        rows = [self.normalizer.normalize_row(table.header, fields, line) for line, fields in table.rows]
        log.info("read %d row(s), %d column(s)", len(rows), len(table.header))
        return table.header, rows

    def lookup(self, rows: List[Row]) -> Tuple[list, List[RowError]]:
        """
        Fetch status records for every distinct row key.
        Returns (records, lookup errors). Failed keys get a blank stand-in
        record under the "blank" policy.
        """
        cfg = self.config
        outcomes = self.client.fetch_many((r.key for r in rows), workers=cfg.workers)

        records, errors = [], []
        for key, outcome in outcomes.items():
            if isinstance(outcome, StatusLookupError):
                errors.append(RowError(kind=outcome.kind.value, key=key, error=str(outcome)))
                if cfg.on_lookup_error == "blank":
                    records.append(blank_record(key, cfg.key_field, len(cfg.status_labels)))
            else:
                records.append(outcome)

        if errors and cfg.on_lookup_error == "fail":
            raise PipelineAborted(f"{len(errors)} status lookup(s) failed", errors)
        return records, errors

    def build_table(self, source: Source) -> Tuple[OutputTable, List[RowError]]:
        """
        Run every stage and return the output table plus row-level errors
        that the configured policies tolerated.

        Raises:
            ParseError, CorrelationError, PipelineAborted
        """
        cfg = self.config
        header, rows = self.read_rows(source)
        rows_in = len(rows)
        records, errors = self.lookup(rows)

        if cfg.on_lookup_error == "drop":
            failed = {e.key for e in errors}
            rows = [r for r in rows if r.key not in failed]

        merged, skipped = merge_rows(rows, records, cfg.key_field, skip_unmatched=cfg.on_unmatched == "skip")
        errors.extend(
            RowError(kind="correlation", key=r.key, line=r.line, error=f"no status record for key {r.key!r}")
            for r in skipped
        )

        table = OutputTable(header=list(header) + list(cfg.status_labels), rows=merged, rows_in=rows_in)
        return table, errors

    # ------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------
    def run(self, source: Source) -> PipelineResult:
        """
        Single entry point: CSV in, enriched CSV out.

        Never raises for bad input or failed lookups; those come back as
        a result with ok=False and structured errors. No partial document
        is returned on failure.
        """
        try:
            table, errors = self.build_table(source)
        except ParseError as e:
            log.warning("input rejected: %s", e)
            return PipelineResult(ok=False, errors=[RowError(kind="parse", line=e.line, error=str(e))])
        except CorrelationError as e:
            log.warning("correlation failed: %s", e)
            return PipelineResult(
                ok=False,
                errors=[RowError(kind="correlation", key=k, error=f"no status record for key {k!r}") for k in e.keys],
            )
        except PipelineAborted as e:
            log.warning("run aborted: %s", e)
            return PipelineResult(ok=False, errors=e.errors)

        doc = build_document(table, self.config.filename)
        log.info("wrote %d row(s) with %d error(s)", len(table.rows), len(errors))
        return PipelineResult(
            ok=True, rows_in=table.rows_in, rows_out=len(table.rows), errors=errors, document=doc
        )
