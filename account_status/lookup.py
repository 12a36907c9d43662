import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from time import monotonic
from typing import Any, Dict, Iterable, Optional, Union
from urllib.parse import quote

import requests
from urllib3.exceptions import ReadTimeoutError

from account_status.errors import LookupErrorKind, StatusLookupError
from account_status.records import EnrichmentRecord, Value
from account_status.settings import LOOKUP_TIMEOUT, LOOKUP_WORKERS, STATUS_API_URL

log = logging.getLogger(__name__)

USER_AGENT = "account-status/1.0 (+requests)"
CHUNK_SIZE = 1024

LookupOutcome = Union[EnrichmentRecord, StatusLookupError]


class StatusClient:
    """
    Thin client for the account status service: GET {base_url}/{key} -> JSON object.

    The session may be shared and reused across runs; it is never modified
    here, headers go out with each call. `timeout` bounds the whole call,
    connect through last body byte, so one slow account never holds up another.
    """
    def __init__(
        self,
        base_url: str = STATUS_API_URL,
        timeout: float = LOOKUP_TIMEOUT,
        session: Optional[requests.Session] = None,
        user_agent: str = USER_AGENT,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/json", "User-Agent": user_agent}

    def url_for(self, key: Value) -> str:
        # ints go in as-is, text ids are escaped so "a/b" stays one path segment
        segment = str(key) if isinstance(key, int) else quote(str(key), safe="")
        return f"{self.base_url}/{segment}"

    def _read_body(self, r, key: Value, deadline: float) -> bytes:
        """Read the body in chunks, giving up once the call's deadline has passed."""
        chunks = []
        try:
            for chunk in r.iter_content(CHUNK_SIZE):
                if monotonic() > deadline:
                    raise StatusLookupError(
                        LookupErrorKind.TIMEOUT, key, f"response not complete within {self.timeout}s"
                    )
                chunks.append(chunk)
        except requests.ConnectionError as e:
            # requests reports a read timeout mid-body as a ConnectionError
            if e.args and isinstance(e.args[0], ReadTimeoutError):
                raise StatusLookupError(LookupErrorKind.TIMEOUT, key, str(e)) from e
            raise
        return b"".join(chunks)

    def fetch(self, key: Value) -> EnrichmentRecord:
        """
        Fetch the status record for one key.

        Raises:
            StatusLookupError: kind is TIMEOUT, UNREACHABLE, BAD_STATUS or BAD_PAYLOAD.
        """
        url = self.url_for(key)
        deadline = monotonic() + self.timeout
        r = None
        try:
            r = self.session.get(
                url,
                headers=self.headers,
                timeout=(self.timeout, self.timeout),
                allow_redirects=True,
                stream=True,
            )
            r.raise_for_status()
            data = self._read_body(r, key, deadline)
        except requests.Timeout as e:
            raise StatusLookupError(LookupErrorKind.TIMEOUT, key, str(e)) from e
        except requests.HTTPError as e:
            raise StatusLookupError(LookupErrorKind.BAD_STATUS, key, f"HTTP {r.status_code} from {url}") from e
        except requests.RequestException as e:
            raise StatusLookupError(LookupErrorKind.UNREACHABLE, key, str(e)) from e
        finally:
            if r is not None:
                r.close()

        try:
            body: Any = json.loads(data)
        except ValueError as e:
            raise StatusLookupError(LookupErrorKind.BAD_PAYLOAD, key, "response is not JSON") from e
        if not isinstance(body, dict):
            raise StatusLookupError(
                LookupErrorKind.BAD_PAYLOAD, key, f"expected a JSON object, got {type(body).__name__}"
            )
        return body

    def fetch_many(self, keys: Iterable[Value], workers: int = LOOKUP_WORKERS) -> Dict[Value, LookupOutcome]:
        """
        Look up every distinct key on a bounded thread pool.

        Returns {key: record or StatusLookupError}. A failed call is recorded
        against its own key and never cancels the others; completion order
        is irrelevant since results are keyed.
        """
        distinct = list(dict.fromkeys(keys))
        results: Dict[Value, LookupOutcome] = {}
        if not distinct:
            return results

        with ThreadPoolExecutor(max_workers=min(workers, len(distinct))) as pool:
            futures = {pool.submit(self.fetch, k): k for k in distinct}
            for fut in as_completed(futures):
                key = futures[fut]
                try:
                    results[key] = fut.result()
                except StatusLookupError as e:
                    log.warning("status lookup failed: key=%r kind=%s", key, e.kind.value)
                    results[key] = e
        return results

    def close(self):
        """Close the session, unless it was handed in by the caller."""
        if self._owns_session:
            self.session.close()
