import io
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import Response

from account_status.lookup import StatusClient
from account_status.pipeline import StatusPipeline
from account_status.settings import default_config

log = logging.getLogger(__name__)

# --------------------------------------------------------------------
# Router setup
# --------------------------------------------------------------------
router = APIRouter(prefix="", tags=["statuses"])


def get_pipeline(request: Request):
    """
    Build a fresh pipeline per request around the app-wide HTTP session,
    so connections are pooled but no run state is shared.
    Without an app session the client opens its own, closed after the request.
    """
    config = default_config()
    session = getattr(request.app.state, "http", None)
    client = StatusClient(config.api_url, timeout=config.timeout, session=session)
    try:
        yield StatusPipeline(client, config)
    finally:
        client.close()


def _status_code_for(kinds: set) -> int:
    if "parse" in kinds:
        return 400
    if "correlation" in kinds:
        return 422
    return 502  # lookup failures escalated by policy


@router.post("/statuses")
def account_statuses(
    accounts_csv: UploadFile = File(..., alias="accounts-csv"),
    pipeline: StatusPipeline = Depends(get_pipeline),
):
    """
    Append each account's current status to an uploaded CSV.

    Accepts:
        multipart/form-data with the CSV under "accounts-csv".
        The CSV needs a header row, and the account ID as the first column.

    Returns:
        The enriched CSV as an attachment (account_statuses.csv), or
        {"ok": False, "errors": [...]} with 400 (bad CSV), 422 (account with
        no status record) or 502 (status service failures, "fail" policy).
    """
    raw = accounts_csv.file.read()
    if not raw:
        raise HTTPException(400, "Uploaded file is empty")

    try:
        result = pipeline.run(io.BytesIO(raw))
    except Exception as e:
        log.exception("status run failed: file=%s", accounts_csv.filename)
        raise HTTPException(500, f"Status lookup failed: {e}")

    if not result.ok:
        kinds = {err.kind for err in result.errors}
        raise HTTPException(
            _status_code_for(kinds),
            {"ok": False, "errors": [err.model_dump(mode="json") for err in result.errors[:10]]},
        )

    doc = result.document
    headers = dict(doc.headers)
    headers["Cache-Control"] = "no-cache"
    if result.errors:
        # tolerated row problems ride along so the caller can tell blank rows from real ones
        headers["X-Row-Errors"] = str(len(result.errors))
    return Response(content=doc.content, media_type=doc.media_type, headers=headers)
