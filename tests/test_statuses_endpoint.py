from types import SimpleNamespace

import requests

from account_status.main import app
from account_status.routers.statuses import get_pipeline

from fakes import FakeResponse, FakeSession, STATUSES, session_for


def _upload(client, data: bytes, name="accounts.csv"):
    return client.post("/statuses", files={"accounts-csv": (name, data, "text/csv")})


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_upload_returns_csv_attachment(client):
    r = _upload(client, b"id,name\n1,Alice\n2,Bob\n")
    assert r.status_code == 200, r.text
    assert r.headers["content-type"].startswith("text/csv")
    assert r.headers["content-disposition"] == "attachment; filename=account_statuses.csv"
    assert r.headers["pragma"] == "no-cache"
    assert r.headers["expires"] == "0"
    assert r.content == (
        b"id,name,Status,Status Set On\n"
        b"1,Alice,active,2020-01-01\n"
        b"2,Bob,inactive,2019-05-05\n"
    )


def test_upload_bad_csv_is_400(client):
    r = _upload(client, b"id,name,plan\n1,Alice\n")
    assert r.status_code == 400
    detail = r.json()["detail"]
    assert detail["ok"] is False
    assert detail["errors"][0]["kind"] == "parse"


def test_upload_empty_file_is_400(client):
    r = _upload(client, b"")
    assert r.status_code == 400


def test_upload_missing_field_is_422(client):
    r = client.post("/statuses", files={"wrong-name": ("a.csv", b"id\n1\n", "text/csv")})
    assert r.status_code == 422


def test_missing_account_becomes_blank_row(client):
    r = _upload(client, b"id,name\n1,Alice\n2,Bob\n7,Nobody\n")
    # key 7 is a 404 from the status service: blank status, reported in a header
    assert r.status_code == 200
    assert r.headers["x-row-errors"] == "1"
    assert r.content.splitlines()[-1] == b"7,Nobody,,"


def test_lookup_failures_escalated_are_502(client, make_pipeline):
    session = session_for(STATUSES)
    session.routes["2"] = requests.ConnectionError("refused")
    app.dependency_overrides[get_pipeline] = lambda: make_pipeline(session, on_lookup_error="fail")
    r = _upload(client, b"id,name\n1,Alice\n2,Bob\n")
    assert r.status_code == 502
    assert r.json()["detail"]["errors"][0]["kind"] == "unreachable"


def test_correlation_failure_is_422(client, make_pipeline):
    session = session_for(STATUSES)
    session.routes["2"] = FakeResponse(200, {"account_id": 3, "status": "x", "status_set_on": "y"})
    app.dependency_overrides[get_pipeline] = lambda: make_pipeline(session)
    r = _upload(client, b"id,name\n1,Alice\n2,Bob\n")
    assert r.status_code == 422
    errors = r.json()["detail"]["errors"]
    assert errors == [{"kind": "correlation", "error": "no status record for key 2", "key": 2, "line": None}]


def _request_with(http=None):
    state = SimpleNamespace(http=http) if http is not None else SimpleNamespace()
    return SimpleNamespace(app=SimpleNamespace(state=state))


def test_pipeline_dependency_shares_the_app_session():
    shared = FakeSession()
    gen = get_pipeline(_request_with(shared))
    pipeline = next(gen)
    assert pipeline.client.session is shared
    gen.close()
    assert not shared.closed
    assert shared.headers == {}


def test_pipeline_dependency_closes_its_own_session(monkeypatch):
    monkeypatch.setattr(requests, "Session", FakeSession)
    gen = get_pipeline(_request_with())
    pipeline = next(gen)
    own = pipeline.client.session
    gen.close()
    assert own.closed
