# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from account_status.lookup import StatusClient
from account_status.main import app
from account_status.pipeline import StatusPipeline
from account_status.routers.statuses import get_pipeline
from account_status.settings import PipelineConfig

from fakes import BASE_URL, STATUSES, session_for


@pytest.fixture
def status_session():
    return session_for(STATUSES)


@pytest.fixture
def make_pipeline():
    def _make(session, **overrides):
        config = PipelineConfig(api_url=BASE_URL, **overrides)
        return StatusPipeline(StatusClient(BASE_URL, timeout=config.timeout, session=session), config)
    return _make


@pytest.fixture
def accounts_csv(tmp_path):
    path = tmp_path / "accounts.csv"
    path.write_bytes(b"id,name\n1,Alice\n2,Bob\n")
    return path


# --- Override the pipeline dependency so no request leaves the process ---
@pytest.fixture
def client(status_session, make_pipeline):
    app.dependency_overrides[get_pipeline] = lambda: make_pipeline(status_session)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
