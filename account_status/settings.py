# account_status/settings.py
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

# Status lookup service (GET {STATUS_API_URL}/{account_id})
STATUS_API_URL = os.getenv("STATUS_API_URL", "http://interview.wpengine.io/v1/accounts/")
STATUS_KEY_FIELD = os.getenv("STATUS_KEY_FIELD", "account_id")

# Seconds, applied to both connect and read
LOOKUP_TIMEOUT = float(os.getenv("LOOKUP_TIMEOUT", "5"))
LOOKUP_WORKERS = int(os.getenv("LOOKUP_WORKERS", "8"))

# blank | drop | fail
ON_LOOKUP_ERROR = os.getenv("ON_LOOKUP_ERROR", "blank").lower()
# fail | skip
ON_UNMATCHED = os.getenv("ON_UNMATCHED", "fail").lower()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

OUTPUT_FILENAME = "account_statuses.csv"
STATUS_LABELS = ("Status", "Status Set On")


class PipelineConfig(BaseModel):
    """Validated knobs for one pipeline run."""
    api_url: str = STATUS_API_URL
    key_field: str = STATUS_KEY_FIELD
    timeout: float = Field(LOOKUP_TIMEOUT, gt=0)
    workers: int = Field(LOOKUP_WORKERS, ge=1)
    on_lookup_error: Literal["blank", "drop", "fail"] = "blank"
    on_unmatched: Literal["fail", "skip"] = "fail"
    status_labels: tuple[str, ...] = STATUS_LABELS
    filename: str = OUTPUT_FILENAME


def default_config(**overrides) -> PipelineConfig:
    """Config built from the environment, with optional per-call overrides."""
    values = {"on_lookup_error": ON_LOOKUP_ERROR, "on_unmatched": ON_UNMATCHED}
    values.update({k: v for k, v in overrides.items() if v is not None})
    return PipelineConfig(**values)
