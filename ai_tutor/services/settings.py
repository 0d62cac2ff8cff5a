"""Settings snapshot passed into each core call, plus env-backed defaults."""
from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()


class TutorSettings(BaseModel):
    """Credentials and selections read by the core at call start. Never written by it."""

    model_config = ConfigDict(frozen=True)

    google_api_key: str = ""
    zhipu_api_key: str = ""
    mistral_api_key: str = ""
    selected_model: str = Field(default="google", description="Provider identifier")
    selected_tutor_mode: str = Field(default="standard", description="Persona identifier")
    flowchart_model: Optional[str] = Field(
        default=None,
        description="Provider used for flowchart generation; falls back to selected_model",
    )

    def credential(self, field_name: str) -> str:
        return str(getattr(self, field_name, "") or "").strip()


def settings_from_env() -> TutorSettings:
    """Build the default settings snapshot from environment variables."""

    return TutorSettings(
        google_api_key=os.getenv("GOOGLE_API_KEY", ""),
        zhipu_api_key=os.getenv("ZHIPU_API_KEY", ""),
        mistral_api_key=os.getenv("MISTRAL_API_KEY", ""),
        selected_model=os.getenv("AI_TUTOR_MODEL", "google").strip() or "google",
        selected_tutor_mode=os.getenv("AI_TUTOR_MODE", "standard").strip() or "standard",
        flowchart_model=os.getenv("AI_TUTOR_FLOWCHART_MODEL", "").strip() or None,
    )


def http_timeout_from_env() -> Optional[float]:
    """Read the transport timeout in seconds. Empty or invalid means no timeout."""

    raw = os.getenv("AI_TUTOR_HTTP_TIMEOUT", "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


__all__ = ["TutorSettings", "settings_from_env", "http_timeout_from_env"]
