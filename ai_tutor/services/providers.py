"""Static provider table: which vendor, model and wire protocol each identifier maps to."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class ProtocolKind(str, Enum):
    OPENAI_COMPATIBLE = "openai_compatible"
    GEMINI = "gemini"


@dataclass(frozen=True)
class ProviderConfig:
    identifier: str
    label: str
    base_url: str
    model: str
    protocol: ProtocolKind
    credential_field: str

    @property
    def stream_url(self) -> str:
        if self.protocol is ProtocolKind.GEMINI:
            return f"{self.base_url}/models/{self.model}:streamGenerateContent"
        return f"{self.base_url}/chat/completions"

    @property
    def completion_url(self) -> str:
        if self.protocol is ProtocolKind.GEMINI:
            return f"{self.base_url}/models/{self.model}:generateContent"
        return f"{self.base_url}/chat/completions"


GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
ZHIPU_BASE_URL = "https://open.bigmodel.cn/api/paas/v4"
MISTRAL_BASE_URL = "https://api.mistral.ai/v1"

PROVIDERS: Dict[str, ProviderConfig] = {
    "google": ProviderConfig(
        identifier="google",
        label="Google Gemma 3 27B",
        base_url=GEMINI_BASE_URL,
        model="gemma-3-27b-it",
        protocol=ProtocolKind.GEMINI,
        credential_field="google_api_key",
    ),
    "gemini-flash": ProviderConfig(
        identifier="gemini-flash",
        label="Google Gemini 2.5 Flash",
        base_url=GEMINI_BASE_URL,
        model="gemini-2.5-flash",
        protocol=ProtocolKind.GEMINI,
        credential_field="google_api_key",
    ),
    "zhipu": ProviderConfig(
        identifier="zhipu",
        label="ZhipuAI GLM-4.5 Flash",
        base_url=ZHIPU_BASE_URL,
        model="glm-4.5-flash",
        protocol=ProtocolKind.OPENAI_COMPATIBLE,
        credential_field="zhipu_api_key",
    ),
    "mistral-small": ProviderConfig(
        identifier="mistral-small",
        label="Mistral Small",
        base_url=MISTRAL_BASE_URL,
        model="mistral-small-latest",
        protocol=ProtocolKind.OPENAI_COMPATIBLE,
        credential_field="mistral_api_key",
    ),
    "mistral-codestral": ProviderConfig(
        identifier="mistral-codestral",
        label="Mistral Codestral",
        base_url=MISTRAL_BASE_URL,
        model="codestral-latest",
        protocol=ProtocolKind.OPENAI_COMPATIBLE,
        credential_field="mistral_api_key",
    ),
}


__all__ = ["ProtocolKind", "ProviderConfig", "PROVIDERS"]
