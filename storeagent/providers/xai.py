"""xAI Grok provider: OpenAI-compatible chat completions."""

from __future__ import annotations

from storeagent.catalog import models_for
from storeagent.providers.base import ProviderConfig
from storeagent.providers.openai import OpenAIProvider


def xai_config(credential: str = "") -> ProviderConfig:
    return ProviderConfig(
        id="xai",
        display_name="xAI Grok",
        base_url="https://api.x.ai/v1",
        default_model="grok-4-fast-non-reasoning",
        model_catalog=models_for("xai"),
        auth_scheme="bearer",
        fallback_context_length=131072,
        credential=credential,
    )


def create_xai(credential, http_client=None, ledger=None) -> OpenAIProvider:
    return OpenAIProvider(xai_config(credential), http_client, ledger)
