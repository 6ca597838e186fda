"""DeepSeek provider: OpenAI-compatible chat completions."""

from __future__ import annotations

from storeagent.catalog import models_for
from storeagent.providers.base import ProviderConfig
from storeagent.providers.openai import OpenAIProvider


def deepseek_config(credential: str = "") -> ProviderConfig:
    return ProviderConfig(
        id="deepseek",
        display_name="DeepSeek",
        base_url="https://api.deepseek.com/v1",
        default_model="deepseek-chat",
        model_catalog=models_for("deepseek"),
        auth_scheme="bearer",
        fallback_context_length=64000,
        credential=credential,
    )


def create_deepseek(credential, http_client=None, ledger=None) -> OpenAIProvider:
    return OpenAIProvider(deepseek_config(credential), http_client, ledger)
