"""Model catalog: known models per vendor with their context windows."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelInfo:
    """A model with its display and context-length metadata."""
    id: str
    provider: str
    name: str
    context_window: int
    description: str = ""


# --- Model Registry ---
# Context windows as published by each vendor. Update as needed.
MODEL_REGISTRY: list[ModelInfo] = [
    # OpenAI
    ModelInfo("gpt-5.1",      "openai", "GPT-5.1",      1_048_576, "Latest and most capable GPT model with 1M context."),
    ModelInfo("gpt-5",        "openai", "GPT-5",          256_000, "Most powerful general-purpose model."),
    ModelInfo("gpt-5-pro",    "openai", "GPT-5 Pro",      256_000, "Professional tier with extended capabilities."),
    ModelInfo("gpt-5-mini",   "openai", "GPT-5 Mini",     256_000, "Cost-effective GPT-5 variant."),
    ModelInfo("gpt-5-nano",   "openai", "GPT-5 Nano",     128_000, "Fastest GPT-5 variant for simple tasks."),
    ModelInfo("gpt-4.1",      "openai", "GPT-4.1",      1_048_576, "GPT-4.1 with 1M context window."),
    ModelInfo("gpt-4o",       "openai", "GPT-4o",         128_000, "Multimodal model for complex tasks."),
    ModelInfo("gpt-4o-mini",  "openai", "GPT-4o Mini",    128_000, "Fast and cost-effective for most tasks."),
    ModelInfo("o3-mini",      "openai", "o3-mini",        200_000, "Latest o3 reasoning model."),
    ModelInfo("o1",           "openai", "o1",             200_000, "Advanced reasoning for complex problems."),
    ModelInfo("o1-mini",      "openai", "o1-mini",        128_000, "Faster reasoning model."),
    ModelInfo("o1-pro",       "openai", "o1-pro",         200_000, "Most powerful reasoning model."),
    # Anthropic
    ModelInfo("claude-sonnet-4-20250514",   "anthropic", "Claude Sonnet 4",   200_000, "Latest Sonnet model, excellent for complex tasks."),
    ModelInfo("claude-opus-4-20250514",     "anthropic", "Claude Opus 4",     200_000, "Most powerful Claude 4 model."),
    ModelInfo("claude-3-7-sonnet-20250219", "anthropic", "Claude 3.7 Sonnet", 200_000, "Extended thinking with hybrid reasoning."),
    ModelInfo("claude-3-5-sonnet-20241022", "anthropic", "Claude 3.5 Sonnet", 200_000, "Fast and intelligent, great for most tasks."),
    ModelInfo("claude-3-5-haiku-20241022",  "anthropic", "Claude 3.5 Haiku",  200_000, "Fastest model, cost-effective option."),
    ModelInfo("claude-3-opus-20240229",     "anthropic", "Claude 3 Opus",     200_000, "Most powerful Claude 3 model."),
    ModelInfo("claude-3-haiku-20240307",    "anthropic", "Claude 3 Haiku",    200_000, "Fast and compact Claude 3 model."),
    # Google
    ModelInfo("gemini-3-pro-preview",  "google", "Gemini 3 Pro",          1_048_576, "Latest Gemini with multimodal and image generation."),
    ModelInfo("gemini-2.5-pro",        "google", "Gemini 2.5 Pro",        1_048_576, "Pro model with enhanced reasoning."),
    ModelInfo("gemini-2.5-flash",      "google", "Gemini 2.5 Flash",      1_048_576, "Fast model with adaptive thinking."),
    ModelInfo("gemini-2.5-flash-lite", "google", "Gemini 2.5 Flash-Lite", 1_048_576, "Most cost-efficient for high-volume tasks."),
    ModelInfo("gemini-2.0-flash",      "google", "Gemini 2.0 Flash",      1_048_576, "Fast model with 1M context."),
    ModelInfo("gemini-1.5-pro",        "google", "Gemini 1.5 Pro",        2_097_152, "Most capable with 2M context window."),
    ModelInfo("gemini-1.5-flash",      "google", "Gemini 1.5 Flash",      1_048_576, "Fast and efficient with 1M context."),
    # xAI
    ModelInfo("grok-4-0709",                 "xai", "Grok 4",                    256_000, "Most advanced Grok model."),
    ModelInfo("grok-4-fast-reasoning",       "xai", "Grok 4 Fast (Reasoning)", 2_000_000, "Fast Grok 4 with reasoning capabilities."),
    ModelInfo("grok-4-fast-non-reasoning",   "xai", "Grok 4 Fast",             2_000_000, "Fastest Grok 4 variant."),
    ModelInfo("grok-4-1-fast-non-reasoning", "xai", "Grok 4.1 Fast",           2_000_000, "Fastest Grok 4.1 variant."),
    ModelInfo("grok-code-fast-1",            "xai", "Grok Code Fast",            256_000, "Optimized for code generation."),
    ModelInfo("grok-3",                      "xai", "Grok 3",                    131_072, "Capable Grok 3 model."),
    ModelInfo("grok-3-mini",                 "xai", "Grok 3 Mini",               131_072, "Cost-effective Grok 3 variant."),
    # DeepSeek
    ModelInfo("deepseek-chat",     "deepseek", "DeepSeek-V3",    64_000, "Latest V3 general-purpose chat model."),
    ModelInfo("deepseek-reasoner", "deepseek", "DeepSeek-R1",    64_000, "Advanced reasoning model (R1)."),
    ModelInfo("deepseek-coder",    "deepseek", "DeepSeek Coder", 64_000, "Specialized for code generation."),
]


def models_for(provider: str) -> dict[str, ModelInfo]:
    """Catalog for one vendor, keyed by model id, in registry order."""
    return {m.id: m for m in MODEL_REGISTRY if m.provider == provider}
