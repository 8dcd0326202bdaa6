"""Provider lookup table.

Adding an OpenAI-compatible backend is a new ``ProviderConfig`` entry, not a
new branch: ``build_reviewer`` picks the SDK from ``sdk`` and passes the base
URL and model through.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from patchlens_core.providers.anthropic import AnthropicReviewer
from patchlens_core.providers.base import BaseReviewer
from patchlens_core.providers.openai import OpenAIReviewer


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    sdk: str  # "openai" | "anthropic"
    api_key_env: str
    default_model: str
    base_url: str | None = None


PROVIDERS: dict[str, ProviderConfig] = {
    p.name: p
    for p in (
        ProviderConfig("openai", "openai", "OPENAI_API_KEY", "gpt-4o"),
        ProviderConfig("anthropic", "anthropic", "ANTHROPIC_API_KEY", "claude-sonnet-4-20250514"),
        ProviderConfig("deepseek", "openai", "DEEPSEEK_API_KEY", "deepseek-chat", "https://api.deepseek.com"),
        ProviderConfig(
            "openrouter", "openai", "OPENROUTER_API_KEY", "openai/gpt-4o", "https://openrouter.ai/api/v1"
        ),
        ProviderConfig("xai", "openai", "XAI_API_KEY", "grok-2-latest", "https://api.x.ai/v1"),
        ProviderConfig(
            "groq", "openai", "GROQ_API_KEY", "llama-3.3-70b-versatile", "https://api.groq.com/openai/v1"
        ),
        ProviderConfig(
            "together-ai",
            "openai",
            "TOGETHER_API_KEY",
            "meta-llama/Llama-3.3-70B-Instruct-Turbo",
            "https://api.together.xyz/v1",
        ),
        ProviderConfig(
            "fireworks-ai",
            "openai",
            "FIREWORKS_API_KEY",
            "accounts/fireworks/models/llama-v3p1-70b-instruct",
            "https://api.fireworks.ai/inference/v1",
        ),
        ProviderConfig(
            "mistral-ai", "openai", "MISTRAL_API_KEY", "mistral-large-latest", "https://api.mistral.ai/v1"
        ),
    )
}

_SDK_CLASSES: dict[str, type[BaseReviewer]] = {
    "openai": OpenAIReviewer,
    "anthropic": AnthropicReviewer,
}


def get_provider(name: str) -> ProviderConfig:
    try:
        return PROVIDERS[name]
    except KeyError:
        raise ValueError(f"Unknown provider: {name!r}. Choose one of: {', '.join(sorted(PROVIDERS))}.") from None


def resolve_api_key(name: str) -> str | None:
    return os.environ.get(get_provider(name).api_key_env)


def build_reviewer(config: dict) -> BaseReviewer:
    provider = get_provider(config["provider"])
    reviewer_cls = _SDK_CLASSES[provider.sdk]
    return reviewer_cls(
        api_key=config.get("api_key") or resolve_api_key(provider.name),
        model=config.get("model") or provider.default_model,
        base_url=provider.base_url,
        custom_personas=config.get("custom_personas"),
    )
