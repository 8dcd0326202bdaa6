from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from patchlens_core.providers.base import BaseReviewer


class OpenAIReviewer(BaseReviewer):
    """Chat-completions reviewer; also serves every OpenAI-compatible endpoint via ``base_url``."""

    MODEL = "gpt-4o"
    TEMPERATURE = 0.2

    def __init__(
        self,
        api_key: str | None,
        model: str | None = None,
        base_url: str | None = None,
        custom_personas: dict[str, str] | None = None,
    ):
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. "
                "Install it with: pip install 'patchlens[openai]'"
            )
        super().__init__(model=model or self.MODEL, custom_personas=custom_personas)
        self.client = _OpenAI(api_key=api_key, base_url=base_url)

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )
        return response.choices[0].message.content or ""
