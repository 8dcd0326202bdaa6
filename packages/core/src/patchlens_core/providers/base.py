"""Base reviewer implementing the Template Method pattern.

All providers share the same review algorithm:
    review_code() → _build_system_prompt() + _build_user_prompt()
                  → _call_with_retry() → _call_api()   ← only this differs per provider
                  → parse_response()

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response
"""

from __future__ import annotations

import json
import logging
import re
import time
from abc import ABC, abstractmethod

from patchlens_core.models import FallbackTextComment, ParsedComments, ReviewComment, ReviewResponse

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_MAX_TOKENS = 4096

DEFAULT_PERSONA = "senior-engineer"
PERSONA_PROMPTS = {
    "senior-engineer": (
        "You are a senior software engineer reviewing code for quality, maintainability, and best practices."
    ),
    "security-expert": (
        "You are a security expert reviewing code for vulnerabilities, data protection, and secure coding practices."
    ),
    "performance-specialist": (
        "You are a performance specialist reviewing code for efficiency, scalability, and optimization opportunities."
    ),
    "accessibility-advocate": (
        "You are an accessibility advocate reviewing code for inclusive design and WCAG compliance."
    ),
}

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```$")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_UNQUOTED_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:")
_SINGLE_QUOTED_VALUE_RE = re.compile(r":\s*'([^']*)'")
_FLAT_OBJECT_RE = re.compile(r"{[^{}]*}")


class BaseReviewer(ABC):
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(self, model: str | None = None, custom_personas: dict[str, str] | None = None):
        self.model = model
        self.custom_personas = custom_personas or {}

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def review_code(
        self,
        code: str,
        language: str,
        persona: str = DEFAULT_PERSONA,
        context: str = "",
    ) -> list[ReviewComment]:
        """Review one chunk of code and return its comments, possibly empty.

        Line numbers in the returned comments are relative to ``code``.
        """
        system = self._build_system_prompt(language, persona)
        user = self._build_user_prompt(code, context)
        raw = self._call_with_retry(system, user)
        if raw is None:
            return []
        return self.parse_response(raw).as_comments()

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        It should raise on failure; _call_with_retry handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _call_with_retry(self, system_prompt: str, user_prompt: str) -> str | None:
        """Retry _call_api up to MAX_RETRIES times with exponential backoff."""
        for attempt in range(self.MAX_RETRIES):
            try:
                return self._call_api(system_prompt, user_prompt)
            except Exception as e:
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s API failed after %d attempts: %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    return None
                delay = 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %ds...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                time.sleep(delay)

    def _build_system_prompt(self, language: str, persona: str) -> str:
        persona_prompt = self.custom_personas.get(persona) or PERSONA_PROMPTS.get(
            persona, PERSONA_PROMPTS[DEFAULT_PERSONA]
        )
        return f"""{persona_prompt}

Review the following {language} code and provide specific, actionable feedback on
correctness, maintainability, performance and security.

Only report medium and high severity issues.

Respond with a JSON array of comment objects:
[
  {{
    "type": "inline|general",
    "content": "<the review comment>",
    "severity": "warning|error",
    "line_number": <line number in the code shown, counting from 1>,
    "suggestion": "<optional improvement>"
  }}
]

Understanding the diff:
- Lines starting with "-" show code that was REMOVED
- Lines starting with "+" show code that was ADDED
- Lines starting with a space show unchanged context

"line_number" counts lines of the code exactly as shown, starting at 1, including
removed and context lines. Use "general" with no line_number for file-wide remarks.

If there are no issues, return: []
Do not return any text outside the JSON array."""

    def _build_user_prompt(self, code: str, context: str = "") -> str:
        context_section = f"\nAdditional context:\n{context}\n" if context else ""
        return f"""Code to review:
```
{code}
```
{context_section}"""

    def parse_response(self, raw: str) -> ReviewResponse:
        """Parse the model's raw text into comments, or keep it as fallback text.

        Tries, in order: the outermost JSON array, the same array after common
        JSON repairs, then each flat ``{...}`` object on its own.
        """
        cleaned = _FENCE_OPEN_RE.sub("", raw.strip())
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned.strip())

        start, end = cleaned.find("["), cleaned.rfind("]")
        candidate = cleaned[start : end + 1] if start != -1 and end > start else cleaned

        for attempt in (candidate, self._repair_json(candidate)):
            try:
                data = json.loads(attempt)
            except json.JSONDecodeError:
                continue
            if isinstance(data, list):
                return ParsedComments(tuple(c for c in map(ReviewComment.from_dict, data) if c is not None))
            if isinstance(data, dict):
                comment = ReviewComment.from_dict(data)
                return ParsedComments((comment,) if comment else ())

        objects = []
        for match in _FLAT_OBJECT_RE.findall(cleaned):
            try:
                comment = ReviewComment.from_dict(json.loads(match))
            except json.JSONDecodeError:
                continue
            if comment is not None:
                objects.append(comment)
        if objects:
            return ParsedComments(tuple(objects))

        logger.warning(
            "%s: failed to parse response as JSON, keeping it as a general comment: %s",
            self.__class__.__name__,
            raw[:200],
        )
        return FallbackTextComment(cleaned)

    @staticmethod
    def _repair_json(text: str) -> str:
        text = _TRAILING_COMMA_RE.sub(r"\1", text)
        text = _UNQUOTED_KEY_RE.sub(r'\1"\2":', text)
        return _SINGLE_QUOTED_VALUE_RE.sub(r': "\1"', text)
