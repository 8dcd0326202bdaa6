import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "provider": "openai",
    "model": None,  # None = the provider's default model
    "persona": "senior-engineer",
    "custom_personas": {},  # persona name -> system prompt
    "chunk_size": 50000,  # max characters sent to the model per call
    "chunk_overlap": 1000,  # characters of trailing context repeated in the next chunk
    "max_review_lines": 1000,  # cap on flattened diff lines per file
    "include_context": True,
    "max_file_size": 1048576,
    "exclude": [
        "node_modules/**",
        "build/**",
        "dist/**",
        "*.min.js",
        "*.lock",
        "__pycache__/**",
        "vendor/**",
    ],
    "concurrency": 3,
    "line_target": "original",  # "original" | "modified"
    "review_draft_prs": False,
}

LINE_TARGETS = ("original", "modified")


def load_config(config_path: str = ".patchlens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .patchlens.yml in the current directory
      3. CLI argument overrides
    """
    config = {
        **DEFAULT_CONFIG,
        "exclude": list(DEFAULT_CONFIG["exclude"]),
        "custom_personas": dict(DEFAULT_CONFIG["custom_personas"]),
    }

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def validate_config(config: dict) -> list:
    """Return a list of human-readable problems; empty when the config is usable."""
    from patchlens_core.providers.registry import PROVIDERS

    errors = []
    if config.get("provider") not in PROVIDERS:
        errors.append(f"Unknown provider {config.get('provider')!r}. Must be one of: {', '.join(sorted(PROVIDERS))}")

    for key in ("chunk_size", "max_review_lines", "max_file_size", "concurrency"):
        value = config.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            errors.append(f"{key} must be a positive integer")

    overlap = config.get("chunk_overlap")
    if isinstance(overlap, bool) or not isinstance(overlap, int) or overlap < 0:
        errors.append("chunk_overlap must be a non-negative integer")
    elif not any(e.startswith("chunk_size") for e in errors) and overlap >= config["chunk_size"]:
        errors.append("chunk_overlap must be smaller than chunk_size")

    if config.get("line_target") not in LINE_TARGETS:
        errors.append(f"line_target must be one of: {', '.join(LINE_TARGETS)}")

    if not isinstance(config.get("exclude"), list):
        errors.append("exclude must be a list of patterns")

    if not isinstance(config.get("custom_personas") or {}, dict):
        errors.append("custom_personas must be a mapping of persona name to prompt")

    return errors
