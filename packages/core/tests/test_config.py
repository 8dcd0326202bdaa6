"""Tests for configuration loading and validation."""

from patchlens_core.config import DEFAULT_CONFIG, load_config, validate_config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["provider"] == "openai"
    assert config["model"] is None
    assert config["chunk_size"] == 50000
    assert config["chunk_overlap"] == 1000
    assert config["max_review_lines"] == 1000
    assert config["line_target"] == "original"
    assert config["review_draft_prs"] is False


def test_defaults_are_not_shared_between_loads(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config["exclude"].append("extra/**")
    config["custom_personas"]["x"] = "y"
    assert "extra/**" not in DEFAULT_CONFIG["exclude"]
    assert DEFAULT_CONFIG["custom_personas"] == {}


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".patchlens.yml"
    cfg.write_text("provider: anthropic\nchunk_size: 20000\n")
    config = load_config(config_path=str(cfg))
    assert config["provider"] == "anthropic"
    assert config["chunk_size"] == 20000


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".patchlens.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["provider"] == "openai"


def test_exclude_patterns_loaded(tmp_path):
    cfg = tmp_path / ".patchlens.yml"
    cfg.write_text("exclude:\n  - migrations/\n  - '*.lock'\n")
    config = load_config(config_path=str(cfg))
    assert config["exclude"] == ["migrations/", "*.lock"]


def test_custom_personas_loaded(tmp_path):
    cfg = tmp_path / ".patchlens.yml"
    cfg.write_text("persona: strict\ncustom_personas:\n  strict: You are a strict reviewer.\n")
    config = load_config(config_path=str(cfg))
    assert config["persona"] == "strict"
    assert config["custom_personas"] == {"strict": "You are a strict reviewer."}


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".patchlens.yml"
    cfg.write_text("provider: anthropic\n")
    config = load_config(config_path=str(cfg), cli_overrides={"provider": "deepseek"})
    assert config["provider"] == "deepseek"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".patchlens.yml"
    cfg.write_text("provider: anthropic\n")
    config = load_config(config_path=str(cfg), cli_overrides={"provider": None})
    assert config["provider"] == "anthropic"


def test_github_token_read_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["github_token"] == "ghp_test"


class TestValidateConfig:
    def _config(self, tmp_path, **overrides):
        return load_config(config_path=str(tmp_path / "nonexistent.yml"), cli_overrides=overrides)

    def test_defaults_are_valid(self, tmp_path):
        assert validate_config(self._config(tmp_path)) == []

    def test_unknown_provider(self, tmp_path):
        errors = validate_config(self._config(tmp_path, provider="skynet"))
        assert len(errors) == 1
        assert "skynet" in errors[0]

    def test_non_positive_chunk_size(self, tmp_path):
        errors = validate_config(self._config(tmp_path, chunk_size=0))
        assert errors == ["chunk_size must be a positive integer"]

    def test_bool_is_not_an_integer(self, tmp_path):
        errors = validate_config(self._config(tmp_path, concurrency=True))
        assert errors == ["concurrency must be a positive integer"]

    def test_zero_overlap_is_allowed(self, tmp_path):
        assert validate_config(self._config(tmp_path, chunk_overlap=0)) == []

    def test_negative_overlap(self, tmp_path):
        errors = validate_config(self._config(tmp_path, chunk_overlap=-1))
        assert errors == ["chunk_overlap must be a non-negative integer"]

    def test_overlap_not_smaller_than_chunk_size(self, tmp_path):
        errors = validate_config(self._config(tmp_path, chunk_size=500))
        assert errors == ["chunk_overlap must be smaller than chunk_size"]

    def test_overlap_just_below_chunk_size_is_allowed(self, tmp_path):
        assert validate_config(self._config(tmp_path, chunk_size=500, chunk_overlap=499)) == []

    def test_bad_line_target(self, tmp_path):
        errors = validate_config(self._config(tmp_path, line_target="both"))
        assert len(errors) == 1
        assert errors[0].startswith("line_target")

    def test_exclude_must_be_list(self, tmp_path):
        errors = validate_config(self._config(tmp_path, exclude="*.lock"))
        assert errors == ["exclude must be a list of patterns"]
