"""Tests for file filtering and language detection utilities."""

from patchlens_core.utils.code import detect_language, is_code_file, is_excluded


class TestIsCodeFile:
    def test_python_file_is_code(self):
        assert is_code_file("app/services/user.py") is True

    def test_js_file_is_code(self):
        assert is_code_file("src/components/Button.tsx") is True

    def test_image_is_not_code(self):
        assert is_code_file("assets/logo.png") is False

    def test_font_is_not_code(self):
        assert is_code_file("static/fonts/Inter.woff2") is False

    def test_archive_is_not_code(self):
        assert is_code_file("dist/bundle.tar.gz") is False

    def test_lock_file_is_not_code(self):
        assert is_code_file("poetry.lock") is False
        assert is_code_file("Pipfile.lock") is False

    def test_compiled_artifacts_are_not_code(self):
        assert is_code_file("pkg/__pycache__/mod.cpython-312.pyc") is False
        assert is_code_file("build/Main.class") is False

    def test_case_insensitive(self):
        assert is_code_file("image.PNG") is False


class TestDetectLanguage:
    def test_known_extensions(self):
        assert detect_language("src/app.py") == "python"
        assert detect_language("web/index.tsx") == "typescript"
        assert detect_language("lib/util.js") == "javascript"

    def test_extension_is_case_insensitive(self):
        assert detect_language("README.MD") == "markdown"

    def test_dockerfile_by_name(self):
        assert detect_language("deploy/Dockerfile") == "dockerfile"

    def test_unknown_extension_is_text(self):
        assert detect_language("notes.xyz") == "text"
        assert detect_language("Makefile") == "text"


class TestIsExcluded:
    def test_basename_glob(self):
        assert is_excluded("web/assets/app.min.js", ["*.min.js"]) is True

    def test_full_path_glob(self):
        assert is_excluded("src/generated/models.py", ["src/generated/*.py"]) is True

    def test_double_star_directory(self):
        assert is_excluded("node_modules/left-pad/index.js", ["node_modules/**"]) is True

    def test_nested_directory_prefix(self):
        assert is_excluded("packages/web/node_modules/x.js", ["node_modules/"]) is True

    def test_plain_directory_name(self):
        assert is_excluded("migrations/0001_initial.py", ["migrations"]) is True

    def test_no_match(self):
        assert is_excluded("src/app.py", ["*.lock", "dist/**"]) is False

    def test_empty_patterns(self):
        assert is_excluded("src/app.py", []) is False

    def test_bare_double_star_matches_everything_by_glob(self):
        assert is_excluded("src/app.py", ["**"]) is True
