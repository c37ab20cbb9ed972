import pytest

from cosmic.utils.validation import (
    ConfigValidationError,
    is_numeric,
    parse_numeric,
    require_existing_file,
    resolve_path,
)


@pytest.mark.parametrize("text", ["0", "70", "0.3", "-1", "-0.5", ".5", "5.", "67.04"])
def test_is_numeric_accepts_plain_decimals(text):
    assert is_numeric(text)


@pytest.mark.parametrize(
    "text",
    ["", "-", ".", "-.", "1e3", "+1", "1-2", "1.2.3", " 1", "1 ", "abc", "0x10", "nan", "--1"],
)
def test_is_numeric_rejects_everything_else(text):
    assert not is_numeric(text)


def test_parse_numeric_strips_whitespace():
    assert parse_numeric("  0.25\n") == pytest.approx(0.25)


def test_parse_numeric_names_the_value_in_errors():
    with pytest.raises(ValueError, match="Invalid redshift"):
        parse_numeric("1e3", description="redshift")


def test_resolve_path_uses_base_directory(tmp_path):
    assert resolve_path("data/z.txt", base_dir=tmp_path) == (tmp_path / "data" / "z.txt").resolve()


def test_require_existing_file_returns_absolute_path(tmp_path):
    target = tmp_path / "z.txt"
    target.write_text("1\n", encoding="utf-8")

    assert require_existing_file("z.txt", base_dir=tmp_path) == str(target.resolve())


def test_require_existing_file_rejects_missing_and_directories(tmp_path):
    with pytest.raises(ConfigValidationError, match="batch file not found"):
        require_existing_file("missing.txt", base_dir=tmp_path, description="batch file")
    with pytest.raises(ConfigValidationError, match="is not a file"):
        require_existing_file(tmp_path)
