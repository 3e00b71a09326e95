"""Unit tests for runtime detection and the runtime table."""

import pytest

from dock.config.runtimes import (
    RUNTIMES,
    RuntimeTag,
    get_runtime_executable,
    parse_runtime_tag,
)
from dock.models import DetectionError
from dock.services.runtime import detect_runtime


def _write(tmp_path, source, name="script.py", mode="w"):
    path = tmp_path / name
    if mode == "wb":
        path.write_bytes(source)
    else:
        path.write_text(source)
    return path


class TestDetectRuntime:
    """Test detect_runtime classification rules."""

    def test_python3_shebang(self, tmp_path):
        path = _write(tmp_path, "#!/usr/bin/env python3\nprint 'legacy'\n")
        assert detect_runtime(path) == RuntimeTag.PYTHON3

    def test_python2_shebang(self, tmp_path):
        path = _write(tmp_path, "#!/usr/bin/python2.7\nprint('hi')\n")
        assert detect_runtime(path) == RuntimeTag.PYTHON2

    def test_python3_syntax(self, tmp_path):
        path = _write(tmp_path, "def main() -> None:\n    print(f'{1 + 1}')\n")
        assert detect_runtime(path) == RuntimeTag.PYTHON3

    def test_generic_shebang_falls_through_to_syntax(self, tmp_path):
        path = _write(tmp_path, "#!/usr/bin/env python\nprint 'hello'\n")
        assert detect_runtime(path) == RuntimeTag.PYTHON2

    def test_python2_print_statement(self, tmp_path):
        path = _write(tmp_path, "import sys\nprint 'hello', sys.argv\n")
        assert detect_runtime(path) == RuntimeTag.PYTHON2

    def test_python2_except_comma(self, tmp_path):
        source = "try:\n    pass\nexcept ValueError, e:\n    pass\n"
        path = _write(tmp_path, source)
        assert detect_runtime(path) == RuntimeTag.PYTHON2

    def test_unparseable_is_unknown(self, tmp_path):
        path = _write(tmp_path, "this is not ( python at all\n")
        assert detect_runtime(path) == RuntimeTag.UNKNOWN

    def test_decimal_fraction_is_not_octal(self, tmp_path):
        """Test a broken Python 3 script with `1.05` is not tagged Python2."""
        path = _write(tmp_path, "rate = 1.05\nprint(f'{rate}'\n")
        assert detect_runtime(path) == RuntimeTag.UNKNOWN

    def test_backticks_in_comment_ignored(self, tmp_path):
        path = _write(tmp_path, "# call `main` to run\ndef main(:\n")
        assert detect_runtime(path) == RuntimeTag.UNKNOWN

    def test_python2_markers_in_strings_ignored(self, tmp_path):
        source = 'HELP = """\n    print "usage"\n    x <> y\n"""\ndef broken(:\n'
        path = _write(tmp_path, source)
        assert detect_runtime(path) == RuntimeTag.UNKNOWN

    def test_python2_octal_literal(self, tmp_path):
        path = _write(tmp_path, "import os\nos.chmod('app.py', 0755)\n")
        assert detect_runtime(path) == RuntimeTag.PYTHON2

    def test_python2_backtick_repr(self, tmp_path):
        path = _write(tmp_path, "x = 1\ny = `x`\n")
        assert detect_runtime(path) == RuntimeTag.PYTHON2

    def test_python2_unicode_raw_literal(self, tmp_path):
        path = _write(tmp_path, "pattern = ur'\\d+'\n")
        assert detect_runtime(path) == RuntimeTag.PYTHON2

    def test_latin1_source_is_decoded(self, tmp_path):
        """Test non-UTF-8 text falls back to latin-1 instead of failing."""
        path = _write(tmp_path, "name = 'caf\xe9'\nprint name\n".encode("latin-1"), mode="wb")
        assert detect_runtime(path) == RuntimeTag.PYTHON2

    def test_empty_file_is_python3(self, tmp_path):
        path = _write(tmp_path, "")
        assert detect_runtime(path) == RuntimeTag.PYTHON3

    def test_binary_file_raises(self, tmp_path):
        path = _write(tmp_path, b"\x7fELF\x00\x01\x02", name="app", mode="wb")
        with pytest.raises(DetectionError):
            detect_runtime(path)

    def test_unreadable_path_raises(self, tmp_path):
        with pytest.raises(DetectionError):
            detect_runtime(tmp_path)  # a directory


class TestRuntimeTable:
    """Test the tag -> executable table."""

    def test_table_is_exhaustive(self):
        assert set(RUNTIMES) == set(RuntimeTag)

    @pytest.mark.parametrize(
        "tag,executable",
        [("Python2", "python2"), ("Python3", "python3"), ("Unknown", "python")],
    )
    def test_executables(self, tag, executable):
        assert get_runtime_executable(tag) == executable

    def test_unrecognised_tag_falls_back(self):
        """Test stale or foreign tags map to the generic default."""
        assert parse_runtime_tag("Python4") == RuntimeTag.UNKNOWN
        assert get_runtime_executable("Python4") == "python"

    def test_parse_accepts_enum(self):
        assert parse_runtime_tag(RuntimeTag.PYTHON2) is RuntimeTag.PYTHON2
