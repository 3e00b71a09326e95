"""Runtime version detection for container scripts.

Classifies a script as Python 2 or Python 3 once, at container creation.
The resulting tag is stored verbatim and never re-derived.
"""

import io
import re
import tokenize
from pathlib import Path
from typing import Union

import structlog

from ..config.runtimes import RuntimeTag
from ..models import DetectionError

logger = structlog.get_logger(__name__)

_SHEBANG_RE = re.compile(r"^#!.*\bpython([23])?(?:\.\d+)?\b")

# Constructs that are syntax errors in Python 3 but valid Python 2
_PY2_MARKERS = [
    re.compile(r"^\s*print\s+[^\s(=]", re.MULTILINE),  # print statement
    re.compile(r"^\s*print\s*$", re.MULTILINE),  # bare print
    re.compile(r"^\s*exec\s+[\"'\w]", re.MULTILINE),  # exec statement
    re.compile(r"^\s*except\s+[\w.]+\s*,\s*\w+\s*:", re.MULTILINE),  # except X, e:
    re.compile(r"\braise\s+[\w.]+\s*,\s*"),  # raise X, "msg"
    re.compile(r"`[^`\n]+`"),  # backtick repr
    re.compile(r"<>"),  # old inequality
    re.compile(r"\bur[\"']", re.IGNORECASE),  # ur"" literals
    re.compile(r"(?<![\w.])0[0-7]+\b"),  # 0777 octal literals
]

_STRING_BODY_TYPES = {
    getattr(tokenize, name)
    for name in ("FSTRING_MIDDLE", "TSTRING_MIDDLE")
    if hasattr(tokenize, name)
}


def _read_source(path: Path) -> str:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DetectionError(str(path), f"cannot read file: {e}") from e

    if b"\x00" in data:
        raise DetectionError(str(path), "file is not a text script")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        # Python 2 sources commonly carry latin-1 without a coding cookie
        return data.decode("latin-1")


def _string_body_offset(literal: str) -> int:
    """Index just past the prefix and first quote of a string literal."""
    return min(i for i, ch in enumerate(literal) if ch in "'\"") + 1


def _code_only(source: str) -> str:
    """Blank out comments and string contents, keeping line structure.

    String prefixes and opening quotes survive so that markers such as
    `ur"..."` or `print "..."` still match. Tokenizing stops at the first
    error and the rest of the source is left as it is.
    """
    starts = [0]
    for line in io.StringIO(source).readlines():
        starts.append(starts[-1] + len(line))

    def offset(pos):
        row, col = pos
        return starts[row - 1] + col

    spans = []
    try:
        for tok in tokenize.generate_tokens(io.StringIO(source).readline):
            if tok.type == tokenize.COMMENT or tok.type in _STRING_BODY_TYPES:
                spans.append((offset(tok.start), offset(tok.end)))
            elif tok.type == tokenize.STRING:
                start = offset(tok.start) + _string_body_offset(tok.string)
                spans.append((start, offset(tok.end)))
    except (tokenize.TokenError, SyntaxError) as e:
        logger.debug("Tokenizing stopped early", error=str(e))

    chars = list(source)
    for start, end in spans:
        for i in range(start, min(end, len(chars))):
            if chars[i] != "\n":
                chars[i] = " "
    return "".join(chars)


def detect_runtime(script_path: Union[str, Path]) -> RuntimeTag:
    """Classify a script's runtime version.

    Args:
        script_path: Path to the entry-point script

    Returns:
        RuntimeTag.PYTHON2, RuntimeTag.PYTHON3 or RuntimeTag.UNKNOWN

    Raises:
        DetectionError: if the script cannot be read as text
    """
    path = Path(script_path)
    source = _read_source(path)

    first_line = source.split("\n", 1)[0]
    match = _SHEBANG_RE.match(first_line)
    if match and match.group(1):
        tag = RuntimeTag.PYTHON2 if match.group(1) == "2" else RuntimeTag.PYTHON3
        logger.debug("Runtime detected from shebang", script=str(path), runtime=tag.value)
        return tag

    try:
        compile(source, str(path), "exec", dont_inherit=True)
    except SyntaxError as e:
        code = _code_only(source)
        if any(marker.search(code) for marker in _PY2_MARKERS):
            logger.debug("Runtime detected from Python 2 syntax", script=str(path))
            return RuntimeTag.PYTHON2
        logger.info(
            "Script does not parse as Python 2 or 3, using default runtime",
            script=str(path),
            error=str(e),
        )
        return RuntimeTag.UNKNOWN
    except ValueError as e:
        # compile() rejects sources containing null bytes
        raise DetectionError(str(path), str(e)) from e

    return RuntimeTag.PYTHON3
