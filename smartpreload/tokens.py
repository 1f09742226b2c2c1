"""
smartpreload.tokens — Token estimation and small formatting helpers.
"""
import io
import math
import sys
from functools import lru_cache

import tiktoken

ENCODING_NAME = "cl100k_base"
CHARS_PER_TOKEN = 4


def _is_utf8(stream) -> bool:
    return (getattr(stream, "encoding", None) or "").lower().replace("-", "") == "utf8"


def windows_utf8_io():
    """Fix Windows cp1252 encoding for stdout/stderr. Call once at script top."""
    if not _is_utf8(sys.stdout) and hasattr(sys.stdout, "buffer"):
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')
    if not _is_utf8(sys.stderr) and hasattr(sys.stderr, "buffer"):
        sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8', errors='replace')


@lru_cache(maxsize=1)
def _encoding():
    """Load the BPE encoding once. None if it can't be fetched (offline)."""
    try:
        return tiktoken.get_encoding(ENCODING_NAME)
    except Exception as e:
        print(f"[smartpreload] WARN:tiktoken encoding unavailable ({e}), "
              f"estimating {CHARS_PER_TOKEN} chars/token", file=sys.stderr)
        return None


def estimate_tokens(text: str) -> int:
    """
    Estimate BPE token count for ``text``.

    Uses tiktoken's cl100k_base encoding; when the encoding can't be loaded
    falls back to one token per four characters (mixed English/CJK notes).
    """
    if not text:
        return 0
    enc = _encoding()
    if enc is not None:
        return len(enc.encode(text, disallowed_special=()))
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def format_bytes(size: int) -> str:
    """Human-readable byte count: 0 B, 512.00 B, 1.50 KB, 2.00 MB."""
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{value:.2f} {units[i]}"
