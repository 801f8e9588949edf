"""Lookup log file acquisition.

Reads the exported log from disk (or from uploaded bytes) into one string.
I/O problems surface as LookupFileError so callers can tell a broken file
apart from a file that simply contains no lookups.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

log = logging.getLogger("recibowatch.lookups.reader")

SUPPORTED_EXTS = {".txt"}

# Exports come from Windows workstations as often as from the server
_ENCODINGS = ["utf-8-sig", "cp1252", "latin-1"]


class LookupFileError(RuntimeError):
    pass


def decode_upload(content: bytes) -> str:
    """Decode raw bytes, trying UTF-8 first, then Windows/Latin encodings."""
    for enc in _ENCODINGS:
        try:
            return content.decode(enc)
        except UnicodeDecodeError:
            continue
    # latin-1 maps every byte, so this is unreachable in practice
    raise LookupFileError("Could not decode lookup log")


def check_extension(file_name: str) -> None:
    ext = Path(file_name or "").suffix.lower()
    if ext not in SUPPORTED_EXTS:
        raise LookupFileError(f"Unsupported file type: {ext or '(none)'} (expected a .txt file)")


def read_lookup_file(path: Union[str, Path], encoding: str = "auto") -> str:
    """Read a lookup log file.

    Args:
        path: Path to a ``.txt`` export.
        encoding: Explicit encoding, or 'auto' to try utf-8, cp1252, latin-1.

    Raises:
        LookupFileError: missing, unreadable or non-text file.
    """
    path = Path(path)
    check_extension(path.name)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise LookupFileError(f"Cannot read {path}: {e}") from e

    if encoding != "auto":
        try:
            return content.decode(encoding)
        except (LookupError, UnicodeDecodeError) as e:
            raise LookupFileError(f"Cannot decode {path} as {encoding}: {e}") from e

    text = decode_upload(content)
    log.debug("Read %d characters from %s", len(text), path)
    return text
