"""Markdown file I/O.

INVARIANT: Files are truth. Every operation re-reads the file and
writes the whole document back; nothing is cached between commands.
The editor only ever sees ``\\n`` line endings; a file written with
``\\r\\n`` gets them back on write.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

CRLF = "\r\n"


@dataclass(frozen=True)
class Document:
    """File content normalised to ``\\n``, plus the file's own line ending."""

    content: str
    newline: str = "\n"


def read_document(path: Path) -> Document:
    """Read *path* as UTF-8, remembering whether it uses ``\\r\\n``.

    Raises:
        OSError: The file cannot be read.
        UnicodeDecodeError: The file is not valid UTF-8.
    """
    with path.open(encoding="utf-8", newline="") as fh:
        raw = fh.read()
    if CRLF in raw:
        return Document(raw.replace(CRLF, "\n"), CRLF)
    return Document(raw)


def write_document(path: Path, document: Document) -> None:
    path.write_text(document.content, encoding="utf-8", newline=document.newline)
