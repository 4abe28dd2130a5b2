"""
Parsers for git plumbing output.

Each function here turns raw text printed by git into domain objects.
Nothing in this module runs git; the loader captures the output and
hands it over line by line.
"""

from __future__ import annotations

import re
from typing import Iterator, Optional

from .domain import ChangedFile, ChangeType, Commit
from .errors import MalformedLineError, UnrecognizedChangeTypeError

# Separates the hash fields from the summary in the history format.
SUMMARY_DELIMITER = "|"

# `git log` format producing one line per commit:
# "<hash> <short hash> <parent hashes...>|<summary>"
HISTORY_FORMAT = f"%H %h %P{SUMMARY_DELIMITER}%s"

_TREE_TAG = "tree "

# "<status><whitespace><paths>", e.g. "M\tfoo.py" or "R097\told\tnew".
_NAME_STATUS_RE = re.compile(r"^(?P<status>\S+)\s+(?P<paths>.*)$")

# A/M/D are bare letters; renames carry a similarity score.
_STATUS_FIELD_RE = re.compile(r"^(?:[AMD]|R[0-9]+)$")

_OCTAL_ESCAPE_RE = re.compile(r"[0-3][0-7]{2}")

# Single-character escapes used by git when it C-quotes a path.
_C_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
    "\\": 0x5C,
    '"': 0x22,
}


def iter_lines(output: str) -> Iterator[str]:
    """
    Yield the non-empty lines of a command's output.
    """

    for line in output.split("\n"):
        if line:
            yield line


def parse_commit_line(line: str) -> Commit:
    """
    Parse one line of history output into a Commit.

    The line is split at the first delimiter. Hashes never contain the
    delimiter, so a summary that does is still kept verbatim.
    """

    index = line.find(SUMMARY_DELIMITER)
    if index < 0:
        raise MalformedLineError(line, f"missing {SUMMARY_DELIMITER!r} delimiter")

    fields = line[:index].split()
    if len(fields) < 2:
        raise MalformedLineError(line, "expected a hash and a short hash")

    commit_hash, short_hash, *parent_hashes = fields
    return Commit(
        hash=commit_hash,
        short_hash=short_hash,
        summary=line[index + 1 :],
        parent_hashes=tuple(parent_hashes),
    )


def parse_name_status_line(line: str) -> ChangedFile:
    """
    Classify one line of `git diff --name-status` output.

    Renames carry a similarity score on the status code and list both
    the source and the destination; only the destination is kept.
    Paths git printed in C-quoted form are unquoted.
    """

    if not line:
        raise MalformedLineError(line, "empty name-status line")

    code = line[0]
    try:
        change_type = ChangeType(code)
    except ValueError:
        raise UnrecognizedChangeTypeError(code, line) from None

    match = _NAME_STATUS_RE.match(line)
    if not match or not match.group("paths").strip():
        raise MalformedLineError(line, "missing path")
    if not _STATUS_FIELD_RE.match(match.group("status")):
        raise MalformedLineError(line, f"invalid status field {match.group('status')!r}")

    paths = match.group("paths")
    if change_type is ChangeType.RENAMED:
        path = _rename_destination(line, paths)
    else:
        path = paths.strip()

    return ChangedFile(path=unquote_path(path, line), change_type=change_type)


def _rename_destination(line: str, paths: str) -> str:
    fields = paths.split("\t")
    if len(fields) == 1:
        # Space separated; only unambiguous when neither path has spaces.
        fields = paths.split()
    if len(fields) != 2 or not fields[1].strip():
        raise MalformedLineError(line, "rename needs a source and a destination path")
    return fields[1].strip()


def unquote_path(path: str, line: str = "") -> str:
    """
    Undo git's C-style quoting of a path.

    git wraps a path in double quotes when it contains a quote, a
    backslash or a control character (and, unless core.quotePath is
    off, any non-ASCII byte). Escapes are either a single character
    after a backslash or three octal digits naming one byte; the bytes
    are decoded as UTF-8. Paths that are not quoted are returned as is.
    """

    if not path.startswith('"'):
        return path
    if len(path) < 2 or not path.endswith('"'):
        raise MalformedLineError(line or path, "unterminated quoted path")

    body = path[1:-1]
    raw = bytearray()
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\":
            raw += char.encode("utf-8")
            i += 1
            continue

        escape = body[i + 1 : i + 2]
        if escape in _C_ESCAPES:
            raw.append(_C_ESCAPES[escape])
            i += 2
        elif _OCTAL_ESCAPE_RE.match(body, i + 1):
            raw.append(int(body[i + 1 : i + 4], 8))
            i += 4
        else:
            raise MalformedLineError(line or path, f"invalid escape in quoted path at offset {i}")

    return raw.decode("utf-8", errors="surrogateescape")


def find_tree_hash(object_text: str) -> Optional[str]:
    """
    Return the tree hash from `git cat-file -p <commit>` output.

    Only the header block (everything before the first blank line) is
    searched, so a commit message line starting with "tree " is never
    mistaken for the header. The first tree line wins.
    """

    for line in object_text.split("\n"):
        if not line:
            break
        if line.startswith(_TREE_TAG):
            fields = line.split()
            if len(fields) >= 2:
                return fields[1]
    return None
