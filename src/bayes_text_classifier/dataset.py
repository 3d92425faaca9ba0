"""Reading labelled examples from disk.

Two line-oriented formats are supported, selected by file suffix:

- ``.jsonl`` / ``.ndjson``: one JSON object per line with ``text`` and
  ``category`` keys
- anything else: tab-separated ``category<TAB>text`` lines

Blank lines and lines starting with ``#`` (TSV only) are skipped.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .exceptions import NaiveBayesError

_JSONL_SUFFIXES = frozenset({".jsonl", ".ndjson"})


class DatasetError(NaiveBayesError, ValueError):
    """Raised for a malformed line in an examples file."""


@dataclass(frozen=True)
class Example:
    """One labelled training or evaluation document."""

    text: str
    category: str


def iter_examples(path: Union[str, Path]) -> Iterator[Example]:
    """Yield the examples stored in ``path``.

    Raises:
        DatasetError: On a malformed or non-UTF-8 line, naming file and
            line number.
    """
    path = Path(path)
    is_jsonl = path.suffix.lower() in _JSONL_SUFFIXES

    with open(path, "rb") as f:
        for lineno, raw in enumerate(f, 1):
            try:
                line = raw.decode("utf-8").rstrip("\r\n")
            except UnicodeDecodeError as e:
                raise DatasetError(f"{path}:{lineno}: not valid UTF-8 ({e.reason})") from e
            if not line.strip():
                continue
            if is_jsonl:
                yield _parse_jsonl(line, path, lineno)
            elif not line.startswith("#"):
                yield _parse_tsv(line, path, lineno)


def load_examples(path: Union[str, Path]) -> list[Example]:
    """Read every example of ``path`` into a list."""
    return list(iter_examples(path))


def _parse_tsv(line: str, path: Path, lineno: int) -> Example:
    category, sep, text = line.partition("\t")
    if not sep or not category.strip():
        raise DatasetError(f"{path}:{lineno}: expected 'category<TAB>text'")
    return Example(text=text, category=category.strip())


def _parse_jsonl(line: str, path: Path, lineno: int) -> Example:
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise DatasetError(f"{path}:{lineno}: invalid JSON ({e.msg})") from e

    if not isinstance(record, dict) or "text" not in record or "category" not in record:
        raise DatasetError(f"{path}:{lineno}: expected an object with 'text' and 'category'")
    if record["category"] is None:
        raise DatasetError(f"{path}:{lineno}: 'category' must not be null")

    return Example(text=str(record["text"] or ""), category=str(record["category"]))
