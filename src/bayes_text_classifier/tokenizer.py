"""Default tokenization policy.

The classifier only depends on the tokenizer contract: a callable mapping a
string to a sequence of string tokens, deterministic for a given input and
used identically for training and inference. This module ships the default
regex-based policy:

- characters outside the alphabet (Latin letters, optionally Cyrillic
  letters, CJK ideographs, ASCII digits, underscore) become whitespace
- every CJK ideograph is emitted as a token of its own
- the remaining text is split on whitespace runs

Any other callable with the same contract can be passed as the
``tokenizer`` option, e.g. a wrapper around a word segmentation library for
Chinese text.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

Tokenizer = Callable[[str], Sequence[str]]

# ---------------------------------------------------------------------------
# Character classes
# ---------------------------------------------------------------------------

_LATIN = "a-zA-Z"
_CYRILLIC = "\u0400-\u04ff"
_CJK = "\u4e00-\u9fa5"
_DIGITS = "0-9"
_UNDERSCORE = "_"

_CJK_RE = re.compile(f"([{_CJK}])")


@dataclass(frozen=True)
class TokenizerConfig:
    """Configuration for :class:`RegexTokenizer`.

    Attributes:
        cyrillic: Keep Cyrillic letters (otherwise they are stripped).
        split_cjk: Emit each CJK ideograph as its own token.
        lowercase: Lowercase the text before splitting.
    """

    cyrillic: bool = True
    split_cjk: bool = True
    lowercase: bool = False


class RegexTokenizer:
    """Regex tokenizer for Latin, Cyrillic and CJK text.

    Usage::

        >>> tokenize = RegexTokenizer()
        >>> tokenize("Hello, 世界!")
        ['Hello', '世', '界']
    """

    def __init__(self, config: TokenizerConfig | None = None) -> None:
        self.config = config or TokenizerConfig()

        alphabet = _LATIN + _DIGITS + _UNDERSCORE + _CJK
        if self.config.cyrillic:
            alphabet += _CYRILLIC
        self._strip_re = re.compile(f"[^{alphabet}\\s]")

    def __call__(self, text: str) -> list[str]:
        if text is None:
            return []
        if not isinstance(text, str):
            text = str(text)

        if self.config.lowercase:
            text = text.lower()

        text = self._strip_re.sub(" ", text)
        if self.config.split_cjk:
            text = _CJK_RE.sub(r" \1 ", text)

        return text.split()

    def __repr__(self) -> str:
        return f"RegexTokenizer({self.config!r})"


default_tokenizer: Tokenizer = RegexTokenizer()
