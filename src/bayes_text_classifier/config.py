"""Classifier configuration.

Options are captured once, at construction time, in an immutable
:class:`ClassifierOptions`. Only their data part (vocabulary limit and
prior policy) is persisted with a snapshot; the tokenizer is a callable
and has to be supplied again when a model is loaded.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .exceptions import ConfigurationError
from .tokenizer import Tokenizer, default_tokenizer


class PriorPolicy(str, Enum):
    """Normalization of the categorical prior.

    ``DOCUMENTS`` divides a category's document count by the total number
    of learned documents. ``VOCABULARY_LIMIT`` divides it by the configured
    vocabulary limit instead, and behaves like ``DOCUMENTS`` when no limit
    is set.
    """

    DOCUMENTS = "documents"
    VOCABULARY_LIMIT = "vocabulary-limit"


# Accepted mapping keys and the field each one sets
_OPTION_KEYS = {
    "tokenizer": "tokenizer",
    "vocabularyLimit": "vocabulary_limit",
    "vocabulary_limit": "vocabulary_limit",
    "prior": "prior",
}


@dataclass(frozen=True)
class ClassifierOptions:
    """Options of a :class:`~bayes_text_classifier.NaiveBayesClassifier`.

    Args:
        tokenizer: Callable turning text into tokens. ``None`` selects the
            built-in regex tokenizer.
        vocabulary_limit: Maximum number of token occurrences accounted
            per document (``0`` means unlimited).
        prior: How the categorical prior is normalized.

    Raises:
        ConfigurationError: If any option has the wrong type or value.
    """

    tokenizer: Optional[Tokenizer] = None
    vocabulary_limit: int = 0
    prior: PriorPolicy = PriorPolicy.DOCUMENTS

    def __post_init__(self) -> None:
        if self.tokenizer is not None and not callable(self.tokenizer):
            raise ConfigurationError(
                f"tokenizer must be callable, got {type(self.tokenizer).__name__}"
            )

        limit = self.vocabulary_limit
        if limit is None:
            object.__setattr__(self, "vocabulary_limit", 0)
        elif isinstance(limit, bool) or not isinstance(limit, int):
            raise ConfigurationError(
                f"vocabulary_limit must be a non-negative integer, got {limit!r}"
            )
        elif limit < 0:
            raise ConfigurationError(
                f"vocabulary_limit must be a non-negative integer, got {limit}"
            )

        try:
            object.__setattr__(self, "prior", PriorPolicy(self.prior))
        except ValueError:
            known = ", ".join(p.value for p in PriorPolicy)
            raise ConfigurationError(
                f"Unknown prior policy: {self.prior!r}. Known: {known}"
            ) from None

    @property
    def resolved_tokenizer(self) -> Tokenizer:
        """The tokenizer in effect."""
        return self.tokenizer or default_tokenizer

    @classmethod
    def coerce(cls, value: Any) -> "ClassifierOptions":
        """Build options from ``None``, an instance, or a mapping.

        Mapping keys may use the persisted camelCase spelling
        (``vocabularyLimit``) or the Python one (``vocabulary_limit``).

        Raises:
            ConfigurationError: For any other value, unknown keys, or an
                option given under both spellings.
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise ConfigurationError(
                f"Invalid options: {value!r}. Pass a mapping or ClassifierOptions."
            )

        unknown = sorted(str(k) for k in value if k not in _OPTION_KEYS)
        if unknown:
            raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for key, val in value.items():
            name = _OPTION_KEYS[key]
            if name in kwargs:
                raise ConfigurationError(f"Option {name} given more than once (as {key!r})")
            kwargs[name] = val
        return cls(**kwargs)

    def replace_tokenizer(self, tokenizer: Optional[Tokenizer]) -> "ClassifierOptions":
        """Return a copy with a different tokenizer."""
        return ClassifierOptions(
            tokenizer=tokenizer,
            vocabulary_limit=self.vocabulary_limit,
            prior=self.prior,
        )

    def to_dict(self) -> dict:
        """Persisted representation (the tokenizer is not data)."""
        return {
            "vocabularyLimit": self.vocabulary_limit,
            "prior": self.prior.value,
        }
