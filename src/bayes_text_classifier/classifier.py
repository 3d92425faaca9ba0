"""Incremental multinomial Naive Bayes text classifier.

The classifier learns one ``(text, category)`` example at a time and can be
queried at any point in between. It keeps raw counters only (see
:mod:`bayes_text_classifier.state`); probabilities are derived on demand:

- prior: ``P(C) = docCount[C] / totalDocuments``
- likelihood (Laplace smoothing):
  ``P(w|C) = (count(w, C) + 1) / (wordCount[C] + |V|)``
- score: ``log P(C) + sum(freq(w) * log P(w|C))`` over the query's tokens

Scores are log-probabilities, so they are always <= 0 under the default
prior and only their ordering is meaningful. Working in log space keeps
long documents from underflowing to zero.

Example::

    classifier = NaiveBayesClassifier()
    classifier.learn("amazing, awesome movie!! Yeah!!", "positive")
    classifier.learn("terrible, boring thing. Awful!!", "negative")

    classifier.categorize("awesome, cool, amazing!! Yay.")  # "positive"

    # Persist and restore
    classifier.save("model.json")
    restored = NaiveBayesClassifier.load("model.json")

The classifier does no locking. Callers sharing one instance between
threads must serialize ``learn`` against every other call.
"""

from __future__ import annotations

import json
import logging
import math
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from .config import ClassifierOptions, PriorPolicy
from .exceptions import ConfigurationError, NotTrainedError, SnapshotValidationError
from .frequency import frequency_table
from .serializer import parse_json, validate_snapshot
from .state import ClassifierState
from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CategoryScore:
    """Log-probability score of one category for a text."""

    category: str
    probability: float

    def to_dict(self) -> dict:
        return {"category": self.category, "probability": self.probability}


@dataclass
class ClassifierStats:
    """Summary of what a classifier has learned.

    Attributes:
        total_documents: Number of learned documents.
        vocabulary_size: Number of distinct tokens seen.
        categories: Per-category ``{"documents": n, "words": n}`` counts.
    """

    total_documents: int = 0
    vocabulary_size: int = 0
    categories: dict[str, dict[str, int]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_documents": self.total_documents,
            "vocabulary_size": self.vocabulary_size,
            "categories": self.categories,
        }


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------

def _log(value: float) -> float:
    return math.log(value) if value > 0 else -math.inf


def _check_category(name: object) -> None:
    # Snapshot keys are JSON object keys, so labels must already be strings
    if not isinstance(name, str):
        raise TypeError(f"Category must be a string, got {type(name).__name__}")


class NaiveBayesClassifier:
    """Naive Bayes text classifier with Laplace smoothing.

    Args:
        options: :class:`ClassifierOptions`, a mapping of options
            (``tokenizer``, ``vocabularyLimit``, ``prior``) or ``None`` for
            the defaults.

    Raises:
        ConfigurationError: If ``options`` is malformed.
    """

    def __init__(self, options: Union[ClassifierOptions, Mapping, None] = None) -> None:
        self._options = ClassifierOptions.coerce(options)
        self._tokenizer = self._options.resolved_tokenizer
        self._state = ClassifierState()

    def __repr__(self) -> str:
        return (
            f"NaiveBayesClassifier(categories={len(self._state.categories)}, "
            f"documents={self._state.total_documents}, "
            f"vocabulary={self._state.vocabulary_size})"
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def options(self) -> ClassifierOptions:
        """Options captured at construction."""
        return self._options

    @property
    def tokenizer(self) -> Tokenizer:
        """The tokenizer used for training and inference."""
        return self._tokenizer

    @property
    def vocabulary_limit(self) -> int:
        return self._options.vocabulary_limit

    @property
    def state(self) -> ClassifierState:
        """The model counters. Treat as read-only; use :meth:`learn`."""
        return self._state

    @property
    def categories(self) -> list[str]:
        """Known categories, in registration order."""
        return list(self._state.categories)

    @property
    def total_documents(self) -> int:
        return self._state.total_documents

    @property
    def vocabulary_size(self) -> int:
        return self._state.vocabulary_size

    @property
    def is_trained(self) -> bool:
        """Whether at least one document has been learned."""
        return self._state.total_documents > 0

    @property
    def stats(self) -> ClassifierStats:
        """Document and word counts per category."""
        state = self._state
        return ClassifierStats(
            total_documents=state.total_documents,
            vocabulary_size=state.vocabulary_size,
            categories={
                category: {
                    "documents": state.doc_count[category],
                    "words": state.word_count[category],
                }
                for category in state.categories
            },
        )

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def initialize_category(self, name: str) -> "NaiveBayesClassifier":
        """Register a category without learning a document for it."""
        _check_category(name)
        self._state.initialize_category(name)
        return self

    def frequency_table(self, tokens: Iterable[str]) -> dict[str, int]:
        """Token counts of one document, honoring the vocabulary limit."""
        return frequency_table(tokens, self._options.vocabulary_limit)

    def learn(self, text: str, category: str) -> "NaiveBayesClassifier":
        """Train on one example: ``text`` belongs to ``category``.

        Args:
            text: Document text. Empty text still counts as a document.
            category: Category label.

        Returns:
            Self (for method chaining).

        Raises:
            TypeError: If ``category`` is not a string.
        """
        _check_category(category)

        table = self.frequency_table(self._tokenizer(text))
        self._state.record_document(category, table)
        return self

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    def token_probability(self, token: str, category: str) -> float:
        """Laplace-smoothed probability of ``token`` given ``category``.

        Unseen tokens get ``1 / (wordCount[C] + |V|)``, which is never zero.

        Raises:
            ValueError: If ``category`` is unknown.
        """
        if category not in self._state.doc_count:
            raise ValueError(f"Unknown category: {category!r}. Known: {self._state.categories}")
        return self._token_probability(token, category)

    def _token_probability(self, token: str, category: str) -> float:
        state = self._state
        denominator = state.word_count[category] + state.vocabulary_size
        if denominator == 0:
            # Nothing has been counted yet; every token is equally (un)likely
            return 1.0
        return (state.token_count(token, category) + 1) / denominator

    def _prior_denominator(self) -> int:
        if (
            self._options.prior is PriorPolicy.VOCABULARY_LIMIT
            and self._options.vocabulary_limit > 0
        ):
            return self._options.vocabulary_limit
        return self._state.total_documents

    def probabilities(self, text: str) -> list[CategoryScore]:
        """Score ``text`` against every known category.

        Args:
            text: Text to classify.

        Returns:
            One :class:`CategoryScore` per category, highest log-probability
            first. Categories with equal scores keep registration order.
            Empty if no category is known.

        Raises:
            NotTrainedError: If categories exist but no document has been
                learned yet.
        """
        state = self._state
        if not state.categories:
            return []
        if state.total_documents == 0:
            raise NotTrainedError("Classifier has not learned any document. Call learn() first.")

        table = self.frequency_table(self._tokenizer(text))
        denominator = self._prior_denominator()

        scores = []
        for category in state.categories:
            log_probability = _log(state.doc_count[category] / denominator)
            for token, frequency in table.items():
                log_probability += frequency * math.log(self._token_probability(token, category))
            scores.append(CategoryScore(category, log_probability))

        scores.sort(key=lambda s: s.probability, reverse=True)
        return scores

    def categorize(self, text: str, probability: bool = False) -> Any:
        """Return the most likely category of ``text``.

        Args:
            text: Text to classify.
            probability: Return the top :class:`CategoryScore` instead of
                the bare label.

        Raises:
            NotTrainedError: If nothing has been learned.
        """
        ranking = self.probabilities(text)
        if not ranking:
            raise NotTrainedError("Classifier has no categories. Call learn() first.")
        return ranking[0] if probability else ranking[0].category

    def posterior(self, text: str) -> dict[str, float]:
        """Normalized class probabilities for ``text`` (summing to 1).

        Uses log-sum-exp over :meth:`probabilities`. Handy for display;
        ranking should rely on :meth:`probabilities`.
        """
        ranking = self.probabilities(text)
        if not ranking:
            return {}

        max_score = ranking[0].probability
        if max_score == -math.inf:
            return {s.category: 1 / len(ranking) for s in ranking}

        exp_scores = {s.category: math.exp(s.probability - max_score) for s in ranking}
        total = sum(exp_scores.values())
        return {category: score / total for category, score in exp_scores.items()}

    def most_informative_tokens(
        self,
        category: str,
        top_n: int = 20,
    ) -> list[tuple[str, float]]:
        """Return the tokens that most favor ``category``.

        Scores each vocabulary token by the log-likelihood ratio of the
        token under ``category`` against the mean over all other
        categories.

        Args:
            category: Target category.
            top_n: Number of tokens to return.

        Returns:
            List of ``(token, log_likelihood_ratio)`` tuples, most
            discriminative first.

        Raises:
            ValueError: If ``category`` is unknown.
        """
        state = self._state
        if category not in state.doc_count:
            raise ValueError(f"Unknown category: {category!r}. Known: {state.categories}")

        others = [c for c in state.categories if c != category]
        ratios: list[tuple[str, float]] = []
        for token in sorted(state.vocabulary):
            target = math.log(self._token_probability(token, category))
            if others:
                other_lps = [math.log(self._token_probability(token, c)) for c in others]
                target -= sum(other_lps) / len(other_lps)
            ratios.append((token, round(target, 4)))

        ratios.sort(key=lambda x: x[1], reverse=True)
        return ratios[:top_n]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Export the classifier state as a JSON-compatible snapshot."""
        snapshot = self._state.to_dict()
        snapshot["options"] = self._options.to_dict()
        return snapshot

    @classmethod
    def from_dict(
        cls,
        snapshot: Mapping,
        tokenizer: Optional[Tokenizer] = None,
    ) -> "NaiveBayesClassifier":
        """Create a classifier from a snapshot made by :meth:`to_dict`.

        Args:
            snapshot: Exported state.
            tokenizer: Tokenizer to use; snapshots never contain one. When
                omitted, a ``tokenizer`` entry of the snapshot's options
                is used if present, else the default tokenizer.

        Raises:
            SnapshotValidationError: If a recognized field is missing or
                malformed. No classifier is created in that case.
        """
        data = validate_snapshot(snapshot)

        try:
            options = ClassifierOptions.coerce(data["options"])
        except ConfigurationError as e:
            raise SnapshotValidationError(
                f"Snapshot field 'options' is invalid: {e}", field="options"
            ) from e
        if tokenizer is not None:
            options = options.replace_tokenizer(tokenizer)

        classifier = cls(options)
        classifier._state = ClassifierState.from_dict(data)
        logger.debug(f"Imported {classifier!r}")
        return classifier

    def to_json(self, pretty: bool = False) -> str:
        """Dump the snapshot as a JSON string."""
        return json.dumps(self.to_dict(), indent=2 if pretty else None, ensure_ascii=False)

    @classmethod
    def from_json(
        cls,
        data: Union[str, bytes, Mapping],
        tokenizer: Optional[Tokenizer] = None,
    ) -> "NaiveBayesClassifier":
        """Create a classifier from a JSON string (or an already parsed mapping).

        Raises:
            SnapshotValidationError: If ``data`` is not valid JSON or not a
                complete snapshot.
        """
        return cls.from_dict(parse_json(data), tokenizer=tokenizer)

    def save(self, path: Union[str, Path], pretty: bool = False) -> None:
        """Save the snapshot to a UTF-8 JSON file, creating parent directories.

        The file is replaced atomically: if serialization or writing fails,
        a previously saved model at ``path`` is left untouched.
        """
        path = Path(path)
        content = self.to_json(pretty=pretty)
        path.parent.mkdir(parents=True, exist_ok=True)

        partial = path.with_name(f".{path.name}.partial")
        try:
            with open(partial, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(partial, path)
        except OSError:
            partial.unlink(missing_ok=True)
            raise
        logger.debug(f"Saved {self!r} to {path}")

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        tokenizer: Optional[Tokenizer] = None,
    ) -> "NaiveBayesClassifier":
        """Load a classifier saved with :meth:`save`.

        Raises:
            SnapshotValidationError: If the file is not UTF-8 JSON holding a
                complete snapshot.
        """
        with open(path, "rb") as f:
            return cls.from_json(f.read(), tokenizer=tokenizer)
