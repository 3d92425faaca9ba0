"""Mutable model state of the classifier.

:class:`ClassifierState` owns every counter the model is made of. It is
changed only through :meth:`ClassifierState.initialize_category` and
:meth:`ClassifierState.record_document`, which keep the following
invariants:

- ``sum(doc_count.values()) == total_documents``
- the vocabulary is exactly the union of the keys of all per-category
  word frequency tables
- ``word_count[c] == sum(word_frequency_count[c].values())``

Nothing is ever removed: categories, tokens and counts only grow.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class ClassifierState:
    """Counters of a Naive Bayes text classifier.

    Attributes:
        categories: Known category labels, in registration order.
        doc_count: Number of learned documents per category.
        total_documents: Number of learned documents overall.
        vocabulary: Distinct tokens seen in any learned document.
        word_count: Total token occurrences attributed to each category.
        word_frequency_count: Per-category token occurrence counts.
    """

    categories: list[str] = field(default_factory=list)
    doc_count: dict[str, int] = field(default_factory=dict)
    total_documents: int = 0
    vocabulary: set[str] = field(default_factory=set)
    word_count: dict[str, int] = field(default_factory=dict)
    word_frequency_count: dict[str, dict[str, int]] = field(default_factory=dict)

    @property
    def vocabulary_size(self) -> int:
        """Number of distinct tokens in the vocabulary."""
        return len(self.vocabulary)

    def initialize_category(self, name: str) -> None:
        """Register ``name`` with zeroed counters, unless already known."""
        if name in self.doc_count:
            return
        self.doc_count[name] = 0
        self.word_count[name] = 0
        self.word_frequency_count[name] = {}
        self.categories.append(name)
        logger.debug(f"Registered category {name!r}")

    def record_document(self, category: str, table: Mapping[str, int]) -> None:
        """Account one learned document of ``category``.

        Args:
            category: Label of the document.
            table: The document's token frequency table.
        """
        self.initialize_category(category)
        self.doc_count[category] += 1
        self.total_documents += 1

        frequencies = self.word_frequency_count[category]
        for token, count in table.items():
            self.vocabulary.add(token)
            frequencies[token] = frequencies.get(token, 0) + count
            self.word_count[category] += count

    def token_count(self, token: str, category: str) -> int:
        """Occurrences of ``token`` in the training data of ``category``."""
        return self.word_frequency_count[category].get(token, 0)

    # ------------------------------------------------------------------
    # Snapshot fields
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize the counters under their persisted field names."""
        return {
            "categories": list(self.categories),
            "docCount": dict(self.doc_count),
            "totalDocuments": self.total_documents,
            "vocabulary": sorted(self.vocabulary),
            "wordCount": dict(self.word_count),
            "wordFrequencyCount": {
                category: dict(table)
                for category, table in self.word_frequency_count.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "ClassifierState":
        """Rebuild the counters from validated snapshot fields.

        ``categories`` and ``vocabulary`` may be given either as a list or
        as a mapping whose keys are the members (``{"spam": true}``).
        Counters are taken as they are, without recomputation.
        """
        return cls(
            categories=list(data["categories"]),
            doc_count=dict(data["docCount"]),
            total_documents=data["totalDocuments"],
            vocabulary=set(data["vocabulary"]),
            word_count=dict(data["wordCount"]),
            word_frequency_count={
                category: dict(table)
                for category, table in data["wordFrequencyCount"].items()
            },
        )
