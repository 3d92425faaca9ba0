"""Measuring how well a classifier labels held-out text.

Evaluation works on rankings, not bare labels: each document is scored with
:meth:`NaiveBayesClassifier.probabilities`, so a report tells whether the
top category was right and also how far down the ranking the expected
category ended up. Reports keep the model's own per-category training
counts next to the evaluation counts, which makes it easy to spot
categories that are simply under-trained.

Three ways to produce a report:

- :func:`evaluate`: query a trained classifier, never modifying it
- :func:`progressive_validation`: predict each document, then learn it
- :func:`cross_validate`: stratified k-fold, one fresh classifier per fold
"""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional, Union

from .classifier import CategoryScore, NaiveBayesClassifier
from .config import ClassifierOptions
from .exceptions import NotTrainedError


# ---------------------------------------------------------------------------
# Report types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Prediction:
    """The ranking a classifier produced for one labelled document."""

    text: str
    expected: str
    ranking: tuple[CategoryScore, ...] = ()

    @property
    def predicted(self) -> Optional[str]:
        """Top-ranked category, ``None`` if the model knew no category yet."""
        return self.ranking[0].category if self.ranking else None

    @property
    def correct(self) -> bool:
        return self.predicted == self.expected

    @property
    def rank(self) -> Optional[int]:
        """1-based position of the expected category in the ranking.

        ``None`` when the model has never seen the expected category.
        """
        for position, score in enumerate(self.ranking, 1):
            if score.category == self.expected:
                return position
        return None


@dataclass
class CategoryReport:
    """Counts of one category over an evaluation run.

    Attributes:
        category: Category label.
        trained: Documents the model had learned for the category.
        support: Evaluation documents labelled with the category.
        predicted: Evaluation documents ranked first for the category.
        correct: Evaluation documents both labelled and ranked first for it.
    """

    category: str
    trained: int = 0
    support: int = 0
    predicted: int = 0
    correct: int = 0

    @property
    def precision(self) -> float:
        return self.correct / self.predicted if self.predicted else 0.0

    @property
    def recall(self) -> float:
        return self.correct / self.support if self.support else 0.0

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        return 2 * p * r / (p + r) if p + r else 0.0

    def to_dict(self) -> dict:
        return {
            "trained": self.trained,
            "support": self.support,
            "predicted": self.predicted,
            "precision": round(self.precision, 4),
            "recall": round(self.recall, 4),
            "f1": round(self.f1, 4),
        }


@dataclass
class EvaluationReport:
    """Outcome of classifying a set of labelled documents.

    Build one with :meth:`from_predictions`; the aggregate scores are
    derived from :attr:`predictions` and :attr:`categories` on access.
    """

    predictions: list[Prediction] = field(default_factory=list)
    categories: dict[str, CategoryReport] = field(default_factory=dict)
    confusion: dict[str, dict[str, int]] = field(default_factory=dict)

    @classmethod
    def from_predictions(
        cls,
        predictions: Sequence[Prediction],
        trained: Optional[Mapping[str, int]] = None,
    ) -> "EvaluationReport":
        """Tally ``predictions`` into a report.

        Args:
            predictions: One :class:`Prediction` per evaluated document.
            trained: Learned documents per category, usually the model's
                ``doc_count``. Its categories come first in the report, in
                the model's order, followed by labels the model never saw.
        """
        trained = trained or {}
        report = cls(predictions=list(predictions))
        for category, documents in trained.items():
            report.categories[category] = CategoryReport(category, trained=documents)

        for prediction in report.predictions:
            expected = report._category(prediction.expected)
            expected.support += 1

            predicted = prediction.predicted
            if predicted is None:
                continue
            report._category(predicted).predicted += 1
            if prediction.correct:
                expected.correct += 1
            row = report.confusion.setdefault(prediction.expected, {})
            row[predicted] = row.get(predicted, 0) + 1

        return report

    def _category(self, name: str) -> CategoryReport:
        if name not in self.categories:
            self.categories[name] = CategoryReport(name)
        return self.categories[name]

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    @property
    def total(self) -> int:
        return len(self.predictions)

    @property
    def accuracy(self) -> float:
        if not self.predictions:
            return 0.0
        return sum(p.correct for p in self.predictions) / self.total

    def top_k_accuracy(self, k: int) -> float:
        """Share of documents whose expected category ranked within the top ``k``."""
        if not self.predictions:
            return 0.0
        hits = sum(1 for p in self.predictions if p.rank is not None and p.rank <= k)
        return hits / self.total

    @property
    def mean_reciprocal_rank(self) -> float:
        """Mean of ``1 / rank`` of the expected category (0 when unranked)."""
        if not self.predictions:
            return 0.0
        return sum(1 / p.rank for p in self.predictions if p.rank) / self.total

    @property
    def macro_f1(self) -> float:
        scored = [c for c in self.categories.values() if c.support or c.predicted]
        return sum(c.f1 for c in scored) / len(scored) if scored else 0.0

    @property
    def weighted_f1(self) -> float:
        support = sum(c.support for c in self.categories.values())
        if not support:
            return 0.0
        return sum(c.f1 * c.support for c in self.categories.values()) / support

    def to_dict(self) -> dict:
        return {
            "documents": self.total,
            "accuracy": round(self.accuracy, 4),
            "top_2_accuracy": round(self.top_k_accuracy(2), 4),
            "mean_reciprocal_rank": round(self.mean_reciprocal_rank, 4),
            "macro_f1": round(self.macro_f1, 4),
            "weighted_f1": round(self.weighted_f1, 4),
            "categories": {name: c.to_dict() for name, c in self.categories.items()},
            "confusion": self.confusion,
        }

    def summary(self) -> str:
        """Plain-text table of the report."""
        lines = [
            f"Documents: {self.total}",
            f"Accuracy: {self.accuracy:.2%} (top-2: {self.top_k_accuracy(2):.2%})",
            f"Mean reciprocal rank: {self.mean_reciprocal_rank:.4f}",
            f"Macro F1: {self.macro_f1:.4f}",
            "",
            f"{'Category':<20} {'Trained':>8} {'Support':>8} {'Precision':>10} "
            f"{'Recall':>8} {'F1':>8}",
            "-" * 67,
        ]
        for c in self.categories.values():
            lines.append(
                f"{c.category:<20} {c.trained:>8} {c.support:>8} {c.precision:>10.4f} "
                f"{c.recall:>8.4f} {c.f1:>8.4f}"
            )
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def _check_lengths(documents: Sequence[str], labels: Sequence[str]) -> None:
    if len(documents) != len(labels):
        raise ValueError(
            f"documents ({len(documents)}) and labels ({len(labels)}) must have same length"
        )


def evaluate(
    classifier: NaiveBayesClassifier,
    documents: Sequence[str],
    labels: Sequence[str],
) -> EvaluationReport:
    """Rank every document with a trained classifier and report the result.

    The classifier is only queried, never trained.

    Raises:
        NotTrainedError: If the classifier has not learned any document.
        ValueError: If ``documents`` and ``labels`` differ in length.
    """
    _check_lengths(documents, labels)
    if not classifier.is_trained:
        raise NotTrainedError("Cannot evaluate a classifier that has not learned any document")

    predictions = [
        Prediction(text, label, tuple(classifier.probabilities(text)))
        for text, label in zip(documents, labels)
    ]
    return EvaluationReport.from_predictions(predictions, trained=classifier.state.doc_count)


def progressive_validation(
    documents: Sequence[str],
    labels: Sequence[str],
    classifier: Optional[NaiveBayesClassifier] = None,
) -> EvaluationReport:
    """Predict each document before learning it, in order.

    Every document is held out from the model that ranks it, without
    splitting the data. Early documents are ranked by a barely trained
    model (or not at all, before the first ``learn``), so the score shows
    how quickly the classifier picks up its categories.

    Args:
        documents: Texts, in learning order.
        labels: Category of each text.
        classifier: Model to continue training in place. A fresh one with
            default options is used when omitted.

    Returns:
        Report whose ``trained`` counts are those of the final model.
    """
    _check_lengths(documents, labels)
    classifier = classifier if classifier is not None else NaiveBayesClassifier()

    predictions = []
    for text, label in zip(documents, labels):
        ranking = classifier.probabilities(text) if classifier.is_trained else []
        predictions.append(Prediction(text, label, tuple(ranking)))
        classifier.learn(text, label)

    return EvaluationReport.from_predictions(predictions, trained=classifier.state.doc_count)


# ---------------------------------------------------------------------------
# Cross-Validation
# ---------------------------------------------------------------------------

def stratified_k_fold(
    labels: Sequence[str],
    k: int = 5,
    seed: int = 42,
) -> list[tuple[list[int], list[int]]]:
    """Split document indices into ``k`` folds with similar category mix.

    The documents of each category are shuffled and dealt to the folds in
    turn. Each category starts dealing where the previous one stopped, so
    fold sizes differ by at most one.

    Returns:
        ``(train_indices, test_indices)`` per fold, indices ascending.

    Raises:
        ValueError: If ``k`` is smaller than 2.
    """
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")

    rng = random.Random(seed)
    members: dict[str, list[int]] = {}
    for index, label in enumerate(labels):
        members.setdefault(label, []).append(index)

    fold_of = [0] * len(labels)
    dealt = 0
    for indices in members.values():
        rng.shuffle(indices)
        for index in indices:
            fold_of[index] = dealt % k
            dealt += 1

    return [
        (
            [i for i, fold in enumerate(fold_of) if fold != held_out],
            [i for i, fold in enumerate(fold_of) if fold == held_out],
        )
        for held_out in range(k)
    ]


def cross_validate(
    documents: Sequence[str],
    labels: Sequence[str],
    k: int = 5,
    options: Union[ClassifierOptions, Mapping, None] = None,
    seed: int = 42,
) -> list[EvaluationReport]:
    """Run stratified k-fold cross-validation.

    A fresh classifier built from ``options`` learns each fold's training
    documents one at a time and is evaluated on the held-out ones.

    Returns:
        One report per fold with both training and test documents.
    """
    _check_lengths(documents, labels)

    reports: list[EvaluationReport] = []
    for train_idx, test_idx in stratified_k_fold(labels, k=k, seed=seed):
        if not train_idx or not test_idx:
            continue

        classifier = NaiveBayesClassifier(options)
        for i in train_idx:
            classifier.learn(documents[i], labels[i])

        reports.append(evaluate(
            classifier,
            [documents[i] for i in test_idx],
            [labels[i] for i in test_idx],
        ))

    return reports


def mean_accuracy(reports: Sequence[EvaluationReport]) -> Optional[float]:
    """Mean accuracy over cross-validation folds, ``None`` if there are none."""
    if not reports:
        return None
    return sum(r.accuracy for r in reports) / len(reports)
