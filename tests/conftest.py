"""Shared test fixtures for bayes-text-classifier tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from bayes_text_classifier import NaiveBayesClassifier


SPAM_HAM_EXAMPLES = [
    ("spam words here", "spam"),
    ("more spam text", "spam"),
    ("hello friend", "ham"),
]

SENTIMENT_EXAMPLES = [
    ("amazing, awesome movie!! Yeah!! Oh boy.", "positive"),
    ("Sweet, this is incredibly, amazing, perfect, great!!", "positive"),
    ("terrible, boring thing. Awful!! Never again.", "negative"),
    ("I don't really know what to make of this.", "neutral"),
]

ABUSE_EXAMPLES = [
    ("你大爷的！", "脏话"),
    ("跪下叫爸爸！！", "脏话"),
    ("我去你妈的！！", "脏话"),
    ("妈妈，一起飞吧", "正常"),
    ("金色的秋天正在向一望无际的原野告别", "正常"),
    ("我想要怒放的生命", "正常"),
]


def _train(examples: list[tuple[str, str]], **options) -> NaiveBayesClassifier:
    classifier = NaiveBayesClassifier(options or None)
    for text, category in examples:
        classifier.learn(text, category)
    return classifier


@pytest.fixture
def spam_classifier() -> NaiveBayesClassifier:
    """Classifier trained on the three-document spam/ham corpus."""
    return _train(SPAM_HAM_EXAMPLES)


@pytest.fixture
def sentiment_classifier() -> NaiveBayesClassifier:
    """Three-category classifier trained on short sentiment snippets."""
    return _train(SENTIMENT_EXAMPLES)


@pytest.fixture
def chinese_classifier() -> NaiveBayesClassifier:
    """Classifier trained on Chinese text with the default per-character tokenizer."""
    return _train(ABUSE_EXAMPLES)


@pytest.fixture
def tsv_examples(tmp_path: Path) -> Path:
    """Examples file in 'category<TAB>text' format."""
    file = tmp_path / "examples.tsv"
    lines = ["# category\ttext"]
    lines += [f"{category}\t{text}" for text, category in SPAM_HAM_EXAMPLES + SENTIMENT_EXAMPLES]
    file.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return file
