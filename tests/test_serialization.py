"""Tests for exporting and importing classifier snapshots."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bayes_text_classifier import (
    STATE_KEYS,
    ClassifierOptions,
    NaiveBayesClassifier,
    PriorPolicy,
    SnapshotValidationError,
)

QUERIES = [
    "spam spam spam",
    "hello friend",
    "awesome, cool, amazing!! Yay.",
    "completely unseen words",
    "",
    "妈妈飞吧",
]


def _rankings(classifier: NaiveBayesClassifier) -> list:
    return [classifier.probabilities(text) for text in QUERIES]


class TestExport:
    """Tests for NaiveBayesClassifier.to_dict / to_json."""

    def test_contains_exactly_state_keys(self, spam_classifier: NaiveBayesClassifier) -> None:
        assert set(spam_classifier.to_dict()) == set(STATE_KEYS)

    def test_is_plain_json(self, sentiment_classifier: NaiveBayesClassifier) -> None:
        snapshot = sentiment_classifier.to_dict()
        assert json.loads(json.dumps(snapshot)) == snapshot

    def test_values(self, spam_classifier: NaiveBayesClassifier) -> None:
        snapshot = spam_classifier.to_dict()
        assert snapshot["categories"] == ["spam", "ham"]
        assert snapshot["docCount"] == {"spam": 2, "ham": 1}
        assert snapshot["totalDocuments"] == 3
        assert snapshot["vocabulary"] == sorted(
            ["spam", "words", "here", "more", "text", "hello", "friend"]
        )
        assert snapshot["wordCount"] == {"spam": 6, "ham": 2}
        assert snapshot["wordFrequencyCount"]["ham"] == {"hello": 1, "friend": 1}
        assert snapshot["options"] == {"vocabularyLimit": 0, "prior": "documents"}

    def test_tokenizer_not_exported(self) -> None:
        classifier = NaiveBayesClassifier({"tokenizer": str.split, "vocabularyLimit": 4})
        classifier.learn("a b", "x")
        assert classifier.to_dict()["options"] == {"vocabularyLimit": 4, "prior": "documents"}

    def test_export_is_a_copy(self, spam_classifier: NaiveBayesClassifier) -> None:
        snapshot = spam_classifier.to_dict()
        snapshot["wordFrequencyCount"]["spam"]["spam"] = 1000
        snapshot["docCount"]["spam"] = 1000
        assert spam_classifier.state.word_frequency_count["spam"]["spam"] == 2
        assert spam_classifier.state.doc_count["spam"] == 2

    def test_to_json_pretty(self, spam_classifier: NaiveBayesClassifier) -> None:
        assert "\n" not in spam_classifier.to_json()
        assert "\n  " in spam_classifier.to_json(pretty=True)

    def test_to_json_keeps_unicode(self, chinese_classifier: NaiveBayesClassifier) -> None:
        assert "脏话" in chinese_classifier.to_json()


class TestImport:
    """Tests for NaiveBayesClassifier.from_dict / from_json."""

    def test_roundtrip_fidelity(self, sentiment_classifier: NaiveBayesClassifier) -> None:
        restored = NaiveBayesClassifier.from_dict(sentiment_classifier.to_dict())
        assert _rankings(restored) == _rankings(sentiment_classifier)
        for text in QUERIES:
            assert restored.categorize(text) == sentiment_classifier.categorize(text)

    def test_json_roundtrip_fidelity(self, chinese_classifier: NaiveBayesClassifier) -> None:
        restored = NaiveBayesClassifier.from_json(chinese_classifier.to_json())
        assert _rankings(restored) == _rankings(chinese_classifier)
        assert restored.state == chinese_classifier.state

    def test_restored_classifier_keeps_learning(
        self, spam_classifier: NaiveBayesClassifier
    ) -> None:
        restored = NaiveBayesClassifier.from_json(spam_classifier.to_json())
        restored.learn("hello hello buddy", "ham")
        spam_classifier.learn("hello hello buddy", "ham")
        assert restored.to_dict() == spam_classifier.to_dict()

    def test_options_restored(self) -> None:
        classifier = NaiveBayesClassifier(ClassifierOptions(
            vocabulary_limit=3, prior=PriorPolicy.VOCABULARY_LIMIT,
        ))
        classifier.learn("a a b c d", "x")
        restored = NaiveBayesClassifier.from_dict(classifier.to_dict())
        assert restored.vocabulary_limit == 3
        assert restored.options.prior is PriorPolicy.VOCABULARY_LIMIT
        assert _rankings(restored) == _rankings(classifier)

    def test_missing_options_fall_back_to_defaults(
        self, spam_classifier: NaiveBayesClassifier
    ) -> None:
        snapshot = spam_classifier.to_dict()
        del snapshot["options"]
        restored = NaiveBayesClassifier.from_dict(snapshot)
        assert restored.options == ClassifierOptions()

    def test_tokenizer_supplied_on_import(self) -> None:
        def pipe_tokenizer(text: str) -> list[str]:
            return [t for t in text.split("|") if t]

        classifier = NaiveBayesClassifier({"tokenizer": pipe_tokenizer})
        classifier.learn("good day|sunshine", "nice").learn("bad day|rain", "gloomy")

        restored = NaiveBayesClassifier.from_json(classifier.to_json(), tokenizer=pipe_tokenizer)
        assert restored.tokenizer is pipe_tokenizer
        assert restored.categorize("rain") == "gloomy"

    def test_tokenizer_from_snapshot_options(self, spam_classifier: NaiveBayesClassifier) -> None:
        snapshot = spam_classifier.to_dict()
        snapshot["options"]["tokenizer"] = str.split
        restored = NaiveBayesClassifier.from_dict(snapshot)
        assert restored.tokenizer is str.split

    def test_import_does_not_recompute(self, spam_classifier: NaiveBayesClassifier) -> None:
        snapshot = spam_classifier.to_dict()
        snapshot["totalDocuments"] = 99
        restored = NaiveBayesClassifier.from_dict(snapshot)
        assert restored.total_documents == 99

    def test_legacy_presence_maps(self, spam_classifier: NaiveBayesClassifier) -> None:
        snapshot = spam_classifier.to_dict()
        snapshot["categories"] = {name: True for name in snapshot["categories"]}
        snapshot["vocabulary"] = {token: True for token in snapshot["vocabulary"]}
        snapshot["vocabularySize"] = len(snapshot["vocabulary"])

        restored = NaiveBayesClassifier.from_dict(snapshot)
        assert restored.categories == ["spam", "ham"]
        assert restored.vocabulary_size == 7
        assert _rankings(restored) == _rankings(spam_classifier)


class TestSnapshotValidation:
    """Import rejects incomplete or malformed snapshots."""

    @pytest.mark.parametrize("key", [k for k in STATE_KEYS if k != "options"])
    def test_missing_field(self, spam_classifier: NaiveBayesClassifier, key: str) -> None:
        snapshot = spam_classifier.to_dict()
        del snapshot[key]
        with pytest.raises(SnapshotValidationError, match=key) as exc_info:
            NaiveBayesClassifier.from_dict(snapshot)
        assert exc_info.value.field == key

    @pytest.mark.parametrize("key", [k for k in STATE_KEYS if k != "options"])
    def test_null_field(self, spam_classifier: NaiveBayesClassifier, key: str) -> None:
        snapshot = spam_classifier.to_dict()
        snapshot[key] = None
        with pytest.raises(SnapshotValidationError) as exc_info:
            NaiveBayesClassifier.from_dict(snapshot)
        assert exc_info.value.field == key

    def test_zero_documents_is_not_missing(self) -> None:
        snapshot = NaiveBayesClassifier().to_dict()
        restored = NaiveBayesClassifier.from_dict(snapshot)
        assert restored.total_documents == 0
        assert restored.probabilities("x") == []

    @pytest.mark.parametrize("snapshot", [[], "state", 3])
    def test_not_a_mapping(self, snapshot) -> None:
        with pytest.raises(SnapshotValidationError, match="mapping"):
            NaiveBayesClassifier.from_dict(snapshot)

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("categories", "spam"),
            ("vocabulary", 7),
            ("docCount", ["spam"]),
            ("wordCount", 6),
            ("wordFrequencyCount", []),
            ("totalDocuments", "3"),
            ("options", ["vocabularyLimit"]),
        ],
    )
    def test_malformed_field(
        self, spam_classifier: NaiveBayesClassifier, key: str, value
    ) -> None:
        snapshot = spam_classifier.to_dict()
        snapshot[key] = value
        with pytest.raises(SnapshotValidationError) as exc_info:
            NaiveBayesClassifier.from_dict(snapshot)
        assert exc_info.value.field == key

    def test_numeric_labels_roundtrip_as_strings(self) -> None:
        classifier = NaiveBayesClassifier()
        classifier.learn("one", "1").learn("two", "2")
        restored = NaiveBayesClassifier.from_json(classifier.to_json())
        assert restored.categorize("one") == "1"
        assert _rankings(restored) == _rankings(classifier)

    def test_non_string_categories(self, spam_classifier: NaiveBayesClassifier) -> None:
        snapshot = spam_classifier.to_dict()
        snapshot["categories"] = [1, 2]
        with pytest.raises(SnapshotValidationError, match="strings") as exc_info:
            NaiveBayesClassifier.from_dict(snapshot)
        assert exc_info.value.field == "categories"

    @pytest.mark.parametrize("key", ["docCount", "wordCount", "wordFrequencyCount"])
    def test_category_without_counter_entry(
        self, spam_classifier: NaiveBayesClassifier, key: str
    ) -> None:
        snapshot = spam_classifier.to_dict()
        del snapshot[key]["ham"]
        with pytest.raises(SnapshotValidationError, match="ham") as exc_info:
            NaiveBayesClassifier.from_dict(snapshot)
        assert exc_info.value.field == key

    def test_invalid_options_values(self, spam_classifier: NaiveBayesClassifier) -> None:
        snapshot = spam_classifier.to_dict()
        snapshot["options"] = {"vocabularyLimit": -5}
        with pytest.raises(SnapshotValidationError, match="options") as exc_info:
            NaiveBayesClassifier.from_dict(snapshot)
        assert exc_info.value.field == "options"

    def test_invalid_json(self) -> None:
        with pytest.raises(SnapshotValidationError, match="not valid JSON"):
            NaiveBayesClassifier.from_json("{not json")

    def test_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            NaiveBayesClassifier.from_dict({})


class TestFilePersistence:
    """Tests for save / load."""

    def test_save_and_load(
        self, tmp_path: Path, sentiment_classifier: NaiveBayesClassifier
    ) -> None:
        path = tmp_path / "models" / "sentiment.json"
        sentiment_classifier.save(path)
        assert path.exists()

        loaded = NaiveBayesClassifier.load(path)
        assert _rankings(loaded) == _rankings(sentiment_classifier)

    def test_saved_file_is_utf8_json(
        self, tmp_path: Path, chinese_classifier: NaiveBayesClassifier
    ) -> None:
        path = tmp_path / "model.json"
        chinese_classifier.save(path, pretty=True)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert set(data) == set(STATE_KEYS)
        assert "正常" in data["categories"]

    def test_failed_save_keeps_previous_model(
        self, tmp_path: Path, spam_classifier: NaiveBayesClassifier
    ) -> None:
        path = tmp_path / "model.json"
        spam_classifier.save(path)
        saved = path.read_text(encoding="utf-8")

        spam_classifier.state.word_frequency_count["spam"]["broken"] = object()
        with pytest.raises(TypeError):
            spam_classifier.save(path)

        assert path.read_text(encoding="utf-8") == saved
        assert [p.name for p in tmp_path.iterdir()] == ["model.json"]

    def test_save_overwrites(
        self, tmp_path: Path, spam_classifier: NaiveBayesClassifier
    ) -> None:
        path = tmp_path / "model.json"
        spam_classifier.save(path)
        spam_classifier.learn("hello again", "ham")
        spam_classifier.save(path)
        assert NaiveBayesClassifier.load(path).total_documents == 4
        assert [p.name for p in tmp_path.iterdir()] == ["model.json"]

    def test_load_not_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "model.json"
        path.write_bytes(b'{"categories": ["caf\xe9"]}')
        with pytest.raises(SnapshotValidationError, match="UTF-8"):
            NaiveBayesClassifier.load(path)

    def test_load_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            NaiveBayesClassifier.load(tmp_path / "absent.json")
