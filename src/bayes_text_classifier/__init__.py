"""Bayes Text Classifier -- incremental Naive Bayes text classification."""

__version__ = "0.1.0"

from .classifier import CategoryScore, ClassifierStats, NaiveBayesClassifier
from .config import ClassifierOptions, PriorPolicy
from .dataset import DatasetError, Example, load_examples
from .exceptions import (
    ConfigurationError,
    NaiveBayesError,
    NotTrainedError,
    SnapshotValidationError,
)
from .frequency import frequency_table
from .metrics import (
    CategoryReport,
    EvaluationReport,
    Prediction,
    cross_validate,
    evaluate,
    progressive_validation,
    stratified_k_fold,
)
from .serializer import STATE_KEYS
from .state import ClassifierState
from .tokenizer import RegexTokenizer, TokenizerConfig, default_tokenizer

__all__ = [
    # Core
    "NaiveBayesClassifier",
    "CategoryScore",
    "ClassifierStats",
    "ClassifierState",
    "frequency_table",
    # Configuration
    "ClassifierOptions",
    "PriorPolicy",
    "RegexTokenizer",
    "TokenizerConfig",
    "default_tokenizer",
    # Persistence
    "STATE_KEYS",
    # Errors
    "NaiveBayesError",
    "ConfigurationError",
    "SnapshotValidationError",
    "NotTrainedError",
    "DatasetError",
    # Evaluation
    "EvaluationReport",
    "CategoryReport",
    "Prediction",
    "cross_validate",
    "evaluate",
    "progressive_validation",
    "stratified_k_fold",
    # Data
    "Example",
    "load_examples",
]
