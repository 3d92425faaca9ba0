"""Command-line interface for the Naive Bayes text classifier.

Provides ``train``, ``classify``, ``evaluate`` and ``inspect`` commands with
rich terminal output using the ``click`` and ``rich`` libraries.

Usage::

    bayes-text-classifier train examples.tsv -o model.json
    bayes-text-classifier train more.jsonl -m model.json -o model.json
    bayes-text-classifier classify model.json "some text to label"
    bayes-text-classifier evaluate model.json heldout.tsv
    bayes-text-classifier inspect model.json --top 10

The tokenizer is not stored in the model: pass the same ``--lowercase``
setting to every command that uses a given model.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .classifier import NaiveBayesClassifier
from .config import ClassifierOptions, PriorPolicy
from .dataset import load_examples
from .exceptions import NaiveBayesError
from .metrics import EvaluationReport, evaluate as evaluate_classifier
from .tokenizer import RegexTokenizer, TokenizerConfig

console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _tokenizer(lowercase: bool) -> RegexTokenizer:
    return RegexTokenizer(TokenizerConfig(lowercase=lowercase))


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/] {escape(str(error))}")
    sys.exit(1)


def _load_model(path: Path, lowercase: bool) -> NaiveBayesClassifier:
    return NaiveBayesClassifier.load(path, tokenizer=_tokenizer(lowercase))


_lowercase_option = click.option(
    "--lowercase", is_flag=True, default=False,
    help="Lowercase text before tokenizing (use the same setting as for training).",
)


@click.group()
@click.version_option(package_name="bayes-text-classifier")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Incremental Naive Bayes text classifier.

    Train a model on labelled examples, keep teaching it new examples, and
    use it to label text.
    """
    _configure_logging(verbose)


@main.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", "output", type=click.Path(dir_okay=False, path_type=Path),
              required=True, help="Where to save the trained model.")
@click.option("--model", "-m", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Continue learning from an existing model.")
@click.option("--vocabulary-limit", type=click.IntRange(min=0), default=0, show_default=True,
              help="Max token occurrences counted per document (0 = unlimited). "
                   "Ignored with --model.")
@click.option("--prior", type=click.Choice([p.value for p in PriorPolicy]),
              default=PriorPolicy.DOCUMENTS.value, show_default=True,
              help="Normalization of the category prior. Ignored with --model.")
@click.option("--pretty", is_flag=True, default=False, help="Indent the saved JSON.")
@_lowercase_option
def train(
    data: Path,
    output: Path,
    model: Optional[Path],
    vocabulary_limit: int,
    prior: str,
    pretty: bool,
    lowercase: bool,
) -> None:
    """Learn labelled examples from DATA and save the model.

    DATA holds 'category<TAB>text' lines, or JSON Lines with 'text' and
    'category' keys when its suffix is .jsonl.

    Example: bayes-text-classifier train examples.tsv -o model.json
    """
    try:
        if model:
            classifier = _load_model(model, lowercase)
            logger.info(f"Resuming from {model}: {classifier!r}")
        else:
            classifier = NaiveBayesClassifier(ClassifierOptions(
                tokenizer=_tokenizer(lowercase),
                vocabulary_limit=vocabulary_limit,
                prior=PriorPolicy(prior),
            ))

        with console.status("[bold blue]Learning examples...", spinner="dots"):
            learned = 0
            for example in load_examples(data):
                classifier.learn(example.text, example.category)
                learned += 1

        classifier.save(output, pretty=pretty)
    except (NaiveBayesError, OSError) as e:
        _fail(e)

    console.print(
        f"Learned [bold]{learned}[/] examples "
        f"({classifier.total_documents} total, {len(classifier.categories)} categories, "
        f"{classifier.vocabulary_size} tokens)"
    )
    console.print(f"[dim]Model saved to {escape(str(output))}[/]")


@main.command()
@click.argument("model", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("texts", nargs=-1)
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.option("--top", "-n", type=click.IntRange(min=1), default=None,
              help="Only show the N best categories.")
@_lowercase_option
def classify(
    model: Path,
    texts: tuple[str, ...],
    output: str,
    top: Optional[int],
    lowercase: bool,
) -> None:
    """Rank the categories of each TEXT (read from stdin, one per line, if omitted).

    Example: bayes-text-classifier classify model.json "free money now"
    """
    if not texts:
        texts = tuple(line.rstrip("\n") for line in click.get_text_stream("stdin") if line.strip())

    try:
        classifier = _load_model(model, lowercase)
        results = []
        for text in texts:
            ranking = classifier.probabilities(text)[:top]
            posterior = classifier.posterior(text)
            results.append((text, ranking, posterior))
    except (NaiveBayesError, OSError) as e:
        _fail(e)

    if output == "json":
        click.echo(json.dumps([
            {
                "text": text,
                "category": ranking[0].category if ranking else None,
                "ranking": [
                    {**score.to_dict(), "posterior": posterior[score.category]}
                    for score in ranking
                ],
            }
            for text, ranking, posterior in results
        ], indent=2, ensure_ascii=False))
        return

    for text, ranking, posterior in results:
        _render_ranking(text, ranking, posterior)


@main.command()
@click.argument("model", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("data", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@_lowercase_option
def evaluate(model: Path, data: Path, output: str, lowercase: bool) -> None:
    """Measure MODEL's accuracy on the labelled examples in DATA.

    Example: bayes-text-classifier evaluate model.json heldout.tsv
    """
    try:
        classifier = _load_model(model, lowercase)
        examples = load_examples(data)
        with console.status("[bold blue]Evaluating...", spinner="dots"):
            report = evaluate_classifier(
                classifier,
                [e.text for e in examples],
                [e.category for e in examples],
            )
    except (NaiveBayesError, OSError) as e:
        _fail(e)

    if output == "json":
        click.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        _render_report(report, data.name)


@main.command()
@click.argument("model", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--top", "-n", type=click.IntRange(min=0), default=10, show_default=True,
              help="Most informative tokens to list per category.")
def inspect(model: Path, top: int) -> None:
    """Show what MODEL has learned.

    Example: bayes-text-classifier inspect model.json --top 5
    """
    try:
        classifier = NaiveBayesClassifier.load(model)
    except (NaiveBayesError, OSError) as e:
        _fail(e)

    stats = classifier.stats
    options = classifier.options
    console.print(Panel(
        f"Documents: {stats.total_documents} | "
        f"Categories: {len(stats.categories)} | "
        f"Vocabulary: {stats.vocabulary_size}\n"
        f"Vocabulary limit: {options.vocabulary_limit or 'none'} | "
        f"Prior: {options.prior.value}",
        title=f"Model: {escape(model.name)}",
        border_style="blue",
    ))

    table = Table(title="Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Documents", justify="right")
    table.add_column("Words", justify="right")
    if top:
        table.add_column("Most informative tokens", style="white", max_width=60)

    for category, counts in stats.categories.items():
        row = [escape(str(category)), str(counts["documents"]), str(counts["words"])]
        if top:
            tokens = classifier.most_informative_tokens(category, top_n=top)
            row.append(escape(", ".join(token for token, _ in tokens)))
        table.add_row(*row)

    console.print(table)


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_ranking(text: str, ranking: list, posterior: dict) -> None:
    """Render one text's category ranking as a rich table."""
    excerpt = text[:60].replace("\n", " ") + ("..." if len(text) > 60 else "")
    table = Table(title=escape(excerpt), show_lines=False)
    table.add_column("#", justify="right", width=4)
    table.add_column("Category", style="cyan")
    table.add_column("Log-probability", justify="right")
    table.add_column("Posterior", justify="right")

    for i, score in enumerate(ranking, 1):
        table.add_row(
            str(i),
            escape(str(score.category)),
            f"{score.probability:.4f}",
            f"{posterior[score.category]:.1%}",
            style="bold green" if i == 1 else None,
        )

    console.print(table)
    console.print()


def _render_report(report: EvaluationReport, source: str) -> None:
    """Render an evaluation report as a rich panel and table."""
    console.print(Panel(
        f"Documents: {report.total} | "
        f"Accuracy: [bold]{report.accuracy:.2%}[/] | "
        f"Top-2: {report.top_k_accuracy(2):.2%}\n"
        f"Mean reciprocal rank: {report.mean_reciprocal_rank:.4f} | "
        f"Macro F1: {report.macro_f1:.4f}",
        title=f"Evaluation: {escape(source)}",
        border_style="blue",
    ))

    table = Table(show_lines=False)
    table.add_column("Category", style="cyan")
    table.add_column("Trained", justify="right")
    table.add_column("Support", justify="right")
    table.add_column("Precision", justify="right")
    table.add_column("Recall", justify="right")
    table.add_column("F1", justify="right")

    for c in report.categories.values():
        table.add_row(
            escape(c.category),
            str(c.trained),
            str(c.support),
            f"{c.precision:.4f}",
            f"{c.recall:.4f}",
            f"{c.f1:.4f}",
            style="dim" if not c.support else None,
        )

    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
