"""Per-document token frequency tables."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable

logger = logging.getLogger(__name__)


def frequency_table(tokens: Iterable[str], vocabulary_limit: int = 0) -> dict[str, int]:
    """Count token occurrences for a single document.

    With a positive ``vocabulary_limit`` and a document longer than the
    limit, only part of the document is accounted: tokens are taken in
    ascending order of their in-document count and accumulated, with their
    full counts, until the running total reaches the limit. The token that
    reaches it is included. Tokens with equal counts keep their
    first-occurrence order, so the result is deterministic for a given
    token sequence.

    Args:
        tokens: Tokens of one document, in document order.
        vocabulary_limit: Maximum number of accounted occurrences
            (``0`` means unlimited).

    Returns:
        Mapping of token to occurrence count.
    """
    tokens = list(tokens)
    counts = Counter(tokens)

    if vocabulary_limit <= 0 or len(tokens) <= vocabulary_limit:
        return dict(counts)

    # sorted() is stable and Counter keeps first-occurrence order
    ranked = sorted(counts.items(), key=lambda item: item[1])

    table: dict[str, int] = {}
    accounted = 0
    for token, count in ranked:
        table[token] = count
        accounted += count
        if accounted >= vocabulary_limit:
            break

    logger.debug(
        f"Truncated document of {len(tokens)} tokens to {len(table)} "
        f"distinct tokens ({accounted} occurrences)"
    )
    return table
