"""Key generators shared by the counting pass and the extraction pass."""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

WORD_NGRAM_JOINER = "_"
DEPENDENCY_JOINER = "-"
TOKEN_BEGIN_MARKER = "^"
TOKEN_END_MARKER = "$"


def fold_case(text: str, lowercase: bool) -> str:
    """Apply the case-folding rule used for every vocabulary key."""
    return text.lower() if lowercase else text


def _check_bounds(min_n: int, max_n: int) -> None:
    if min_n < 1 or max_n < min_n:
        msg = f"Invalid n-gram bounds: min_n={min_n}, max_n={max_n}."
        raise ValueError(msg)


def word_ngrams(
    tokens: Sequence[str],
    min_n: int,
    max_n: int,
    *,
    lowercase: bool = False,
) -> Iterator[str]:
    """
    Yield contiguous token n-grams joined with ``_``.

    Args:
        tokens (Sequence[str]): Token strings in document order.
        min_n (int): Minimum n-gram length.
        max_n (int): Maximum n-gram length.
        lowercase (bool): Lowercase tokens before joining.

    Yields:
        str: One key per n-gram occurrence.

    Examples:
        >>> list(word_ngrams(["a", "b", "c"], 1, 2))
        ['a', 'a_b', 'b', 'b_c', 'c']

    """
    _check_bounds(min_n, max_n)
    words = [fold_case(t, lowercase) for t in tokens]
    for i in range(len(words)):
        for n in range(min_n, max_n + 1):
            if i + n > len(words):
                break
            yield WORD_NGRAM_JOINER.join(words[i : i + n])


def _mark(token: str) -> str:
    return f"{TOKEN_BEGIN_MARKER}{token}{TOKEN_END_MARKER}"


def char_ngrams(
    tokens: Sequence[str],
    min_n: int,
    max_n: int,
    *,
    lowercase: bool = False,
) -> Iterator[str]:
    """
    Yield contiguous character n-grams of each token.

    Each token is wrapped in ``^``/``$`` boundary markers first, so prefixes
    and suffixes are distinguishable from inner substrings.

    Examples:
        >>> list(char_ngrams(["ab"], 2, 2))
        ['^a', 'ab', 'b$']

    """
    _check_bounds(min_n, max_n)
    for token in tokens:
        chars = _mark(fold_case(token, lowercase))
        for i in range(len(chars)):
            for n in range(min_n, max_n + 1):
                if i + n > len(chars):
                    break
                yield chars[i : i + n]


def char_skip_ngrams(
    tokens: Sequence[str],
    min_n: int,
    max_n: int,
    skip_size: int,
    *,
    lowercase: bool = False,
) -> Iterator[str]:
    """
    Yield character skip-grams of each (boundary-marked) token.

    A skip-gram of length ``n`` picks ``n`` characters in order, starting at
    some position ``i``, with at most `skip_size` characters skipped between
    the first and the last pick. With ``skip_size=0`` this equals
    :func:`char_ngrams`. Every distinct choice of positions is yielded once.

    Args:
        tokens (Sequence[str]): Token strings.
        min_n (int): Minimum skip-gram length.
        max_n (int): Maximum skip-gram length.
        skip_size (int): Maximum number of skipped characters.
        lowercase (bool): Lowercase tokens first.

    Yields:
        str: One key per skip-gram occurrence.

    Examples:
        >>> sorted(char_skip_ngrams(["ab"], 2, 2, 1))
        ['^a', '^b', 'a$', 'ab', 'b$']

    """
    _check_bounds(min_n, max_n)
    if skip_size < 0:
        msg = f"skip_size must be non-negative, got {skip_size}."
        raise ValueError(msg)

    for token in tokens:
        chars = _mark(fold_case(token, lowercase))
        length = len(chars)
        for i in range(length):
            for n in range(min_n, max_n + 1):
                window_end = min(length, i + n + skip_size)
                if i + n > length:
                    break
                for rest in itertools.combinations(range(i + 1, window_end), n - 1):
                    yield chars[i] + "".join(chars[j] for j in rest)


def dependency_key(
    governor: str,
    relation: str,
    dependent: str,
    *,
    lowercase: bool = False,
) -> str:
    """
    Build a ``governor-relation-dependent`` key.

    Case folding applies to the governor and dependent text only; the relation
    label is kept verbatim.

    Examples:
        >>> dependency_key("Dog", "nsubj", "Ran", lowercase=True)
        'dog-nsubj-ran'

    """
    return DEPENDENCY_JOINER.join(
        (fold_case(governor, lowercase), relation, fold_case(dependent, lowercase)),
    )
