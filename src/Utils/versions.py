"""
versions.py
Version ordering used by the UE4SS ecosystem.

UE4SS and its companion tools are not semver: a build suffix such as the
``-0`` in ``3.0.1-0`` marks a *newer* build than the bare ``3.0.1``. The rule
implemented by compare_versions():

  1. An absent version always loses (and the pair is not "equal").
  2. The first ``-`` is turned into ``.``, then both strings are split on ``.``.
  3. Tokens are compared pairwise as integers up to the shorter length; the
     first differing pair decides. Tokens without leading digits are skipped.
  4. If all shared tokens match, the longer token list wins.
  5. Otherwise the versions are equal.

Usage::

    from Utils.versions import compare_versions

    result = compare_versions("3.0.1-0", "3.0.1")
    result.winner       # "3.0.1-0"
    result.were_equal   # False
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

_LEADING_INT = re.compile(r"^\s*(\d+)")


class VersionComparison(NamedTuple):
    winner: Optional[str]
    were_equal: bool


def _tokenize(version: str) -> list[str]:
    return version.replace("-", ".", 1).split(".")


def _to_int(token: str) -> int | None:
    m = _LEADING_INT.match(token)
    return int(m.group(1)) if m else None


def compare_versions(a: str | None, b: str | None) -> VersionComparison:
    """Return the larger of *a* and *b* and whether they compared equal."""
    if not a or not b:
        if not a and not b:
            return VersionComparison(None, True)
        return VersionComparison(a or b, False)

    tokens_a = _tokenize(a)
    tokens_b = _tokenize(b)

    for tok_a, tok_b in zip(tokens_a, tokens_b):
        num_a = _to_int(tok_a)
        num_b = _to_int(tok_b)
        if num_a is None or num_b is None:
            continue
        if num_a != num_b:
            return VersionComparison(a if num_a > num_b else b, False)

    # Longer wins: the loader treats an extra build token as a newer build,
    # so 3.0.1-0 outranks 3.0.1.
    if len(tokens_a) != len(tokens_b):
        return VersionComparison(a if len(tokens_a) > len(tokens_b) else b, False)

    # Equal but possibly spelled differently ("01" vs "1"); pick one
    # independently of argument order.
    return VersionComparison(min(a, b), True)


def return_larger_version(a: str | None, b: str | None) -> str | None:
    """Convenience wrapper returning only the winning version string."""
    return compare_versions(a, b).winner


def is_newer(candidate: str | None, current: str | None) -> bool:
    """True if *candidate* is strictly newer than *current*."""
    result = compare_versions(candidate, current)
    return not result.were_equal and result.winner == candidate
