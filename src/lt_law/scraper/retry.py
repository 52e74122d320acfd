"""Bounded attempt chains.

HTTP retries and multi-round edition resolution are the same shape: run an
attempt, stop if the result is good enough, otherwise degrade (wait, or move to
an older edition) and try again until the budget runs out.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar('T')


@dataclass
class ChainOutcome(Generic[T]):
    value: Optional[T]
    attempts: int
    done: bool


def run_bounded_chain(
    attempt: Callable[[int], T],
    is_done: Callable[[T], bool],
    max_attempts: int,
    between: Optional[Callable[[int, T], None]] = None,
) -> ChainOutcome[T]:
    """Call ``attempt(0)``, ``attempt(1)`` ... until ``is_done`` or budget exhausted.

    ``between(n, value)`` runs after a failed attempt ``n`` when another attempt
    follows (used for backoff sleeps). Exceptions raised by ``attempt`` propagate.
    """
    value: Optional[T] = None
    for n in range(max_attempts):
        value = attempt(n)
        if is_done(value):
            return ChainOutcome(value=value, attempts=n + 1, done=True)
        if between is not None and n + 1 < max_attempts:
            between(n, value)
    return ChainOutcome(value=value, attempts=max_attempts, done=False)


__all__ = ['ChainOutcome', 'run_bounded_chain']
