"""
Short-code generation strategies for shortlink_platform.

Provided strategies:
- RandomStrategy: independent draw per character from the 62-symbol
  alphabet `A-Za-z0-9` (default length 6). Uniqueness is not guaranteed here;
  the manager checks existence and retries on collision.
- FixedSequenceStrategy: replays a given list of codes in order. Used to force
  collisions deterministically in tests.

Strategies are stateless callables from the manager's point of view:
`strategy.generate(length=...) -> str`.
"""

import itertools
import random
import string
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

CODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

DEFAULT_CODE_LENGTH = 6


class BaseStrategy(ABC):
    """Abstract base for code generation strategies."""

    @abstractmethod
    def generate(self, *, length: Optional[int] = None) -> str:  # pragma: no cover
        """Return one candidate short code."""
        raise NotImplementedError


@dataclass(frozen=True)
class RandomStrategy(BaseStrategy):
    """
    Random alphanumeric codes from `random.SystemRandom`; rely on the
    manager's existence check + retry for uniqueness.
    """

    default_length: int = DEFAULT_CODE_LENGTH

    def generate(self, *, length: Optional[int] = None) -> str:
        L = length if length is not None else self.default_length
        rng = random.SystemRandom()
        return "".join(rng.choice(CODE_ALPHABET) for _ in range(L))


@dataclass
class FixedSequenceStrategy(BaseStrategy):
    """
    Yield the given codes in order, cycling when exhausted.

    `length` is ignored; the codes are returned exactly as supplied.
    """

    codes: Sequence[str]
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _cycle: Iterator[str] = field(init=False, repr=False)

    def __post_init__(self):
        if not self.codes:
            raise ValueError("codes must not be empty")
        self._cycle = itertools.cycle(list(self.codes))

    def generate(self, *, length: Optional[int] = None) -> str:
        with self._lock:
            return next(self._cycle)
