"""
Base tokenizer interface for vocabulary-driven tokenization implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from math import ceil
from typing import Final
import logging
import os

from ..parallel import ParallelMode
from ..types import Token

TOKENIZER_FILENAME: Final[str] = "tokenizer.json"
MODEL_SUFFIX: Final[str] = ".json"
VOCAB_SUFFIX: Final[str] = ".vocab"

# below this many characters a thread pool costs more than it saves
_AUTO_BATCH_MIN_CHARS: Final[int] = 2_000_000

log = logging.getLogger(__name__)


class Tokenizer(ABC):
    """
    Abstract base class for tokenizers built from a fixed vocabulary.

    Subclasses must be fully initialized by ``__init__`` and must not mutate
    their state afterwards; the batch helpers share one instance between
    worker threads without locking.
    """

    # model type written to and checked against saved descriptions
    TOKENIZER_TYPE: str = "base"

    @abstractmethod
    def encode(self, text: str) -> list[Token]:
        """Encode text into a sequence of tokens."""
        ...

    @abstractmethod
    def decode(self, tokens: Sequence[Token], strict: bool = False) -> str:
        """Decode a sequence of tokens back into text."""
        ...

    @abstractmethod
    def vocab_size(self) -> int:
        """Return the number of tokens in the vocabulary."""
        ...

    @abstractmethod
    def save(self, file_prefix: str) -> None:
        """Save tokenizer state to disk."""
        ...

    def __call__(self, text: str) -> list[Token]:
        return self.encode(text)

    def encode_batch(
        self,
        texts: list[str],
        num_workers: int | None = None,
        parallel_mode: ParallelMode = ParallelMode.AUTO,
    ) -> list[list[Token]]:
        """
        Encode many texts using the requested parallelization mode.

        ``off`` encodes texts serially and ``batch`` spreads whole texts over a
        thread pool. ``auto`` only uses the pool when the input is large enough
        to amortize scheduling overhead.

        :param texts: Text inputs to encode.
        :param num_workers: Worker count for batch parallelism.
        :param parallel_mode: Parallelization policy.
        :returns: Encoded token sequences in input order.
        """
        if not texts:
            return []
        total_chars = sum(len(text) for text in texts)
        return self._run_batch(
            self.encode, texts, total_chars, num_workers, parallel_mode
        )

    def decode_batch(
        self,
        token_batch: list[list[Token]],
        strict: bool = False,
        num_workers: int | None = None,
        parallel_mode: ParallelMode = ParallelMode.AUTO,
    ) -> list[str]:
        """
        Decode many token sequences using the requested parallelization mode.

        :param token_batch: Token sequences to decode.
        :param strict: Forwarded to :meth:`decode`.
        :param num_workers: Worker count for batch parallelism.
        :param parallel_mode: Parallelization policy.
        :returns: Decoded texts in input order.
        """
        if not token_batch:
            return []
        # a token decodes to a few characters, close enough for the heuristic
        total_chars = sum(len(tokens) for tokens in token_batch)
        return self._run_batch(
            lambda tokens: self.decode(tokens, strict=strict),
            token_batch,
            total_chars,
            num_workers,
            parallel_mode,
        )

    def _run_batch[T, R](
        self,
        fn: Callable[[T], R],
        items: list[T],
        total_chars: int,
        num_workers: int | None,
        parallel_mode: ParallelMode,
    ) -> list[R]:
        """Apply ``fn`` to every item, serially or on a thread pool."""
        if num_workers is None:
            workers = os.cpu_count() or 1
        else:
            workers = max(1, num_workers)  # "0" interpreted as 1 worker

        def process_batch() -> list[R]:
            """Run grouped items on the pool to limit task-scheduling overhead."""
            if workers == 1 or len(items) <= 1:
                return [fn(item) for item in items]

            target_tasks = min(len(items), workers * 2)
            group_size = max(1, ceil(len(items) / target_tasks))
            groups = [
                items[idx : idx + group_size]
                for idx in range(0, len(items), group_size)
            ]

            def run_group(group: list[T]) -> list[R]:
                return [fn(item) for item in group]

            log.debug(f"running {len(groups)} groups on {workers} workers")
            with ThreadPoolExecutor(max_workers=workers) as pool:
                done = list(pool.map(run_group, groups))
            return [out for group in done for out in group]

        match parallel_mode:
            case ParallelMode.OFF:
                return [fn(item) for item in items]
            case ParallelMode.BATCH:
                return process_batch()
            case ParallelMode.AUTO:
                if len(items) == 1 or total_chars < _AUTO_BATCH_MIN_CHARS:
                    return [fn(item) for item in items]
                return process_batch()
