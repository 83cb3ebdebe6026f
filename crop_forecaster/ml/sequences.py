"""
Sliding-window training pairs.

For a series ``s`` and window ``w``, pair ``i`` is ``(s[i:i+w], s[i+w])`` for
``i = 0 .. len(s) - w - 1``. Ten points with ``w=7`` give exactly 3 pairs.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

DEFAULT_WINDOW_SIZE = 7


@dataclass(frozen=True)
class TrainingSequences:
    """Model-ready training pairs.

    Attributes:
        inputs:  Shape ``(n, window_size)`` float64 matrix.
        targets: Shape ``(n,)`` float64 vector of next values.
    """

    inputs: np.ndarray
    targets: np.ndarray

    def __len__(self) -> int:
        return int(self.targets.shape[0])


def build_sequences(
    series: Sequence[float],
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> TrainingSequences:
    """Slice a (normalized) series into ``(window, next value)`` pairs.

    Args:
        series: Values oldest-first.
        window_size: Input width of each pair.

    Returns:
        ``TrainingSequences``; empty (zero rows) when the series has fewer
        than ``window_size + 1`` points.
    """
    values = np.asarray(series, dtype=np.float64)
    n_pairs = max(0, len(values) - window_size)
    if n_pairs == 0:
        return TrainingSequences(
            inputs=np.empty((0, window_size), dtype=np.float64),
            targets=np.empty((0,), dtype=np.float64),
        )
    inputs = np.stack([values[i : i + window_size] for i in range(n_pairs)])
    targets = values[window_size:].copy()
    return TrainingSequences(inputs=inputs, targets=targets)
