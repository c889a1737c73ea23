"""Energy-based onset detection."""

from typing import Iterator

import numpy as np

from ..core.constants import DEFAULT_HOP_LENGTH, DEFAULT_WINDOW_SIZE


class OnsetDetector:
    """Builds a per-frame onset strength function from energy increases."""

    def __init__(
        self,
        window_size: int = DEFAULT_WINDOW_SIZE,
        hop_length: int = DEFAULT_HOP_LENGTH,
    ):
        """
        Initialize OnsetDetector.

        Args:
            window_size: Samples per analysis frame
            hop_length: Samples between frame starts
        """
        if window_size <= 0 or hop_length <= 0:
            raise ValueError("window_size and hop_length must be positive")
        self.window_size = window_size
        self.hop_length = hop_length

    def frame_count(self, n_samples: int) -> int:
        """
        Number of frames for a buffer of ``n_samples``.

        A buffer shorter than one window still yields a single (partial)
        frame; an empty buffer yields none.
        """
        if n_samples <= 0:
            return 0
        if n_samples < self.window_size:
            return 1
        return (n_samples - self.window_size) // self.hop_length + 1

    def frame_energies(self, samples: np.ndarray) -> Iterator[float]:
        """Yield sum(sample^2) for each frame."""
        for i in range(self.frame_count(len(samples))):
            start = i * self.hop_length
            frame = samples[start:start + self.window_size]
            yield float(np.dot(frame, frame))

    def strengths(self, samples: np.ndarray) -> Iterator[float]:
        """
        Yield the onset strength of each frame.

        strength[0] = 0 and strength[i] = max(0, energy[i] - energy[i-1]).
        The generator is consumed once; call again to restart.
        """
        previous = None
        for energy in self.frame_energies(samples):
            if previous is None:
                yield 0.0
            else:
                yield max(0.0, energy - previous)
            previous = energy

    def onset_function(self, samples: np.ndarray) -> np.ndarray:
        """
        Materialize the onset strength function.

        Args:
            samples: Float samples in [-1, 1]

        Returns:
            Array with one strength per frame
        """
        return np.fromiter(
            self.strengths(samples),
            dtype=np.float64,
            count=self.frame_count(len(samples)),
        )
