# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""High-contrast pattern detection and persistence tracking."""

from typing import List, Optional, Sequence

import numpy as np

from pse_compliance.configuration import TIME_EPSILON, PatternDetectionParams
from pse_compliance.frame_data import FrameMetrics, PatternFlag
from pse_compliance.result import PatternSeverity, PersistentPattern


class PatternDetection:
    """
    Detects dense high-contrast spatial patterns in a single frame.

    The luminance plane is sampled every `stride` pixels along both axes.
    Each sample is compared to its right and below neighbours on the same
    sampling grid; the sample counts as a high-contrast transition when
    either difference exceeds the contrast threshold. Only samples with
    both neighbours inside the frame are counted.
    """

    def __init__(self, params: PatternDetectionParams):
        self.params = params

    def contrast_ratio(self, luminance_frame: np.ndarray) -> float:
        """
        Fraction of samples with a high-contrast neighbour.

        Args:
            luminance_frame: Luminance values (H, W) on the 0-255 scale

        Returns:
            Ratio in [0, 1], 0 when the frame is too small to sample
        """
        stride = self.params.stride
        grid = luminance_frame[::stride, ::stride].astype(np.float32)
        if grid.shape[0] < 2 or grid.shape[1] < 2:
            return 0.0

        samples = grid[:-1, :-1]
        right = np.abs(grid[:-1, 1:] - samples)
        below = np.abs(grid[1:, :-1] - samples)

        threshold = self.params.contrast_threshold
        transitions = np.count_nonzero((right > threshold) | (below > threshold))
        return transitions / samples.size

    def check_frame(self, luminance_frame: np.ndarray, time: float) -> Optional[PatternFlag]:
        """
        Check a frame for a high-contrast pattern.

        Args:
            luminance_frame: Luminance values (H, W) on the 0-255 scale
            time: Frame timestamp in seconds

        Returns:
            PatternFlag if the ratio exceeds the medium threshold, else None
        """
        ratio = self.contrast_ratio(luminance_frame)

        if ratio > self.params.high_ratio:
            return PatternFlag(time=time, severity=PatternSeverity.High, ratio=ratio)
        if ratio > self.params.medium_ratio:
            return PatternFlag(time=time, severity=PatternSeverity.Medium, ratio=ratio)
        return None


class PatternPersistence:
    """Tracks runs of consecutive frames carrying a high-severity pattern."""

    def __init__(self, params: PatternDetectionParams):
        self.params = params
        self.persistent_patterns: List[PersistentPattern] = []

        self._run_frames = 0
        self._run_start = 0.0
        self._run_end = 0.0

    def update(self, metrics: FrameMetrics) -> None:
        """Add the next frame in timestamp order."""
        if metrics.has_high_pattern:
            if self._run_frames == 0:
                self._run_start = metrics.timestamp
            self._run_end = metrics.timestamp
            self._run_frames += 1
        else:
            self._close_run()

    def finish(self) -> List[PersistentPattern]:
        """Close any open run and return all persistent patterns."""
        self._close_run()
        return list(self.persistent_patterns)

    def _close_run(self) -> None:
        if self._run_frames == 0:
            return

        if self._run_end - self._run_start >= self.params.time_threshold - TIME_EPSILON:
            self.persistent_patterns.append(PersistentPattern(
                start_time=self._run_start,
                end_time=self._run_end,
                frame_count=self._run_frames,
            ))

        self._run_frames = 0


def find_persistent_patterns(
    metrics: Sequence[FrameMetrics],
    params: PatternDetectionParams,
) -> List[PersistentPattern]:
    """Persistent patterns over a timestamp-ordered metrics sequence."""
    persistence = PatternPersistence(params)
    for frame_metrics in metrics:
        persistence.update(frame_metrics)
    return persistence.finish()
