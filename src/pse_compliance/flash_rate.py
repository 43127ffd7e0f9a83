# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Sliding-window flash rate analysis."""

import logging
from bisect import bisect_left, insort
from dataclasses import dataclass, field
from typing import List, Sequence

from pse_compliance.configuration import FlashRateParams
from pse_compliance.result import DangerousInterval, Flash


logger = logging.getLogger(__name__)

# Decimal places kept for window positions
WINDOW_PRECISION = 10


@dataclass
class RateAnalysis:
    """Peak flash rates and dangerous intervals of a clip."""
    max_general: int = 0
    max_red: int = 0
    dangerous_intervals: List[DangerousInterval] = field(default_factory=list)


class IntervalIndex:
    """Sorted start times of recorded intervals for proximity lookups."""

    def __init__(self) -> None:
        self._starts: List[float] = []

    def __len__(self) -> int:
        return len(self._starts)

    def has_near(self, start: float, distance: float) -> bool:
        """True if a recorded start lies strictly within distance of start."""
        pos = bisect_left(self._starts, start)
        if pos < len(self._starts) and abs(self._starts[pos] - start) < distance:
            return True
        if pos > 0 and abs(self._starts[pos - 1] - start) < distance:
            return True
        return False

    def add(self, start: float) -> None:
        insort(self._starts, start)


def count_in_window(times: Sequence[float], start: float, end: float) -> int:
    """Number of sorted times in [start, end)."""
    return bisect_left(times, end) - bisect_left(times, start)


class FlashRateAnalysis:
    """
    Slides a fixed-width window over the clip to find peak flash rates.

    Window positions are t = k * step for k = 0, 1, ... while t < duration,
    or t <= duration when include_final_window is set. Each window counts
    flash start times in [t, t + window).
    """

    def __init__(self, params: FlashRateParams):
        self.params = params

    def window_starts(self, duration: float) -> List[float]:
        """Window start positions for a clip of the given duration."""
        starts = []
        k = 0
        while True:
            t = round(k * self.params.step, WINDOW_PRECISION)
            if t > duration or (t == duration and not self.params.include_final_window):
                break
            starts.append(t)
            k += 1
        return starts

    def analyse(
        self,
        general_flashes: Sequence[Flash],
        red_flashes: Sequence[Flash],
        duration: float,
    ) -> RateAnalysis:
        """
        Compute peak rates and dangerous intervals.

        Args:
            general_flashes: General flashes in time order
            red_flashes: Red flashes in time order
            duration: Clip duration in seconds

        Returns:
            RateAnalysis with per-type maxima and deduplicated intervals
        """
        result = RateAnalysis()
        if not general_flashes and not red_flashes:
            return result

        general_times = sorted(f.time for f in general_flashes)
        red_times = sorted(f.time for f in red_flashes)
        recorded = IntervalIndex()

        for t in self.window_starts(duration):
            end = round(t + self.params.window, WINDOW_PRECISION)
            general_count = count_in_window(general_times, t, end)
            red_count = count_in_window(red_times, t, end)

            result.max_general = max(result.max_general, general_count)
            result.max_red = max(result.max_red, red_count)

            if general_count + red_count > self.params.max_flashes_per_second:
                if recorded.has_near(t, self.params.dedup_distance):
                    continue
                recorded.add(t)
                result.dangerous_intervals.append(DangerousInterval(
                    start=round(t, 1),
                    end=round(end, 1),
                    general_count=general_count,
                    red_count=red_count,
                ))

        logger.debug(
            "Flash rate: max general %d, max red %d, %d dangerous intervals",
            result.max_general, result.max_red, len(result.dangerous_intervals),
        )
        return result
