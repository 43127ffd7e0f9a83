# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Frame data structures for compliance analysis."""

from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from pse_compliance.exceptions import InvalidFrameGeometry
from pse_compliance.result import PatternSeverity


def ms_to_timespan(ms: int) -> str:
    """Convert milliseconds to HH:MM:SS.ffffff format."""
    seconds = (ms / 1000.0) % 60
    minutes = int((ms / (1000 * 60)) % 60)
    hours = int((ms / (1000 * 60 * 60)) % 24)
    return f"{hours:02d}:{minutes:02d}:{seconds:09.6f}"


def proportion_to_percentage(proportion: float) -> str:
    """Convert proportion (0-1) to percentage string."""
    return f"{proportion * 100:.2f}%"


@dataclass(frozen=True, eq=False)
class Frame:
    """A decoded video frame with an RGBA pixel buffer."""
    timestamp: float
    width: int
    height: int
    pixels: Union[bytes, bytearray, memoryview, np.ndarray]

    def rgba(self) -> np.ndarray:
        """
        View the pixel buffer as an (H, W, 4) uint8 array.

        Raises:
            InvalidFrameGeometry: If the dimensions are not positive or the
                buffer size does not match them
        """
        if self.width <= 0 or self.height <= 0:
            raise InvalidFrameGeometry(
                f"Frame at {self.timestamp}s has invalid size {self.width}x{self.height}"
            )

        if isinstance(self.pixels, np.ndarray):
            buffer = self.pixels.astype(np.uint8, copy=False).reshape(-1)
        else:
            buffer = np.frombuffer(self.pixels, dtype=np.uint8)

        expected = self.width * self.height * 4
        if buffer.size != expected:
            raise InvalidFrameGeometry(
                f"Frame at {self.timestamp}s has {buffer.size} bytes, "
                f"expected {expected} for {self.width}x{self.height} RGBA"
            )

        return buffer.reshape(self.height, self.width, 4)


@dataclass(frozen=True)
class ZoneMetrics:
    """Aggregated metrics of one grid cell."""
    row: int
    col: int
    x: int
    y: int
    width: int
    height: int
    luminance: float = 0.0
    red_area_proportion: float = 0.0

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class PatternFlag:
    """High-contrast spatial pattern found in a single frame."""
    time: float
    severity: PatternSeverity
    ratio: float

    @property
    def description(self) -> str:
        return (
            f"{self.severity.value.capitalize()} contrast pattern: "
            f"{proportion_to_percentage(self.ratio)} of sampled pixels"
        )

    def to_dict(self) -> dict:
        return {
            "type": "pattern",
            "severity": self.severity.value,
            "description": self.description,
            "time": self.time,
            "ratio": self.ratio,
        }


@dataclass(frozen=True)
class FrameMetrics:
    """Metrics derived once from a single frame."""
    index: int
    timestamp: float
    luminance: float = 0.0
    red_saturation: float = 0.0
    zones: Tuple[ZoneMetrics, ...] = ()
    patterns: Tuple[PatternFlag, ...] = ()

    @property
    def has_high_pattern(self) -> bool:
        return any(p.severity == PatternSeverity.High for p in self.patterns)

    @property
    def pattern_ratio(self) -> float:
        return max((p.ratio for p in self.patterns), default=0.0)

    def to_csv(self) -> str:
        """Convert to CSV row string."""
        return ",".join([
            str(self.index),
            ms_to_timespan(int(round(self.timestamp * 1000))),
            str(round(self.luminance, 6)),
            str(round(self.red_saturation, 6)),
            str(len(self.zones)),
            proportion_to_percentage(self.pattern_ratio),
            self.patterns[0].severity.value if self.patterns else "",
        ])

    @staticmethod
    def csv_columns() -> str:
        """Get CSV header row."""
        columns = [
            "Frame",
            "TimeStamp",
            "AverageLuminance",
            "RedSaturation",
            "Zones",
            "PatternRatio",
            "PatternSeverity",
        ]
        return ",".join(columns)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "Frame": self.index,
            "TimeStamp": self.timestamp,
            "AverageLuminance": self.luminance,
            "RedSaturation": self.red_saturation,
            "Zones": [
                {
                    "Row": z.row,
                    "Col": z.col,
                    "Luminance": z.luminance,
                    "RedAreaProportion": z.red_area_proportion,
                }
                for z in self.zones
            ],
            "Patterns": [p.to_dict() for p in self.patterns],
        }
