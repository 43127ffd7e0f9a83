# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Result types and enums for compliance analysis."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Sequence, Tuple, Union

if TYPE_CHECKING:
    from pse_compliance.frame_data import PatternFlag


COMPLIANT = "WCAG 2.0 compliant"
NON_COMPLIANT = "WCAG 2.0 non-compliant - Risk of photosensitive seizures"


class FlashType(str, Enum):
    """Hazard type of a transition or flash."""
    General = "general"
    Red = "red"


class Direction(str, Enum):
    """Direction of a zone or frame transition."""
    Increase = "increase"
    Decrease = "decrease"


class PatternSeverity(str, Enum):
    """Severity of a detected high-contrast pattern."""
    Medium = "medium"
    High = "high"


@dataclass(frozen=True)
class Flash:
    """A pair of opposite transitions of the same type."""
    time: float
    end_time: float
    type: FlashType

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "endTime": self.end_time,
            "type": self.type.value,
        }


@dataclass(frozen=True)
class PersistentPattern:
    """A run of consecutive high-severity pattern frames lasting long enough to be a hazard."""
    start_time: float
    end_time: float
    frame_count: int = 0
    severity: PatternSeverity = PatternSeverity.High

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def description(self) -> str:
        return (
            f"High-contrast pattern sustained for {self.duration:.2f}s "
            f"({self.frame_count} frames)"
        )

    def to_dict(self) -> dict:
        return {
            "type": "persistent_pattern",
            "severity": self.severity.value,
            "description": self.description,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "frameCount": self.frame_count,
        }


@dataclass(frozen=True)
class DangerousInterval:
    """A rate window whose combined flash count exceeds the limit."""
    start: float
    end: float
    general_count: int = 0
    red_count: int = 0

    @property
    def count(self) -> int:
        return self.general_count + self.red_count

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "generalCount": self.general_count,
            "redCount": self.red_count,
            "count": self.count,
        }


def evaluate_safety(
    max_general: int,
    max_red: int,
    persistent_patterns: Sequence[PersistentPattern],
    max_flashes_per_second: int = 3,
) -> bool:
    """
    Decide the overall verdict.

    Args:
        max_general: Peak general flashes in any rate window
        max_red: Peak red flashes in any rate window
        persistent_patterns: Persistent patterns found in the clip
        max_flashes_per_second: Allowed flashes per window for each type

    Returns:
        True if the clip passes every hazard criterion
    """
    has_persistent = any(p.severity == PatternSeverity.High for p in persistent_patterns)
    return (
        max_general <= max_flashes_per_second
        and max_red <= max_flashes_per_second
        and not has_persistent
    )


def compliance_text(is_safe: bool) -> str:
    """Get the fixed compliance description for a verdict."""
    return COMPLIANT if is_safe else NON_COMPLIANT


@dataclass(frozen=True)
class ComplianceReport:
    """Final result of a compliance analysis run."""
    luminance_data: Tuple[Tuple[float, float], ...] = ()
    duration: float = 0.0
    avg_luminance: float = 0.0
    max_luminance: float = 0.0
    min_luminance: float = 0.0
    general_flash_count: int = 0
    red_flash_count: int = 0
    max_general_flashes_per_second: int = 0
    max_red_flashes_per_second: int = 0
    dangerous_seconds: Tuple[DangerousInterval, ...] = ()
    patterns: Tuple[Union["PatternFlag", PersistentPattern], ...] = ()
    flashes: Tuple[Flash, ...] = ()
    is_safe: bool = True

    @property
    def flash_count(self) -> int:
        return self.general_flash_count + self.red_flash_count

    @property
    def max_flashes_per_second(self) -> int:
        return max(self.max_general_flashes_per_second, self.max_red_flashes_per_second)

    @property
    def compliance(self) -> str:
        return compliance_text(self.is_safe)

    @property
    def persistent_patterns(self) -> List[PersistentPattern]:
        return [p for p in self.patterns if isinstance(p, PersistentPattern)]

    def to_dict(self) -> dict:
        return {
            "luminanceData": [
                {"time": time, "luminance": luminance}
                for time, luminance in self.luminance_data
            ],
            "duration": self.duration,
            "avgLuminance": self.avg_luminance,
            "maxLuminance": self.max_luminance,
            "minLuminance": self.min_luminance,
            "flashCount": self.flash_count,
            "generalFlashCount": self.general_flash_count,
            "redFlashCount": self.red_flash_count,
            "maxFlashesPerSecond": self.max_flashes_per_second,
            "maxGeneralFlashesPerSecond": self.max_general_flashes_per_second,
            "maxRedFlashesPerSecond": self.max_red_flashes_per_second,
            "dangerousSeconds": [d.to_dict() for d in self.dangerous_seconds],
            "patterns": [p.to_dict() for p in self.patterns],
            "flashes": [f.to_dict() for f in self.flashes],
            "isSafe": self.is_safe,
            "compliance": self.compliance,
        }
