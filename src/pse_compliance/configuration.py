# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Configuration for photosensitivity compliance analysis."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


# Rec. 601 luma weights in RGB order
LUMINANCE_WEIGHTS: Tuple[float, float, float] = (0.299, 0.587, 0.114)

# Tolerance for comparing differences of timestamps against time limits
TIME_EPSILON = 1e-9


@dataclass(frozen=True)
class ZoneParams:
    """Parameters for the zone grid and red-dominant classification."""
    zone_width: int = 341
    zone_height: int = 256
    red_saturation_threshold: float = 0.5

    @property
    def min_zone_area(self) -> int:
        return self.zone_width * self.zone_height


@dataclass(frozen=True)
class TransitionParams:
    """Parameters for zone transition detection."""
    max_frame_gap: float = 0.5
    luminance_flash_threshold: float = 0.1
    luminance_dark_threshold: float = 0.8
    red_area_threshold: float = 0.25
    red_change_threshold: float = 0.1
    min_transition_area: int = 341 * 256


@dataclass(frozen=True)
class FlashRateParams:
    """Parameters for flash pairing and the sliding rate window."""
    pairing_window: float = 0.5
    window: float = 1.0
    step: float = 0.1
    max_flashes_per_second: int = 3
    dedup_distance: float = 0.5
    include_final_window: bool = False


@dataclass(frozen=True)
class PatternDetectionParams:
    """Parameters for pattern detection."""
    stride: int = 4
    contrast_threshold: float = 100.0
    medium_ratio: float = 0.3
    high_ratio: float = 0.5
    time_threshold: float = 0.5


@dataclass
class Configuration:
    """Configuration for compliance analysis."""

    # Zone grid (guideline minimum zone)
    zone_width: int = 341
    zone_height: int = 256
    red_saturation_threshold: float = 0.5

    # General (luminance) flash parameters
    max_frame_gap: float = 0.5
    luminance_flash_threshold: float = 0.1
    luminance_dark_threshold: float = 0.8

    # Red flash parameters
    red_area_threshold: float = 0.25
    red_change_threshold: float = 0.1

    # Flash pairing and rate parameters
    pairing_window: float = 0.5
    rate_window: float = 1.0
    rate_step: float = 0.1
    max_flashes_per_second: int = 3
    dedup_distance: float = 0.5
    include_final_window: bool = False

    # Pattern detection parameters
    pattern_stride: int = 4
    pattern_contrast_threshold: float = 100.0
    pattern_medium_ratio: float = 0.3
    pattern_high_ratio: float = 0.5
    pattern_time_threshold: float = 0.5

    # Video analyser settings
    sample_fps: float = 10.0
    extraction_workers: int = 1

    @classmethod
    def from_json(cls, path: str) -> "Configuration":
        """Load configuration from appsettings.json in the given directory."""
        config_path = Path(path) / "appsettings.json"

        if not config_path.exists():
            return cls()

        with open(config_path, "r") as f:
            # Strip single-line comments
            lines = []
            for line in f.read().split("\n"):
                comment_idx = line.find("//")
                if comment_idx >= 0:
                    line = line[:comment_idx]
                lines.append(line)
            data = json.loads("\n".join(lines))

        config = cls()

        if "Zones" in data:
            zones = data["Zones"]
            config.zone_width = zones.get("Width", config.zone_width)
            config.zone_height = zones.get("Height", config.zone_height)

        if "Luminance" in data:
            lum = data["Luminance"]
            config.luminance_flash_threshold = lum.get(
                "RelativeLuminanceFlashThreshold", config.luminance_flash_threshold
            )
            config.luminance_dark_threshold = lum.get(
                "RelativeDarkLuminanceThreshold", config.luminance_dark_threshold
            )

        if "RedSaturation" in data:
            red = data["RedSaturation"]
            config.red_saturation_threshold = red.get(
                "SaturationThreshold", config.red_saturation_threshold
            )
            config.red_area_threshold = red.get("AreaProportion", config.red_area_threshold)
            config.red_change_threshold = red.get("ChangeThreshold", config.red_change_threshold)

        if "Transitions" in data:
            config.max_frame_gap = data["Transitions"].get("MaxFrameGap", config.max_frame_gap)

        if "FlashRate" in data:
            fr = data["FlashRate"]
            config.pairing_window = fr.get("PairingWindow", config.pairing_window)
            config.rate_window = fr.get("Window", config.rate_window)
            config.rate_step = fr.get("Step", config.rate_step)
            config.max_flashes_per_second = fr.get(
                "MaxFlashesPerSecond", config.max_flashes_per_second
            )
            config.dedup_distance = fr.get("DedupDistance", config.dedup_distance)
            config.include_final_window = fr.get(
                "IncludeFinalWindow", config.include_final_window
            )

        if "PatternDetection" in data:
            pd = data["PatternDetection"]
            config.pattern_stride = pd.get("Stride", config.pattern_stride)
            config.pattern_contrast_threshold = pd.get(
                "ContrastThreshold", config.pattern_contrast_threshold
            )
            config.pattern_medium_ratio = pd.get("MediumRatio", config.pattern_medium_ratio)
            config.pattern_high_ratio = pd.get("HighRatio", config.pattern_high_ratio)
            config.pattern_time_threshold = pd.get("TimeThreshold", config.pattern_time_threshold)

        if "VideoAnalyser" in data:
            va = data["VideoAnalyser"]
            config.sample_fps = va.get("SampleFps", config.sample_fps)
            config.extraction_workers = va.get("ExtractionWorkers", config.extraction_workers)

        return config

    @property
    def min_zone_area(self) -> int:
        """Pixel area of one full minimum zone."""
        return self.zone_width * self.zone_height

    def get_zone_params(self) -> ZoneParams:
        """Get zone grid parameters."""
        return ZoneParams(
            zone_width=self.zone_width,
            zone_height=self.zone_height,
            red_saturation_threshold=self.red_saturation_threshold,
        )

    def get_transition_params(self) -> TransitionParams:
        """Get transition detection parameters."""
        return TransitionParams(
            max_frame_gap=self.max_frame_gap,
            luminance_flash_threshold=self.luminance_flash_threshold,
            luminance_dark_threshold=self.luminance_dark_threshold,
            red_area_threshold=self.red_area_threshold,
            red_change_threshold=self.red_change_threshold,
            min_transition_area=self.min_zone_area,
        )

    def get_flash_rate_params(self) -> FlashRateParams:
        """Get flash pairing and rate window parameters."""
        return FlashRateParams(
            pairing_window=self.pairing_window,
            window=self.rate_window,
            step=self.rate_step,
            max_flashes_per_second=self.max_flashes_per_second,
            dedup_distance=self.dedup_distance,
            include_final_window=self.include_final_window,
        )

    def get_pattern_detection_params(self) -> PatternDetectionParams:
        """Get pattern detection parameters."""
        return PatternDetectionParams(
            stride=self.pattern_stride,
            contrast_threshold=self.pattern_contrast_threshold,
            medium_ratio=self.pattern_medium_ratio,
            high_ratio=self.pattern_high_ratio,
            time_threshold=self.pattern_time_threshold,
        )
