# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Tests for Configuration class."""

import pytest

from pse_compliance.configuration import (
    Configuration,
    FlashRateParams,
    PatternDetectionParams,
    TransitionParams,
    ZoneParams,
)


class TestConfiguration:
    """Test Configuration class."""

    def test_default_values(self):
        """Test default configuration values."""
        config = Configuration()

        # Zone defaults
        assert config.zone_width == 341
        assert config.zone_height == 256
        assert config.min_zone_area == 341 * 256

        # Flash thresholds
        assert config.luminance_flash_threshold == 0.1
        assert config.luminance_dark_threshold == 0.8
        assert config.red_area_threshold == 0.25
        assert config.red_change_threshold == 0.1

        # Rate window
        assert config.rate_window == 1.0
        assert config.rate_step == 0.1
        assert config.max_flashes_per_second == 3
        assert config.include_final_window is False

        # Pattern detection
        assert config.pattern_stride == 4
        assert config.pattern_contrast_threshold == 100.0

        assert config.sample_fps == 10.0
        assert config.extraction_workers == 1

    def test_get_zone_params(self):
        """Test getting zone parameters."""
        params = Configuration(zone_width=10, zone_height=5).get_zone_params()

        assert isinstance(params, ZoneParams)
        assert params.zone_width == 10
        assert params.zone_height == 5
        assert params.min_zone_area == 50
        assert params.red_saturation_threshold == 0.5

    def test_get_transition_params(self):
        """Test transition parameters carry the minimum zone area."""
        params = Configuration(zone_width=10, zone_height=5).get_transition_params()

        assert isinstance(params, TransitionParams)
        assert params.min_transition_area == 50
        assert params.max_frame_gap == 0.5

    def test_get_flash_rate_params(self):
        """Test getting flash rate parameters."""
        params = Configuration(include_final_window=True).get_flash_rate_params()

        assert isinstance(params, FlashRateParams)
        assert params.pairing_window == 0.5
        assert params.window == 1.0
        assert params.dedup_distance == 0.5
        assert params.include_final_window is True

    def test_get_pattern_detection_params(self):
        """Test getting pattern detection parameters."""
        params = Configuration().get_pattern_detection_params()

        assert isinstance(params, PatternDetectionParams)
        assert params.medium_ratio == 0.3
        assert params.high_ratio == 0.5
        assert params.time_threshold == 0.5

    def test_params_are_immutable(self):
        """Test parameter groups cannot be modified."""
        params = Configuration().get_zone_params()

        with pytest.raises(AttributeError):
            params.zone_width = 1


class TestConfigurationFromJson:
    """Test loading appsettings.json."""

    def test_missing_file_gives_defaults(self, tmp_path):
        """Test a directory without appsettings.json."""
        config = Configuration.from_json(str(tmp_path))

        assert config == Configuration()

    def test_load_sections(self, tmp_path):
        """Test values are read from each section."""
        (tmp_path / "appsettings.json").write_text(
            """{
                // zone geometry
                "Zones": {"Width": 100, "Height": 50},
                "Luminance": {"RelativeLuminanceFlashThreshold": 0.2},
                "RedSaturation": {"AreaProportion": 0.3, "ChangeThreshold": 0.15},
                "Transitions": {"MaxFrameGap": 0.25},
                "FlashRate": {"Step": 0.05, "IncludeFinalWindow": true},
                "PatternDetection": {"Stride": 2, "HighRatio": 0.6},
                "VideoAnalyser": {"SampleFps": 25, "ExtractionWorkers": 4}
            }"""
        )

        config = Configuration.from_json(str(tmp_path))

        assert config.zone_width == 100
        assert config.zone_height == 50
        assert config.luminance_flash_threshold == 0.2
        assert config.luminance_dark_threshold == 0.8
        assert config.red_area_threshold == 0.3
        assert config.red_change_threshold == 0.15
        assert config.max_frame_gap == 0.25
        assert config.rate_step == 0.05
        assert config.include_final_window is True
        assert config.pattern_stride == 2
        assert config.pattern_high_ratio == 0.6
        assert config.sample_fps == 25
        assert config.extraction_workers == 4
