# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Shared fixtures for compliance analysis tests."""

import numpy as np
import pytest

from pse_compliance.configuration import Configuration
from pse_compliance.frame_data import Frame


@pytest.fixture
def make_frame():
    """Factory for solid-color RGBA frames."""
    def _make_frame(timestamp, rgb=(0, 0, 0), width=8, height=8):
        pixels = np.zeros((height, width, 4), dtype=np.uint8)
        pixels[:, :, :3] = rgb
        pixels[:, :, 3] = 255
        return Frame(timestamp=timestamp, width=width, height=height, pixels=pixels)
    return _make_frame


@pytest.fixture
def small_zone_config():
    """Configuration with 4x4 zones so 8x8 frames hold four zones."""
    return Configuration(zone_width=4, zone_height=4)
