# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""
PSE-Compliance: Photosensitivity compliance analysis for decoded video frames.

Checks a frame sequence for:
- General (luminance) flashes
- Red flashes
- Persistent high-contrast patterns

and reports whether the video stays within the three-flashes-per-second limit.
"""

from pse_compliance.video_analyser import ComplianceAnalyser, AnalysisStage
from pse_compliance.configuration import Configuration
from pse_compliance.frame_data import Frame, FrameMetrics
from pse_compliance.result import ComplianceReport, DangerousInterval, PersistentPattern
from pse_compliance.exceptions import (
    AnalysisError,
    EmptyFrameSequence,
    InvalidFrameGeometry,
    NonMonotonicTimestamp,
)

__version__ = "1.0.0"
__all__ = [
    "ComplianceAnalyser",
    "AnalysisStage",
    "Configuration",
    "Frame",
    "FrameMetrics",
    "ComplianceReport",
    "DangerousInterval",
    "PersistentPattern",
    "AnalysisError",
    "EmptyFrameSequence",
    "InvalidFrameGeometry",
    "NonMonotonicTimestamp",
]
