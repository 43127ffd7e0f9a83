# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Errors raised by compliance analysis."""


class AnalysisError(Exception):
    """Base class for errors that abort an analysis run."""
    pass


class EmptyFrameSequence(AnalysisError):
    """Raised when an analysis run is given no frames."""

    def __init__(self) -> None:
        super().__init__("No frames supplied for analysis")


class InvalidFrameGeometry(AnalysisError, ValueError):
    """Raised when frame dimensions are invalid or change during a run."""
    pass


class NonMonotonicTimestamp(AnalysisError, ValueError):
    """Raised when a frame timestamp goes backwards."""

    def __init__(self, index: int, previous: float, current: float) -> None:
        super().__init__(
            f"Frame {index} timestamp {current} is earlier than previous timestamp {previous}"
        )
        self.index = index
        self.previous = previous
        self.current = current


class VideoSourceError(RuntimeError):
    """Raised when frames cannot be read from a video file."""
    pass
