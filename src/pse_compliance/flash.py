# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Pairing of frame transitions into flashes."""

from typing import List, Sequence

from pse_compliance.configuration import TIME_EPSILON
from pse_compliance.result import Flash, FlashType
from pse_compliance.transition_detection import FrameTransition


def pair_transitions(
    transitions: Sequence[FrameTransition],
    flash_type: FlashType,
    pairing_window: float = 0.5,
) -> List[Flash]:
    """
    Pair adjacent opposite-direction transitions into flashes.

    Transitions of other types are ignored. Pairing is greedy: two
    adjacent transitions form a flash when their directions differ and the
    second follows the first within the pairing window; both are then
    consumed. A transition that cannot be paired with its successor is
    dropped and the scan moves on by one.

    Args:
        transitions: Frame transitions in time order
        flash_type: Hazard type to pair
        pairing_window: Maximum seconds between the two transitions

    Returns:
        Flashes in time order
    """
    stream = [t for t in transitions if t.type == flash_type]
    flashes: List[Flash] = []

    i = 0
    while i < len(stream) - 1:
        first = stream[i]
        second = stream[i + 1]

        if (
            first.direction != second.direction
            and second.time - first.time <= pairing_window + TIME_EPSILON
        ):
            flashes.append(Flash(time=first.time, end_time=second.time, type=flash_type))
            i += 2
        else:
            i += 1

    return flashes
