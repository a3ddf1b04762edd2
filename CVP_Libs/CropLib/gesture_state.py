"""
Pointer gesture state machine for the crop overlay.

Modes:
    IDLE      no gesture in progress
    DRAGGING  one pointer moving the crop rectangle
    PINCHING  two pointers changing the zoom

Transitions:
    IDLE     -> DRAGGING  one pointer down inside the crop rectangle
    IDLE     -> PINCHING  two or more pointers down
    DRAGGING -> PINCHING  a second pointer is added
    PINCHING -> DRAGGING  one pointer lifted, drag re-anchored to the other
    any      -> IDLE      all pointers lifted

Every function is pure: it takes the current state and region and returns
new values. Pointers are (x, y) tuples in display pixels, in the order the
platform reports them; only the first two are used for pinching.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence, Tuple

from CVP_Libs.GeometryLib.geometry import (
    CropRegion,
    Point,
    clamp_region,
    clamp_zoom,
    distance,
    pinch_scale_factor,
    point_in_region,
)

logger = logging.getLogger(__name__)


class GestureMode(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    PINCHING = "pinching"


@dataclass(frozen=True)
class TouchGestureState:
    """Ephemeral state of an in-progress gesture.

    Attributes:
        mode: Current interaction mode
        pointer_count: Number of pointers down
        start_positions: Pointer positions when the current mode began
        last_distance: Last inter-pointer distance (pinching only)
        drag_offset: Pointer minus region origin (dragging only)
    """
    mode: GestureMode = GestureMode.IDLE
    pointer_count: int = 0
    start_positions: Tuple[Point, ...] = ()
    last_distance: float = 0.0
    drag_offset: Point = (0.0, 0.0)

    @property
    def is_active(self) -> bool:
        return self.mode is not GestureMode.IDLE


IDLE_GESTURE = TouchGestureState()


def _begin_drag(region: CropRegion, pointer: Point, pointer_count: int) -> TouchGestureState:
    return TouchGestureState(
        mode=GestureMode.DRAGGING,
        pointer_count=pointer_count,
        start_positions=(tuple(pointer),),
        drag_offset=(pointer[0] - region.x, pointer[1] - region.y),
    )


def _begin_pinch(pointers: Sequence[Point]) -> TouchGestureState:
    first, second = tuple(pointers[0]), tuple(pointers[1])
    return TouchGestureState(
        mode=GestureMode.PINCHING,
        pointer_count=len(pointers),
        start_positions=(first, second),
        last_distance=distance(first, second),
    )


def gesture_start(state: TouchGestureState, region: CropRegion,
                  pointers: Sequence[Point]) -> TouchGestureState:
    """
    Handle pointers going down.

    One pointer inside the crop rectangle starts a drag; one pointer outside
    it is ignored. Two or more pointers start (or restart) a pinch,
    replacing any drag in progress.
    """
    if len(pointers) >= 2:
        new_state = _begin_pinch(pointers)
    elif len(pointers) == 1 and point_in_region(pointers[0], region):
        new_state = _begin_drag(region, pointers[0], 1)
    elif len(pointers) == 1:
        new_state = replace(state, pointer_count=1) if state.is_active else IDLE_GESTURE
    else:
        new_state = IDLE_GESTURE

    if new_state.mode is not state.mode:
        logger.debug(f"Gesture {state.mode.value} -> {new_state.mode.value}")
    return new_state


def gesture_move(
    state: TouchGestureState,
    region: CropRegion,
    pointers: Sequence[Point],
    container_size: Tuple[float, float],
) -> Tuple[TouchGestureState, CropRegion]:
    """
    Handle pointer movement.

    Dragging moves the region origin to pointer - offset and clamps it into
    the container. Pinching scales the zoom by the distance ratio, clamped
    to the zoom bounds. A zero previous distance leaves the zoom unchanged.
    """
    if state.mode is GestureMode.DRAGGING and pointers:
        px, py = pointers[0]
        ox, oy = state.drag_offset
        moved = replace(region, x=px - ox, y=py - oy)
        return state, clamp_region(moved, container_size[0], container_size[1])

    if state.mode is GestureMode.PINCHING and len(pointers) >= 2:
        new_distance = distance(pointers[0], pointers[1])
        factor = pinch_scale_factor(state.last_distance, new_distance)
        zoomed = replace(region, zoom=clamp_zoom(region.zoom * factor))
        return replace(state, last_distance=new_distance), zoomed

    return state, region


def gesture_end(state: TouchGestureState, region: CropRegion,
                remaining: Sequence[Point]) -> TouchGestureState:
    """
    Handle pointers being lifted.

    Args:
        state: Current gesture state
        region: Current crop region (used to re-anchor a demoted pinch)
        remaining: Pointers still down after the lift
    """
    if not remaining:
        new_state = IDLE_GESTURE
    elif state.mode is GestureMode.PINCHING and len(remaining) == 1:
        new_state = _begin_drag(region, remaining[0], 1)
    elif state.mode is GestureMode.PINCHING:
        new_state = _begin_pinch(remaining)
    else:
        new_state = replace(state, pointer_count=len(remaining))

    if new_state.mode is not state.mode:
        logger.debug(f"Gesture {state.mode.value} -> {new_state.mode.value}")
    return new_state
