"""
CropLib - Interactive crop state and rasterization

The gesture state machine and controller are toolkit independent; the Qt
canvas widget lives in crop_canvas_widget and is imported on demand.
"""

from CVP_Libs.CropLib.gesture_state import (
    IDLE_GESTURE,
    GestureMode,
    TouchGestureState,
    gesture_end,
    gesture_move,
    gesture_start,
)
from CVP_Libs.CropLib.crop_controller import CropController, apply_crop

__all__ = [
    "IDLE_GESTURE",
    "GestureMode",
    "TouchGestureState",
    "gesture_end",
    "gesture_move",
    "gesture_start",
    "CropController",
    "apply_crop",
]
