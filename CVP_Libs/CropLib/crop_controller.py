"""
Crop Controller for CV Photo Studio.

Owns the interactive crop rectangle shown over the displayed image and turns
it into a new raster.

Classes:
    CropController: Region, gesture state and transform mutators

Functions:
    apply_crop: Rasterize a crop region of an artifact
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence, Tuple, Union

from PIL import Image

from CVP_Libs.CropLib.gesture_state import (
    IDLE_GESTURE,
    GestureMode,
    TouchGestureState,
    gesture_end,
    gesture_move,
    gesture_start,
)
from CVP_Libs.GeometryLib.geometry import (
    CropRegion,
    Point,
    clamp_region,
    clamp_zoom,
    compute_crop_source_rect,
    crop_output_size,
    default_region,
    next_rotation,
    normalize_rotation,
    resize_region,
)
from CVP_Libs.ImageEditingLib.image_models import (
    DEFAULT_ASPECT_RATIO,
    AspectRatio,
    ImageArtifact,
    get_aspect_ratio,
)
from CVP_Libs.constants import CROP_FILL_COLOR, DEFAULT_CROP_VIEWPORT, ZOOM_STEP

logger = logging.getLogger(__name__)

# PIL rotates counter-clockwise; regions rotate clockwise
_CLOCKWISE_TRANSPOSE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def apply_crop(
    artifact: ImageArtifact,
    region: CropRegion,
    display_size: Tuple[float, float],
    aspect_ratio: Union[str, AspectRatio] = DEFAULT_ASPECT_RATIO,
) -> ImageArtifact:
    """
    Render a crop region of an artifact into a new raster.

    The source sub-rectangle is drawn filling an output of fixed size
    (long edge 400 px, exact aspect ratio), rotated clockwise about the
    centre and scaled by zoom about the centre. Uncovered pixels are black.

    Args:
        artifact: Source artifact shown at display_size
        region: Crop region in display pixels
        display_size: (width, height) the artifact is displayed at
        aspect_ratio: Output aspect ratio

    Returns:
        New RGB ImageArtifact labelled "crop"

    Raises:
        ArtifactReleasedError: If the artifact was already released
    """
    ratio = get_aspect_ratio(aspect_ratio)
    source = artifact.pixels()

    rect = compute_crop_source_rect(region, display_size, source.size)
    out_w, out_h = crop_output_size(ratio.value)

    zoom = clamp_zoom(region.zoom)
    draw_size = (max(1, round(out_w * zoom)), max(1, round(out_h * zoom)))
    drawn = source.crop(rect.as_box()).convert("RGB").resize(draw_size, Image.Resampling.LANCZOS)

    rotation = normalize_rotation(region.rotation_degrees)
    if rotation in _CLOCKWISE_TRANSPOSE:
        drawn = drawn.transpose(_CLOCKWISE_TRANSPOSE[rotation])

    output = Image.new("RGB", (out_w, out_h), CROP_FILL_COLOR)
    output.paste(drawn, ((out_w - drawn.width) // 2, (out_h - drawn.height) // 2))

    logger.info(
        f"Cropped {artifact.artifact_id} source {rect.as_box()} -> {out_w}x{out_h} "
        f"(zoom {zoom:.2f}, rotation {rotation})"
    )
    return ImageArtifact(output, label="crop")


class CropController:
    """
    Interactive crop state for one displayed image.

    The container is the on-screen size of the displayed image; the region
    is always kept inside it.
    """

    def __init__(
        self,
        container_size: Tuple[float, float] = DEFAULT_CROP_VIEWPORT,
        aspect_ratio: Union[str, AspectRatio] = DEFAULT_ASPECT_RATIO,
        free_form: bool = False,
    ):
        width, height = container_size
        if width <= 0 or height <= 0:
            raise ValueError(f"container_size must be positive, got {container_size}")
        self._container: Tuple[float, float] = (float(width), float(height))
        self._aspect_ratio = get_aspect_ratio(aspect_ratio)
        self.free_form = free_form
        self._gesture: TouchGestureState = IDLE_GESTURE
        self._region = default_region(width, height, self._aspect_ratio.value)

    @property
    def region(self) -> CropRegion:
        return self._region

    @property
    def gesture(self) -> TouchGestureState:
        return self._gesture

    @property
    def mode(self) -> GestureMode:
        return self._gesture.mode

    @property
    def aspect_ratio(self) -> AspectRatio:
        return self._aspect_ratio

    @property
    def container_size(self) -> Tuple[float, float]:
        return self._container

    # Gestures ---------------------------------------------------------------

    def on_gesture_start(self, pointers: Sequence[Point]) -> None:
        self._gesture = gesture_start(self._gesture, self._region, pointers)

    def on_gesture_move(self, pointers: Sequence[Point]) -> None:
        self._gesture, self._region = gesture_move(
            self._gesture, self._region, pointers, self._container
        )

    def on_gesture_end(self, remaining: Sequence[Point]) -> None:
        self._gesture = gesture_end(self._gesture, self._region, remaining)

    # Direct mutators --------------------------------------------------------

    def set_zoom(self, delta: float) -> float:
        """Add delta to the zoom, clamped to 0.5-3.0. Returns the new zoom."""
        self._region = replace(self._region, zoom=clamp_zoom(self._region.zoom + delta))
        return self._region.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(ZOOM_STEP)

    def zoom_out(self) -> float:
        return self.set_zoom(-ZOOM_STEP)

    def rotate(self) -> int:
        """Rotate 90 degrees clockwise. Returns the new rotation."""
        self._region = replace(
            self._region, rotation_degrees=next_rotation(self._region.rotation_degrees)
        )
        return self._region.rotation_degrees

    def reset(self) -> None:
        """Restore the default centred region with zoom 1 and no rotation."""
        self._gesture = IDLE_GESTURE
        self._region = default_region(*self._container, self._aspect_ratio.value)

    def resize(self, width: float, height: Optional[float] = None) -> CropRegion:
        """
        Resize the region. Height is ignored unless free-form is enabled.
        """
        self._region = resize_region(
            self._region,
            width,
            self._container[0],
            self._container[1],
            self._aspect_ratio.value,
            height=height,
            free_form=self.free_form,
        )
        return self._region

    def set_aspect_ratio(self, aspect_ratio: Union[str, AspectRatio]) -> None:
        """Select a new ratio and re-centre the region at the default size.

        Zoom and rotation are kept.
        """
        self._aspect_ratio = get_aspect_ratio(aspect_ratio)
        fresh = default_region(*self._container, self._aspect_ratio.value)
        self._region = replace(
            fresh, zoom=self._region.zoom, rotation_degrees=self._region.rotation_degrees
        )
        logger.debug(f"Aspect ratio set to {self._aspect_ratio}")

    def set_container_size(self, width: float, height: float) -> None:
        """
        Update the displayed image size, scaling the region with it.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"container size must be positive, got {(width, height)}")
        old_w, old_h = self._container
        scale = min(width / old_w, height / old_h)
        scaled = replace(
            self._region,
            x=self._region.x * width / old_w,
            y=self._region.y * height / old_h,
            width=self._region.width * scale,
            height=self._region.height * scale,
        )
        self._container = (float(width), float(height))
        self._region = clamp_region(scaled, width, height)

    def set_region(self, region: CropRegion) -> None:
        """
        Install a region, e.g. one restored when re-entering the crop stage.

        The region is fitted to the container. Unless free-form is enabled
        its height follows the selected ratio. An oversized region shrinks
        to fit before it is moved inside.
        """
        normalized = replace(
            region,
            zoom=clamp_zoom(region.zoom),
            rotation_degrees=normalize_rotation(region.rotation_degrees),
        )
        self._region = resize_region(
            normalized,
            region.width,
            self._container[0],
            self._container[1],
            self._aspect_ratio.value,
            height=region.height,
            free_form=self.free_form,
        )

    def apply_crop(self, artifact: ImageArtifact) -> ImageArtifact:
        """Rasterize the current region of an artifact displayed in this container."""
        return apply_crop(artifact, self._region, self._container, self._aspect_ratio)
