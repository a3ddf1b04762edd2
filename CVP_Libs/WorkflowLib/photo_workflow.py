"""
Photo Workflow Orchestrator.

Sequences the pipeline stages as a linear state machine

    capture -> crop -> enhance -> template -> final

and owns the one current artifact produced by each stage.

Ownership rules:
    - Installing a new artifact for a stage releases the one it replaces.
    - A new upstream artifact invalidates (and releases) every downstream one.
    - reset_workflow() and close() release everything. An artifact the
      outstanding operation reads is released when that operation ends.

Stage operations are coroutines. Raster work runs on a single worker thread
and only one operation can be outstanding at a time; go_next() is refused
while one is. Failures derived from PhotoPipelineError are logged, recorded
as a Notice and leave the current artifacts untouched.

Example:
    >>> workflow = PhotoWorkflow(on_complete=print)
    >>> await workflow.upload_photo(data, "image/jpeg")
    >>> workflow.go_next()
    True
    >>> await workflow.apply_crop()
"""

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import cv2
from transitions import Machine

from CVP_Libs.CaptureLib.capture_source import (
    CaptureConstraints,
    StreamHandle,
    capture_frame,
    start_capture,
    stop_capture,
)
from CVP_Libs.CropLib.crop_controller import CropController
from CVP_Libs.GeometryLib.geometry import CropRegion, fit_within
from CVP_Libs.ImageEditingLib.image_models import FilterSettings, ImageArtifact, PipelineStage
from CVP_Libs.ImageEditingLib.photo_templates import get_template
from CVP_Libs.NodesLib.crop_node import create_crop_node
from CVP_Libs.NodesLib.enhance_node import create_enhance_node
from CVP_Libs.NodesLib.image_import_node import create_image_import_node
from CVP_Libs.NodesLib.output_node import create_output_node
from CVP_Libs.NodesLib.template_node import create_template_node
from CVP_Libs.WorkflowLib.node_executors import NodeExecutorRegistry, get_default_registry
from CVP_Libs.config import StudioConfig
from CVP_Libs.constants import DEFAULT_BACKGROUND_COLOR
from CVP_Libs.exceptions import ExportFailed, PhotoPipelineError

logger = logging.getLogger(__name__)

# Stages that hold an artifact, in pipeline order
ARTIFACT_STAGES = (
    PipelineStage.CAPTURE,
    PipelineStage.CROP,
    PipelineStage.ENHANCE,
    PipelineStage.TEMPLATE,
)

STATES = [stage.value for stage in PipelineStage]

TRANSITIONS = [
    {"trigger": "advance", "source": "capture", "dest": "crop",
     "conditions": ["has_captured", "is_idle"]},
    {"trigger": "advance", "source": "crop", "dest": "enhance",
     "conditions": ["has_cropped", "is_idle"]},
    {"trigger": "advance", "source": "enhance", "dest": "template",
     "conditions": ["has_enhanced", "is_idle"]},
    {"trigger": "advance", "source": "template", "dest": "final",
     "conditions": ["has_templated", "is_idle"],
     "before": "_export", "after": "_notify_complete"},
    {"trigger": "retreat", "source": "crop", "dest": "capture", "conditions": "is_idle"},
    {"trigger": "retreat", "source": "enhance", "dest": "crop", "conditions": "is_idle"},
    {"trigger": "retreat", "source": "template", "dest": "enhance", "conditions": "is_idle"},
    {"trigger": "restart", "source": "*", "dest": "capture"},
]


@dataclass(frozen=True)
class Notice:
    """User-visible message about a recoverable failure.

    Attributes:
        stage: Stage the workflow was in
        message: Text suitable for showing to the user
        detail: Technical description for logs
        error_type: Name of the exception class
    """
    stage: str
    message: str
    detail: str = ""
    error_type: str = ""


class PhotoWorkflow:
    """
    Linear photo pipeline state machine.

    Attributes:
        state: Current stage name (set by the state machine)
        notices: Notices recorded so far, oldest first
        exported_path: Where the final photo was written, once exported
    """

    def __init__(
        self,
        config: Optional[StudioConfig] = None,
        registry: Optional[NodeExecutorRegistry] = None,
        on_complete: Optional[Callable[[Path], None]] = None,
        on_notice: Optional[Callable[[Notice], None]] = None,
        capture_factory: Callable[[int], Any] = cv2.VideoCapture,
    ):
        self.config = config or StudioConfig()
        self.registry = registry or get_default_registry()
        self.on_complete = on_complete
        self.on_notice = on_notice
        self.capture_factory = capture_factory

        self.notices: List[Notice] = []
        self.exported_path: Optional[Path] = None

        self._artifacts: Dict[PipelineStage, Optional[ImageArtifact]] = {
            stage: None for stage in ARTIFACT_STAGES
        }
        self._busy = False
        self._closed = False
        self._generation = 0
        # Inputs of the outstanding operation; releasing them waits for it
        self._in_use: List[ImageArtifact] = []
        self._deferred: List[ImageArtifact] = []
        self._stream: Optional[StreamHandle] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="cvp-raster")
        self._camera_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="cvp-camera")
        self._crop_controller = CropController(self.config.crop_viewport)

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=PipelineStage.CAPTURE.value,
            auto_transitions=False,
            ignore_invalid_triggers=True,
        )

    # ------------------------------------------------------------------
    # State and artifacts
    # ------------------------------------------------------------------

    @property
    def stage(self) -> PipelineStage:
        return PipelineStage(self.state)

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def crop_controller(self) -> CropController:
        return self._crop_controller

    @property
    def camera_active(self) -> bool:
        return self._stream is not None and self._stream.is_active

    def artifact(self, stage: PipelineStage) -> Optional[ImageArtifact]:
        return self._artifacts[stage]

    @property
    def captured(self) -> Optional[ImageArtifact]:
        return self._artifacts[PipelineStage.CAPTURE]

    @property
    def cropped(self) -> Optional[ImageArtifact]:
        return self._artifacts[PipelineStage.CROP]

    @property
    def enhanced(self) -> Optional[ImageArtifact]:
        return self._artifacts[PipelineStage.ENHANCE]

    @property
    def templated(self) -> Optional[ImageArtifact]:
        return self._artifacts[PipelineStage.TEMPLATE]

    # Transition conditions
    def has_captured(self) -> bool:
        return self.captured is not None

    def has_cropped(self) -> bool:
        return self.cropped is not None

    def has_enhanced(self) -> bool:
        return self.enhanced is not None

    def has_templated(self) -> bool:
        return self.templated is not None

    def is_idle(self) -> bool:
        return not self._busy

    def _install(self, stage: PipelineStage, artifact: ImageArtifact) -> None:
        """Make artifact current for stage, releasing what it supersedes."""
        previous = self._artifacts[stage]
        if previous is not None and previous is not artifact:
            self._discard(previous)
        self._artifacts[stage] = artifact

        downstream = ARTIFACT_STAGES[ARTIFACT_STAGES.index(stage) + 1:]
        for later in downstream:
            stale = self._artifacts[later]
            if stale is not None:
                self._discard(stale)
                self._artifacts[later] = None
                logger.debug(f"Invalidated {later.value} artifact {stale.artifact_id}")

        if stage is PipelineStage.CAPTURE:
            self._prepare_crop(artifact)
        logger.info(f"Installed {stage.value} artifact {artifact.artifact_id} {artifact.size}")

    def _prepare_crop(self, artifact: ImageArtifact) -> None:
        """Size the crop container to the captured image shown in the viewport."""
        view_w, view_h = self.config.crop_viewport
        self._crop_controller.set_container_size(*fit_within(artifact.width, artifact.height, view_w, view_h))
        self._crop_controller.reset()

    def _discard(self, artifact: ImageArtifact) -> None:
        """Release an artifact, or once the outstanding operation is done if it reads it."""
        if any(artifact is used for used in self._in_use):
            self._deferred.append(artifact)
        else:
            artifact.release()

    def _release_all(self) -> None:
        for stage in ARTIFACT_STAGES:
            current = self._artifacts[stage]
            if current is not None:
                self._discard(current)
            self._artifacts[stage] = None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def go_next(self) -> bool:
        """
        Advance one stage if its guard holds.

        Returns False (and changes nothing) when the current stage has no
        artifact, an operation is outstanding, the stage is final, or the
        export on entering final fails.
        """
        try:
            moved = self.advance()
        except PhotoPipelineError as e:
            self._report(e)
            return False
        if not moved:
            logger.debug(f"go_next refused in stage {self.state}")
        return bool(moved)

    def go_previous(self) -> bool:
        """Move back one stage, keeping every artifact. Final has no previous."""
        return bool(self.retreat())

    def reset_workflow(self) -> bool:
        """
        Release all four artifacts, stop the camera and return to capture.

        Allowed from every stage. A result still being computed when reset
        is called is discarded when it arrives.
        """
        self._generation += 1
        self._stop_stream()
        self._release_all()
        self._crop_controller.reset()
        self.exported_path = None
        self.restart()
        logger.info("Workflow reset")
        return True

    def _export(self) -> None:
        node = create_output_node(
            "export",
            output_path=self.config.export_filename,
            quality=self.config.export_quality,
            base_directory=str(Path(self.config.export_directory).resolve()),
        )
        try:
            self.exported_path = self.registry.execute_node(node, [self.templated])
        except (OSError, ValueError) as e:
            raise ExportFailed(f"Export failed: {e}") from e

    def _notify_complete(self) -> None:
        logger.info(f"Workflow complete: {self.exported_path}")
        if self.on_complete is not None:
            self.on_complete(self.exported_path)

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def _report(self, error: PhotoPipelineError) -> Notice:
        logger.warning(f"{type(error).__name__} in stage {self.state}: {error}")
        notice = Notice(
            stage=self.state,
            message=error.user_message,
            detail=str(error),
            error_type=type(error).__name__,
        )
        self.notices.append(notice)
        if self.on_notice is not None:
            self.on_notice(notice)
        return notice

    # ------------------------------------------------------------------
    # Stage operations
    # ------------------------------------------------------------------

    def _accepts(self, stage: PipelineStage, operation: str) -> bool:
        if self._closed:
            logger.warning(f"{operation} rejected: workflow is closed")
            return False
        if self.state != stage.value:
            logger.warning(f"{operation} rejected: workflow is in stage {self.state}")
            return False
        if self._busy:
            logger.warning(f"{operation} rejected: another operation is outstanding")
            return False
        return True

    async def _run(self, func: Callable, *args: Any) -> Any:
        """Run func on the raster worker; pipeline errors become notices."""
        self._busy = True
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, functools.partial(func, *args))
        except PhotoPipelineError as e:
            self._report(e)
            return None
        finally:
            self._busy = False

    async def _run_stage(self, stage: PipelineStage, operation: str, node: Dict[str, Any],
                         inputs: List[Any]) -> Optional[ImageArtifact]:
        if not self._accepts(stage, operation):
            return None
        generation = self._generation
        self._in_use = [item for item in inputs if isinstance(item, ImageArtifact)]
        try:
            result = await self._run(self.registry.execute_node, node, inputs)
        finally:
            self._in_use = []
            deferred, self._deferred = self._deferred, []
            for artifact in deferred:
                artifact.release()
        if result is None:
            return None
        if generation != self._generation:
            logger.info(f"{operation} finished after reset; result discarded")
            result.release()
            return None
        self._install(stage, result)
        return result

    async def start_camera(self, constraints: Optional[CaptureConstraints] = None) -> bool:
        """
        Open the camera. On DeviceUnavailable a notice is recorded and the
        caller should offer file upload instead.
        """
        if not self._accepts(PipelineStage.CAPTURE, "start_camera"):
            return False
        if self.camera_active:
            return True
        constraints = constraints or CaptureConstraints(
            device_index=self.config.camera_index,
            resolution=self.config.camera_resolution,
        )
        generation = self._generation
        handle = await self._run(start_capture, constraints, self.capture_factory)
        if handle is None:
            return False
        if generation != self._generation:
            stop_capture(handle)
            return False
        self._stream = handle
        return True

    async def capture_from_camera(self) -> Optional[ImageArtifact]:
        """Snapshot the live camera and stop it. None if nothing was captured."""
        if not self._accepts(PipelineStage.CAPTURE, "capture_from_camera"):
            return None
        if not self.camera_active:
            logger.warning("capture_from_camera rejected: camera is not running")
            return None

        generation = self._generation
        artifact = await self._run(capture_frame, self._stream)
        if artifact is None:
            return None
        if generation != self._generation:
            artifact.release()
            return None
        self._install(PipelineStage.CAPTURE, artifact)
        await self.stop_camera()
        return artifact

    async def stop_camera(self) -> None:
        """Stop the camera. Idempotent; safe while a frame read is in flight."""
        handle = self._stream
        self._stream = None
        if handle is not None:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(self._camera_executor, stop_capture, handle)

    def _stop_stream(self) -> None:
        """Stop the camera without waiting for a frame read in flight."""
        handle = self._stream
        self._stream = None
        if handle is not None:
            self._camera_executor.submit(stop_capture, handle)

    async def upload_photo(self, data: bytes, mime_type: str) -> Optional[ImageArtifact]:
        """Ingest an uploaded file as the captured artifact."""
        node = create_image_import_node("upload", data=data, mime_type=mime_type)
        return await self._run_stage(PipelineStage.CAPTURE, "upload_photo", node, [])

    async def apply_crop(self, region: Optional[CropRegion] = None,
                         display_size: Optional[tuple] = None) -> Optional[ImageArtifact]:
        """
        Crop the captured artifact.

        A region given here replaces the crop controller's region and is
        fitted to its container and ratio first.

        Args:
            region: Crop region (default: the crop controller's region)
            display_size: Size the captured image is shown at; updates the
                crop controller's container
        """
        if not self._accepts(PipelineStage.CROP, "apply_crop"):
            return None
        controller = self._crop_controller
        if display_size is not None:
            controller.set_container_size(*display_size)
        if region is not None:
            controller.set_region(region)
        node = create_crop_node(
            "crop",
            region=controller.region.to_dict(),
            display_size=controller.container_size,
            aspect_ratio=controller.aspect_ratio.name,
        )
        return await self._run_stage(PipelineStage.CROP, "apply_crop", node, [self.captured])

    async def apply_enhancement(
        self,
        settings: Optional[FilterSettings] = None,
        remove_background: bool = False,
        background_color: str = DEFAULT_BACKGROUND_COLOR,
    ) -> Optional[ImageArtifact]:
        """Enhance the cropped artifact (auto-enhance preset when settings is None)."""
        filters = settings.to_dict() if settings is not None else {}
        node = create_enhance_node(
            "enhance",
            remove_background=remove_background,
            background_color=background_color,
            **filters,
        )
        return await self._run_stage(PipelineStage.ENHANCE, "apply_enhancement", node, [self.cropped])

    async def apply_template(self, template_id: str) -> Optional[ImageArtifact]:
        """
        Place the enhanced artifact on a template.

        Raises:
            KeyError: If template_id is not in the catalog
        """
        get_template(template_id)
        node = create_template_node("template", template_id)
        return await self._run_stage(PipelineStage.TEMPLATE, "apply_template", node, [self.enhanced])

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """
        Stop the camera, release every artifact and shut down the workers.

        Stage operations are refused afterwards.
        """
        self._generation += 1
        self._stop_stream()
        self._closed = True
        self._release_all()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._camera_executor.shutdown(wait=False)
        logger.debug("Workflow closed")
