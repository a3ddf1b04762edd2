import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtGui import QPixmap
from PyQt5.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSlider,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from CVP_Libs.CropLib.crop_canvas_widget import CropCanvasWidget, pil_to_qimage
from CVP_Libs.ImageEditingLib import ASPECT_RATIOS, FilterSettings, PipelineStage, templates_by_category
from CVP_Libs.NodesLib import get_supported_image_formats, guess_mime_type
from CVP_Libs.WorkflowLib import Notice, PhotoWorkflow
from CVP_Libs.config import load_config

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("cv_photo_studio.json")
LOOP_PUMP_INTERVAL_MS = 10

STAGE_TITLES = {
    PipelineStage.CAPTURE: "1. Capture or upload a photo",
    PipelineStage.CROP: "2. Crop",
    PipelineStage.ENHANCE: "3. Enhance",
    PipelineStage.TEMPLATE: "4. Choose a background",
    PipelineStage.FINAL: "Done",
}


class CvPhotoStudioWindow(QMainWindow):
    """Step-by-step wizard over a PhotoWorkflow.

    The workflow's coroutines run on an asyncio loop that a QTimer pumps from
    the Qt event loop, so the window stays responsive while raster work runs
    on the workflow's worker thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__()
        self.setWindowTitle("CV Photo Studio")
        self.resize(1100, 780)

        self.loop = loop
        self._canvas_artifact_id: Optional[str] = None
        self.config = load_config(CONFIG_PATH)
        self.workflow = PhotoWorkflow(
            self.config,
            on_complete=self.on_complete,
            on_notice=self.on_notice,
        )

        self._build_ui()
        self._connect_signals()
        self.refresh()

    # UI ---------------------------------------------------------------------

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)
        root = QVBoxLayout(central)

        self.label_stage = QLabel()
        self.label_stage.setStyleSheet("font-size: 18px; font-weight: bold;")
        root.addWidget(self.label_stage)

        self.pages = QStackedWidget()
        self.pages.addWidget(self._build_capture_page())
        self.pages.addWidget(self._build_crop_page())
        self.pages.addWidget(self._build_enhance_page())
        self.pages.addWidget(self._build_template_page())
        self.pages.addWidget(self._build_final_page())
        root.addWidget(self.pages, stretch=1)

        nav = QHBoxLayout()
        self.btn_reset = QPushButton("Start Over")
        self.btn_previous = QPushButton("Previous")
        self.btn_next = QPushButton("Next")
        nav.addWidget(self.btn_reset)
        nav.addStretch(1)
        nav.addWidget(self.btn_previous)
        nav.addWidget(self.btn_next)
        root.addLayout(nav)

    def _build_preview(self) -> QLabel:
        label = QLabel("No photo yet")
        label.setAlignment(Qt.AlignCenter)
        label.setMinimumSize(360, 360)
        label.setStyleSheet("border: 1px solid #888;")
        return label

    def _build_capture_page(self) -> QWidget:
        page = QWidget()
        layout = QHBoxLayout(page)
        controls = QVBoxLayout()
        self.btn_start_camera = QPushButton("Start Camera")
        self.btn_capture = QPushButton("Take Photo")
        self.btn_stop_camera = QPushButton("Stop Camera")
        self.btn_upload = QPushButton("Upload Photo...")
        for button in (self.btn_start_camera, self.btn_capture, self.btn_stop_camera, self.btn_upload):
            controls.addWidget(button)
        controls.addStretch(1)
        self.preview_capture = self._build_preview()
        layout.addLayout(controls, stretch=1)
        layout.addWidget(self.preview_capture, stretch=3)
        return page

    def _build_crop_page(self) -> QWidget:
        page = QWidget()
        layout = QHBoxLayout(page)
        controls = QVBoxLayout()
        self.combo_ratio = QComboBox()
        for name in ASPECT_RATIOS:
            self.combo_ratio.addItem(name)
        self.combo_ratio.setCurrentText(self.workflow.crop_controller.aspect_ratio.name)
        self.btn_zoom_in = QPushButton("Zoom In")
        self.btn_zoom_out = QPushButton("Zoom Out")
        self.btn_rotate = QPushButton("Rotate 90°")
        self.btn_crop_reset = QPushButton("Reset Crop")
        self.btn_apply_crop = QPushButton("Apply Crop")
        controls.addWidget(QLabel("Aspect ratio"))
        controls.addWidget(self.combo_ratio)
        for button in (self.btn_zoom_in, self.btn_zoom_out, self.btn_rotate,
                       self.btn_crop_reset, self.btn_apply_crop):
            controls.addWidget(button)
        controls.addStretch(1)
        self.crop_canvas = CropCanvasWidget(self.workflow.crop_controller)
        layout.addLayout(controls, stretch=1)
        layout.addWidget(self.crop_canvas, stretch=3)
        return page

    def _build_enhance_page(self) -> QWidget:
        page = QWidget()
        layout = QHBoxLayout(page)
        form = QFormLayout()
        self.slider_brightness = self._slider(0, 200, 100)
        self.slider_contrast = self._slider(0, 200, 100)
        self.slider_saturation = self._slider(0, 200, 100)
        self.slider_blur = self._slider(0, 20, 0)
        self.check_remove_background = QCheckBox("Replace background with white")
        self.btn_auto_enhance = QPushButton("Auto Enhance")
        self.btn_apply_filters = QPushButton("Apply Filters")
        form.addRow("Brightness", self.slider_brightness)
        form.addRow("Contrast", self.slider_contrast)
        form.addRow("Saturation", self.slider_saturation)
        form.addRow("Blur", self.slider_blur)
        form.addRow(self.check_remove_background)
        form.addRow(self.btn_auto_enhance)
        form.addRow(self.btn_apply_filters)
        self.preview_enhance = self._build_preview()
        layout.addLayout(form, stretch=1)
        layout.addWidget(self.preview_enhance, stretch=3)
        return page

    def _build_template_page(self) -> QWidget:
        page = QWidget()
        layout = QHBoxLayout(page)
        self.list_templates = QListWidget()
        for category, templates in templates_by_category().items():
            header = QListWidgetItem(category.title())
            header.setFlags(Qt.NoItemFlags)
            self.list_templates.addItem(header)
            for template in templates:
                item = QListWidgetItem(f"  {template.name}")
                item.setData(Qt.UserRole, template.id)
                item.setToolTip(template.description)
                self.list_templates.addItem(item)
        self.preview_template = self._build_preview()
        layout.addWidget(self.list_templates, stretch=1)
        layout.addWidget(self.preview_template, stretch=3)
        return page

    def _build_final_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self.label_exported = QLabel()
        self.label_exported.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self.preview_final = self._build_preview()
        layout.addWidget(self.label_exported)
        layout.addWidget(self.preview_final, stretch=1)
        return page

    @staticmethod
    def _slider(low: int, high: int, value: int) -> QSlider:
        slider = QSlider(Qt.Horizontal)
        slider.setRange(low, high)
        slider.setValue(value)
        return slider

    def _connect_signals(self) -> None:
        self.btn_next.clicked.connect(self.go_next)
        self.btn_previous.clicked.connect(self.go_previous)
        self.btn_reset.clicked.connect(self.reset_workflow)

        self.btn_start_camera.clicked.connect(lambda: self.run(self.workflow.start_camera()))
        self.btn_capture.clicked.connect(lambda: self.run(self.workflow.capture_from_camera()))
        self.btn_stop_camera.clicked.connect(lambda: self.run(self.workflow.stop_camera()))
        self.btn_upload.clicked.connect(self.upload_photo)

        self.combo_ratio.currentTextChanged.connect(self.change_aspect_ratio)
        self.btn_zoom_in.clicked.connect(lambda: self._crop_action(self.workflow.crop_controller.zoom_in))
        self.btn_zoom_out.clicked.connect(lambda: self._crop_action(self.workflow.crop_controller.zoom_out))
        self.btn_rotate.clicked.connect(lambda: self._crop_action(self.workflow.crop_controller.rotate))
        self.btn_crop_reset.clicked.connect(lambda: self._crop_action(self.workflow.crop_controller.reset))
        self.btn_apply_crop.clicked.connect(lambda: self.run(self.workflow.apply_crop()))

        self.btn_auto_enhance.clicked.connect(self.auto_enhance)
        self.btn_apply_filters.clicked.connect(self.apply_filters)

        self.list_templates.currentItemChanged.connect(self.apply_template)

    # Async bridge -------------------------------------------------------------

    def run(self, coro) -> None:
        """Schedule a workflow coroutine and refresh the UI when it finishes."""
        task = self.loop.create_task(coro)
        task.add_done_callback(self._on_task_done)
        self.refresh()

    def _on_task_done(self, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Workflow operation failed: {task.exception()!r}")
            QMessageBox.critical(self, "Error", str(task.exception()))
        self.refresh()

    # Actions ----------------------------------------------------------------

    def go_next(self) -> None:
        self.workflow.go_next()
        self.refresh()

    def go_previous(self) -> None:
        self.workflow.go_previous()
        self.refresh()

    def reset_workflow(self) -> None:
        self.workflow.reset_workflow()
        self.list_templates.setCurrentRow(-1)
        self.refresh()

    def upload_photo(self) -> None:
        patterns = " ".join(f"*{ext}" for ext in get_supported_image_formats())
        path_str, _ = QFileDialog.getOpenFileName(self, "Select Photo", "", f"Images ({patterns})")
        if not path_str:
            return
        path = Path(path_str)
        self.run(self.workflow.upload_photo(path.read_bytes(), guess_mime_type(path)))

    def change_aspect_ratio(self, name: str) -> None:
        self._crop_action(lambda: self.workflow.crop_controller.set_aspect_ratio(name))

    def _crop_action(self, action) -> None:
        action()
        self.crop_canvas.update()

    def _current_filters(self) -> FilterSettings:
        return FilterSettings(
            brightness=self.slider_brightness.value(),
            contrast=self.slider_contrast.value(),
            saturation=self.slider_saturation.value(),
            blur=self.slider_blur.value(),
        )

    def auto_enhance(self) -> None:
        self.run(self.workflow.apply_enhancement(
            remove_background=self.check_remove_background.isChecked()))

    def apply_filters(self) -> None:
        self.run(self.workflow.apply_enhancement(
            self._current_filters(),
            remove_background=self.check_remove_background.isChecked(),
        ))

    def apply_template(self, item: Optional[QListWidgetItem], _previous=None) -> None:
        template_id = item.data(Qt.UserRole) if item is not None else None
        if template_id is None:
            return
        self.run(self.workflow.apply_template(template_id))

    # Workflow callbacks -----------------------------------------------------

    def on_complete(self, path: Path) -> None:
        self.label_exported.setText(f"Saved to {path}")

    def on_notice(self, notice: Notice) -> None:
        self.statusBar().showMessage(notice.message, 8000)
        if notice.error_type == "DeviceUnavailable":
            QMessageBox.information(self, "Camera", notice.message)

    # Rendering --------------------------------------------------------------

    def refresh(self) -> None:
        workflow = self.workflow
        stage = workflow.stage
        self.label_stage.setText(STAGE_TITLES[stage] + (" (working...)" if workflow.busy else ""))
        self.pages.setCurrentIndex(list(PipelineStage).index(stage))

        idle = not workflow.busy
        self.btn_next.setEnabled(idle and stage is not PipelineStage.FINAL
                                 and workflow.artifact(stage) is not None)
        self.btn_previous.setEnabled(idle and stage not in (PipelineStage.CAPTURE, PipelineStage.FINAL))
        self.btn_start_camera.setEnabled(idle and not workflow.camera_active)
        self.btn_capture.setEnabled(idle and workflow.camera_active)
        self.btn_stop_camera.setEnabled(workflow.camera_active)

        captured = workflow.captured
        captured_id = captured.artifact_id if captured is not None else None
        if captured_id != self._canvas_artifact_id:
            self._canvas_artifact_id = captured_id
            self.crop_canvas.set_artifact(captured)
        self.crop_canvas.update()

        self._set_preview(self.preview_capture, workflow.captured)
        self._set_preview(self.preview_enhance, workflow.enhanced or workflow.cropped)
        self._set_preview(self.preview_template, workflow.templated or workflow.enhanced)
        self._set_preview(self.preview_final, workflow.templated)

    def _set_preview(self, label: QLabel, artifact) -> None:
        if artifact is None or artifact.is_released:
            label.clear()
            label.setText("No photo yet")
            return
        pixmap = QPixmap.fromImage(pil_to_qimage(artifact.pixels()))
        if pixmap.isNull():
            label.setText("Preview failed")
            return
        label.setPixmap(pixmap.scaled(label.size(), Qt.KeepAspectRatio, Qt.SmoothTransformation))

    def closeEvent(self, event) -> None:
        self.workflow.close()
        super().closeEvent(event)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def pump() -> None:
        loop.call_soon(loop.stop)
        loop.run_forever()

    timer = QTimer()
    timer.timeout.connect(pump)
    timer.start(LOOP_PUMP_INTERVAL_MS)

    window = CvPhotoStudioWindow(loop)
    window.show()
    exit_code = app.exec_()
    timer.stop()
    loop.close()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
