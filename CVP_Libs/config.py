"""
Studio configuration for CV Photo Studio.

StudioConfig collects the user-tunable settings (export location, camera,
storage). It is persisted as JSON next to the other local data.

Functions:
    load_config: Load configuration from a JSON file (defaults if missing)
    save_config: Save configuration to a JSON file
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from CVP_Libs.constants import (
    DEFAULT_CAMERA_INDEX,
    DEFAULT_CAMERA_RESOLUTION,
    DEFAULT_CROP_VIEWPORT,
    DEFAULT_STORAGE_DIR_NAME,
    EXPORT_FILENAME_PATTERN,
    EXPORT_QUALITY,
)

logger = logging.getLogger(__name__)


@dataclass
class StudioConfig:
    """Configuration for the photo studio.

    Attributes:
        export_directory: Directory where final photos are written
        export_filename: Filename pattern, supports {TIMESTAMP}/{DATETIME}/{DATE} tags
        export_quality: JPEG quality 1-100 for the final photo
        camera_index: OpenCV device index
        camera_resolution: Ideal (width, height) requested from the camera
        crop_viewport: (width, height) box the captured image is displayed in
        storage_directory: Directory backing the local record store
        remote_api_enabled: Whether the CRUD API writes to the record store
    """
    export_directory: str = "exports"
    export_filename: str = EXPORT_FILENAME_PATTERN
    export_quality: int = EXPORT_QUALITY
    camera_index: int = DEFAULT_CAMERA_INDEX
    camera_resolution: Tuple[int, int] = DEFAULT_CAMERA_RESOLUTION
    crop_viewport: Tuple[int, int] = DEFAULT_CROP_VIEWPORT
    storage_directory: str = DEFAULT_STORAGE_DIR_NAME
    remote_api_enabled: bool = False

    def __post_init__(self):
        if not (1 <= int(self.export_quality) <= 100):
            raise ValueError(f"export_quality must be 1-100, got {self.export_quality}")
        self.camera_resolution = tuple(int(v) for v in self.camera_resolution)
        self.crop_viewport = tuple(int(v) for v in self.crop_viewport)
        if min(self.crop_viewport) <= 0:
            raise ValueError(f"crop_viewport must be positive, got {self.crop_viewport}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["camera_resolution"] = list(self.camera_resolution)
        data["crop_viewport"] = list(self.crop_viewport)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudioConfig":
        """Create from dictionary, ignoring unknown keys."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


def load_config(config_path: Optional[Path] = None) -> StudioConfig:
    """
    Load studio configuration.

    Args:
        config_path: Path to a JSON config file. Missing file yields defaults.

    Returns:
        StudioConfig instance

    Raises:
        ValueError: If the file is not valid JSON or holds invalid values
    """
    if config_path is None or not Path(config_path).exists():
        logger.debug(f"No config file at {config_path}, using defaults")
        return StudioConfig()

    try:
        data = json.loads(Path(config_path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {config_path}")

    return StudioConfig.from_dict(data)


def save_config(config: StudioConfig, config_path: Path) -> None:
    """Save studio configuration as JSON."""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
