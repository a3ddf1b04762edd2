"""
Output Node for CV Photo Studio.

Exports the finished photo to disk. The filename may contain delimited tags
that are resolved at save time.

Supported tags (case-insensitive):
- {TIMESTAMP} - Milliseconds since the Unix epoch
- {DATE} or {DATE:format} - Current date (default: YYYY-MM-DD)
- {TIME} or {TIME:format} - Current time (default: HH-MM-SS)
- {DATETIME} or {DATETIME:format} - Combined date and time

All tags in one filename share a single clock reading.

Classes:
    OutputNodeConfig: Configuration for output node
    OutputNodeHandler: Handles file operations and tag substitution

Functions:
    execute_output_node: Pipeline executor for output nodes
    create_output_node: Helper to create output node dictionary
"""

import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from CVP_Libs.ImageEditingLib.image_models import ImageArtifact
from CVP_Libs.constants import (
    EXPORT_FILENAME_PATTERN,
    EXPORT_FORMAT,
    EXPORT_QUALITY,
    NODE_TYPE_OUTPUT,
)

logger = logging.getLogger(__name__)


@dataclass
class OutputNodeConfig:
    """Configuration for output node execution.

    Attributes:
        output_path: Output filename with optional tags, relative to
            base_directory when that is set
        save_format: Image format to save as (default: JPEG)
        quality: JPEG/WebP quality 1-100 (default: 95)
        create_directories: Create output directories if they don't exist
        overwrite: Overwrite existing files (default: False)
        base_directory: Optional directory that outputs must stay inside
    """
    output_path: str = EXPORT_FILENAME_PATTERN
    save_format: str = EXPORT_FORMAT
    quality: int = EXPORT_QUALITY
    create_directories: bool = True
    overwrite: bool = False
    base_directory: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputNodeConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)

    def get_save_kwargs(self) -> Dict[str, Any]:
        """Get PIL Image.save() kwargs based on format."""
        save_format = self.save_format.upper()
        if save_format == "JPG":
            save_format = "JPEG"

        kwargs: Dict[str, Any] = {"format": save_format}
        if save_format in ("JPEG", "WEBP"):
            kwargs["quality"] = max(1, min(100, int(self.quality)))
        return kwargs


class OutputNodeHandler:
    """Handles dynamic filename generation and file I/O for output nodes."""

    TIMESTAMP_PATTERN = r'\{TIMESTAMP\}'
    DATETIME_PATTERN = r'\{DATETIME(?::([^\}]*))?\}'
    DATE_PATTERN = r'\{DATE(?::([^\}]*))?\}'
    TIME_PATTERN = r'\{TIME(?::([^\}]*))?\}'

    DEFAULT_DATE_FORMAT = "%Y-%m-%d"
    DEFAULT_TIME_FORMAT = "%H-%M-%S"
    DEFAULT_DATETIME_FORMAT = "%Y-%m-%d_%H-%M-%S"

    def __init__(self, config: OutputNodeConfig):
        self.config = config
        self._base_dir: Optional[Path] = None
        if config.base_directory:
            self._base_dir = Path(config.base_directory).resolve()

    def resolve_filename(self, now: Optional[datetime] = None) -> Path:
        """
        Resolve the output filename with tag substitution and path validation.

        Args:
            now: Clock reading to use for every tag (default: current time)

        Raises:
            ValueError: If the path escapes base_directory or a format is invalid
        """
        now = now or datetime.now()
        filename = self.config.output_path

        filename = re.sub(self.TIMESTAMP_PATTERN, str(int(now.timestamp() * 1000)),
                          filename, flags=re.IGNORECASE)
        filename = self._replace_formatted(filename, self.DATETIME_PATTERN, "DATETIME",
                                           self.DEFAULT_DATETIME_FORMAT, now)
        filename = self._replace_formatted(filename, self.DATE_PATTERN, "DATE",
                                           self.DEFAULT_DATE_FORMAT, now)
        filename = self._replace_formatted(filename, self.TIME_PATTERN, "TIME",
                                           self.DEFAULT_TIME_FORMAT, now)

        return self._validate_output_path(filename)

    @staticmethod
    def _replace_formatted(text: str, pattern: str, tag: str, default_fmt: str, now: datetime) -> str:
        def replacer(match):
            fmt = match.group(1) or default_fmt
            try:
                return now.strftime(fmt)
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid format string '{fmt}' in {{{tag}}} tag: {e}") from e

        return re.sub(pattern, replacer, text, flags=re.IGNORECASE)

    def _validate_output_path(self, path_str: str) -> Path:
        """
        Reject parent-directory references and paths outside base_directory.
        """
        path = Path(path_str)
        if ".." in path.parts:
            raise ValueError(f"Path traversal detected: output_path contains '..': {path_str}")

        if path.is_absolute() or self._base_dir is None:
            resolved = path.resolve()
        else:
            resolved = (self._base_dir / path).resolve()

        if self._base_dir is not None:
            try:
                resolved.relative_to(self._base_dir)
            except ValueError:
                raise ValueError(
                    f"output_path '{path_str}' resolves to '{resolved}' which is outside "
                    f"the export directory '{self._base_dir}'"
                )
        return resolved

    def save_image(self, image: Any) -> Path:
        """
        Save image to disk with resolved filename.

        Args:
            image: PIL Image or ImageArtifact to save

        Returns:
            Path where image was saved

        Raises:
            TypeError: If image is not a PIL Image or artifact
            ValueError: If file exists and overwrite=False
            OSError: If file cannot be written
        """
        if isinstance(image, ImageArtifact):
            image = image.pixels()
        if not hasattr(image, "save"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")

        output_file = self.resolve_filename()
        if self.config.create_directories:
            output_file.parent.mkdir(parents=True, exist_ok=True)

        if output_file.exists() and not self.config.overwrite:
            raise ValueError(
                f"Output file already exists: {output_file}. Set overwrite=True to replace."
            )

        kwargs = self.config.get_save_kwargs()
        if image.mode != "RGB" and kwargs["format"] == "JPEG":
            image = image.convert("RGB")

        try:
            image.save(output_file, **kwargs)
        except (OSError, ValueError) as e:
            raise OSError(f"Failed to save image to {output_file}: {e}") from e

        logger.info(f"Saved {kwargs['format']} to {output_file}")
        return output_file


def execute_output_node(node: Dict[str, Any], inputs: List[Any]) -> Path:
    """
    Pipeline executor for output nodes.

    Args:
        node: Node dictionary holding OutputNodeConfig fields
        inputs: Exactly one ImageArtifact or PIL Image

    Returns:
        Path where image was saved

    Raises:
        ValueError: If inputs empty, invalid config, or file already exists
        TypeError: If input is not an image
        OSError: If file cannot be written
    """
    if not inputs:
        raise ValueError("Output node requires 1 input image")

    config = OutputNodeConfig.from_dict(node)
    return OutputNodeHandler(config).save_image(inputs[0])


def create_output_node(
    node_id: str,
    output_path: str = EXPORT_FILENAME_PATTERN,
    save_format: str = EXPORT_FORMAT,
    quality: int = EXPORT_QUALITY,
    base_directory: Optional[str] = None,
    create_directories: bool = True,
    overwrite: bool = False,
) -> Dict[str, Any]:
    """
    Helper to create an output node dictionary.

    Examples:
        >>> create_output_node("out-1", base_directory="/home/me/Pictures")
        >>> create_output_node("out-2", "cv-photo_{DATE}.png", save_format="PNG")
        >>> create_output_node("out-3", "cv-photo_{TIME:%H_%M_%S}.jpg", quality=90)
    """
    return {
        "id": node_id,
        "type": NODE_TYPE_OUTPUT,
        "output_path": output_path,
        "save_format": save_format,
        "quality": quality,
        "base_directory": base_directory,
        "create_directories": create_directories,
        "overwrite": overwrite,
    }
