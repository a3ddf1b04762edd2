"""
Constants and configuration values for CV Photo Studio.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Aspect ratios (width, height)
ASPECT_RATIO_PASSPORT = (4, 6)
ASPECT_RATIO_SQUARE = (1, 1)
ASPECT_RATIO_HEADSHOT = (3, 4)
ASPECT_RATIO_ID = (2, 3)
ASPECT_RATIO_LINKEDIN = (4, 5)
DEFAULT_ASPECT_RATIO_NAME = "passport"

# Crop controller
MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
ZOOM_STEP = 0.1
ROTATION_STEP_DEGREES = 90
DEFAULT_REGION_WIDTH_FRACTION = 0.8
MIN_CROP_EDGE = 50.0
CROP_OUTPUT_LONG_EDGE = 400
CROP_FILL_COLOR = (0, 0, 0)
DEFAULT_CROP_VIEWPORT = (640, 480)

# Post-crop optimization (max width, max height)
OPTIMIZED_MAX_SIZE = (800, 1200)

# Filter bounds
MIN_PERCENT = 0.0
MAX_PERCENT = 200.0
MAX_BLUR_PX = 20.0
MAX_SEPIA_PERCENT = 100.0

# Template compositing
TEMPLATE_MAX_EDGE = 800
TEMPLATE_PADDING = 40
FRAME_THIN_WIDTH = 2
FRAME_THICK_WIDTH = 8
DEFAULT_FRAME_COLOR = "#000000"
SHADOW_COLOR = (0, 0, 0, 77)  # rgba(0,0,0,0.3)
SHADOW_BLUR = 20
SHADOW_OFFSET = (5, 5)

# Background removal heuristic
BG_EDGE_THRESHOLD = 50.0
BG_CENTER_WEIGHT_THRESHOLD = 0.3
BG_EDGE_WEIGHT_THRESHOLD = 0.5
DEFAULT_BACKGROUND_COLOR = "#ffffff"

# Ingestion
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
SUPPORTED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
HEIF_MIME_TYPES = {"image/heic", "image/heif"}

# Camera
DEFAULT_CAMERA_INDEX = 0
DEFAULT_CAMERA_RESOLUTION = (1280, 720)

# Export
EXPORT_FILENAME_PATTERN = "professional-cv-photo-{TIMESTAMP}.jpg"
EXPORT_FORMAT = "JPEG"
EXPORT_QUALITY = 95
STAGE_JPEG_QUALITY = 90

# Local storage
DEFAULT_STORAGE_DIR_NAME = "Storage"
STORAGE_EXTENSION = ".json"
RESUME_KEY_PREFIX = "resume_"
CURRENT_RESUME_KEY = "currentCV"

# Safe filename characters
SAFE_FILENAME_CHARS = "-_"
FILENAME_REPLACEMENT_CHAR = "_"

# Node types
NODE_TYPE_IMAGE_IMPORT = "Image Import"
NODE_TYPE_CROP = "Crop"
NODE_TYPE_ENHANCE = "Enhance"
NODE_TYPE_TEMPLATE = "Template"
NODE_TYPE_OUTPUT = "Output"
