"""
Application configuration settings for the E-Waste Annotation Studio
"""
import json
import os
from pathlib import Path

# Project directories
# Support deployments that relocate the data directory via environment variable override
PROJECT_ROOT = Path(os.environ.get('EWASTE_STUDIO_ROOT', Path(__file__).parent.parent))
DATA_DIR = PROJECT_ROOT / "data"
LOG_DIR = DATA_DIR / "logs"

# REST API settings
API_BASE_URL = os.getenv('EWASTE_API_URL', 'http://localhost:8080/api/v1').rstrip('/')
API_TOKEN = os.getenv('EWASTE_API_TOKEN') or None
API_TIMEOUT = float(os.getenv('EWASTE_API_TIMEOUT', '30'))  # seconds, per request

# Storage hosts that block cross-origin image loads; routed through the API's image proxy
PROXY_IMAGE_HOSTS = ("storage.googleapis.com", "storage.cloud.google.com")

# Canvas settings
MIN_BOX_SIZE = int(os.getenv('EWASTE_MIN_BOX_SIZE', '10'))  # pixels, smaller drags are discarded
MAX_CANVAS_WIDTH = int(os.getenv('EWASTE_MAX_CANVAS_WIDTH', '800'))
MAX_CANVAS_HEIGHT = int(os.getenv('EWASTE_MAX_CANVAS_HEIGHT', '600'))

# Logging
LOG_LEVEL = os.getenv('EWASTE_LOG_LEVEL', 'INFO').upper()

# Annotation Canvas Configuration
# The component is served from ewaste_studio/frontend/bbox_canvas/ by default.
# Set ANNOTATION_CANVAS_DEV_URL to serve it from a local dev server instead.
ANNOTATION_CANVAS_DEV_URL = os.getenv('ANNOTATION_CANVAS_DEV_URL') or None

# Object classes accepted by the server; keep in sync with its category enum
DEFAULT_CATEGORIES = [
    "smartphone",
    "laptop",
    "tablet",
    "desktop_computer",
    "monitor",
    "keyboard",
    "mouse",
    "printer",
    "television",
    "camera",
    "headphones",
    "speakers",
    "game_console",
    "router",
    "cables",
    "battery",
    "charger",
    "circuit_board",
    "hard_drive",
    "memory_card",
    "other_electronic",
]


def get_categories() -> list:
    """
    Load the category taxonomy

    Reads a JSON list of labels from the file named by EWASTE_CATEGORIES_FILE
    when it is set, otherwise returns DEFAULT_CATEGORIES.

    Returns:
        List of category labels (first entry is the default for new boxes)
    """
    categories_file = os.getenv('EWASTE_CATEGORIES_FILE')
    if not categories_file:
        return list(DEFAULT_CATEGORIES)

    with open(categories_file, 'r', encoding='utf-8') as f:
        categories = json.load(f)

    if not isinstance(categories, list) or not categories:
        raise ValueError(f"{categories_file} must contain a non-empty JSON list of labels")

    return [str(c) for c in categories]
