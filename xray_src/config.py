import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Package directory (xray_src/)
PACKAGE_ROOT = Path(__file__).parent.resolve()

# Bundled lookup tables
DEFAULT_CONFIG_DIR = PACKAGE_ROOT / "default_config"
DEFAULT_CLASSIFICATION_PATH = DEFAULT_CONFIG_DIR / "classification.json"


def _optional_path(env_var: str) -> Optional[Path]:
    value = os.getenv(env_var)
    if value:
        return Path(value).expanduser()
    return None


# ===== USER OVERRIDES =====
# XRAY_CLASSIFICATION_PATH points at a JSON file with the same layout as the
# bundled classification.json, for countries or sectors missing upstream.
CLASSIFICATION_PATH = _optional_path("XRAY_CLASSIFICATION_PATH")

# Reports go next to the portfolio file unless this is set
OUTPUT_DIR = _optional_path("XRAY_OUTPUT_DIR")

LOG_LEVEL = os.getenv("XRAY_LOG_LEVEL", "INFO")
CHART_LIMIT = int(os.getenv("XRAY_CHART_LIMIT", "25"))
CURRENCY = os.getenv("XRAY_CURRENCY", "€")

# ===== NUMERIC TOLERANCES =====
# Normalized weights and dimension totals are compared against 1.0 with this
WEIGHT_TOLERANCE = 1e-6
# Per-security breakdowns are hand-entered percentages; allow rounding noise
BREAKDOWN_TOLERANCE = 0.005

# ===== LABELS =====
UNKNOWN_LABEL = "Unknown"

# ===== IMAGE EXPORT =====
IMAGE_WIDTH = 1920
IMAGE_HEIGHT = 1080
CHART_HEIGHT = 1024
IMAGE_FORMATS = ["png", "jpeg", "webp", "svg", "pdf", "eps"]
