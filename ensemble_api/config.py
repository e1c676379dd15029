# ensemble_api/config.py

import os
from typing import List, Optional

BASE_DIR = os.path.dirname(os.path.dirname(__file__))


def _optional_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


def _split_ids(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [m.strip() for m in raw.split(",") if m.strip()]


# Local model cache (joblib artifacts named after their model id).
STORAGE_DIR = os.environ.get("ENSEMBLE_STORAGE", os.path.join(BASE_DIR, "storage"))
MODEL_FILE_SUFFIX = ".pkl"

# Ensemble definition: explicit ids win over the resource file.
ENSEMBLE_MODEL_IDS: List[str] = _split_ids(os.environ.get("ENSEMBLE_MODELS"))
ENSEMBLE_RESOURCE_PATH = os.environ.get(
    "ENSEMBLE_RESOURCE", os.path.join(STORAGE_DIR, "ensemble.json")
)
MAX_MODELS: Optional[int] = _optional_int(os.environ.get("ENSEMBLE_MAX_MODELS"))

# Combination method codes.
PLURALITY_CODE   = 0
CONFIDENCE_CODE  = 1
PROBABILITY_CODE = 2
DEFAULT_METHOD   = PLURALITY_CODE

# Logging.
LOG_LEVEL  = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("LOG_FORMAT", "standard").lower()
