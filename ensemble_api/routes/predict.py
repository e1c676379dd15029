# ensemble_api/routes/predict.py

import logging
import threading
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, StrictInt

from ..config import (
    STORAGE_DIR,
    ENSEMBLE_MODEL_IDS,
    ENSEMBLE_RESOURCE_PATH,
    MAX_MODELS,
    DEFAULT_METHOD,
)
from ..errors import (
    ConfigurationError,
    ResolutionError,
    PredictionError,
    InvalidPolicyError,
    EmptyVoteSetError,
    TypeMismatchError,
)
from ..inference.ensemble import LocalEnsemble, describe
from ..inference.predictors import StoragePredictorFactory, read_resource

logger = logging.getLogger(__name__)

router = APIRouter()

# loaded on first request, then shared by every request
_ensemble: Optional[LocalEnsemble] = None
_ensemble_lock = threading.Lock()


def load_ensemble() -> LocalEnsemble:
    """Build the ensemble from configuration: explicit ids first, else the resource file."""
    factory = StoragePredictorFactory(STORAGE_DIR)
    if ENSEMBLE_MODEL_IDS:
        return LocalEnsemble(ENSEMBLE_MODEL_IDS, factory, max_models=MAX_MODELS)
    resource = read_resource(ENSEMBLE_RESOURCE_PATH)
    return LocalEnsemble.from_resource(resource, factory, max_models=MAX_MODELS)


def get_ensemble() -> LocalEnsemble:
    global _ensemble
    if _ensemble is not None:
        return _ensemble
    with _ensemble_lock:
        if _ensemble is None:
            try:
                _ensemble = load_ensemble()
            except (ConfigurationError, ResolutionError) as e:
                logger.error("Ensemble unavailable: %s", e)
                raise HTTPException(status_code=503, detail=f"Ensemble unavailable: {e}") from e
    return _ensemble


class PredictRequest(BaseModel):
    input_data: Union[Dict[str, Any], List[Any]]
    by_name: bool = True
    method: StrictInt = DEFAULT_METHOD
    with_confidence: bool = False


def _record(req: PredictRequest) -> Any:
    """JSON object keys are strings; records given by index need int keys."""
    if req.by_name or not isinstance(req.input_data, dict):
        return req.input_data
    try:
        return {int(k): v for k, v in req.input_data.items()}
    except ValueError as e:
        raise HTTPException(status_code=422, detail="Field indexes must be integers") from e


@router.post("/predict")
def predict(req: PredictRequest):
    ensemble = get_ensemble()
    try:
        result = ensemble.predict(
            _record(req),
            by_name=req.by_name,
            method=req.method,
            with_confidence=req.with_confidence,
        )
    except PredictionError as e:
        raise HTTPException(
            status_code=422, detail={"error": str(e), "model_id": e.model_id}
        ) from e
    except (InvalidPolicyError, EmptyVoteSetError, TypeMismatchError) as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return result.to_dict()


@router.get("/models")
def list_models():
    return describe(get_ensemble())
