# ensemble_api/inference/predictors.py

import json
import logging
import os
from typing import Any, Dict, Optional, Protocol, Sequence

import joblib
import numpy as np

from ..config import MODEL_FILE_SUFFIX, STORAGE_DIR
from ..errors import ResolutionError
from ..preprocessing.record_processing import RecordVectorizer
from .votes import Vote

logger = logging.getLogger(__name__)


class ModelPredictor(Protocol):
    """Anything that turns one input record into one Vote."""

    def predict(self, input_data: Any, by_name: bool = True) -> Vote:
        ...


def _to_python(value: Any) -> Any:
    """Unwrap numpy scalars so votes compare and serialize like plain values."""
    return value.item() if isinstance(value, np.generic) else value


class SklearnModelPredictor:
    """
    Wraps a fitted scikit-learn tree model (or pipeline):
      - classifiers (predict_proba + classes_) → label, probability of that
        label as confidence, full class distribution
      - regressors → float value, no confidence, no distribution
    """

    def __init__(self, estimator: Any, fields: Optional[Sequence[str]] = None):
        self.estimator = estimator
        if fields is None and hasattr(estimator, "feature_names_in_"):
            fields = [str(f) for f in estimator.feature_names_in_]
        self.fields = list(fields) if fields is not None else None
        self.n_features = getattr(estimator, "n_features_in_", None)

    @property
    def is_classifier(self) -> bool:
        return hasattr(self.estimator, "predict_proba") and hasattr(self.estimator, "classes_")

    def predict(self, input_data: Any, by_name: bool = True) -> Vote:
        vec = RecordVectorizer(self.fields, self.n_features, by_name=by_name)
        X = vec.transform([input_data])

        if not self.is_classifier:
            return Vote(prediction=float(self.estimator.predict(X)[0]))

        proba = self.estimator.predict_proba(X)[0]
        distribution = {
            _to_python(c): float(p) for c, p in zip(self.estimator.classes_, proba)
        }
        label = _to_python(self.estimator.predict(X)[0])
        return Vote(
            prediction=label,
            confidence=distribution.get(label),
            distribution=distribution,
        )


def model_path(model_id: str, storage: str = STORAGE_DIR) -> str:
    """`model/abc` is cached as `<storage>/model_abc.pkl`."""
    return os.path.join(storage, model_id.replace("/", "_") + MODEL_FILE_SUFFIX)


def load_model(model_id: str, storage: str = STORAGE_DIR) -> SklearnModelPredictor:
    """Load one cached model artifact and wrap it as a predictor."""
    fp = model_path(model_id, storage)
    if not os.path.exists(fp):
        logger.error("Missing model file for %s: %s", model_id, fp)
        raise ResolutionError(f"Model {model_id} not found in {storage}", model_id=model_id)
    try:
        artifact = joblib.load(fp)
    except Exception as e:
        logger.error("Failed to load model %s: %s", model_id, e)
        raise ResolutionError(f"Model {model_id} could not be loaded", model_id=model_id) from e

    logger.info("Loaded model: %s", model_id)
    if isinstance(artifact, dict) and "model" in artifact:
        return SklearnModelPredictor(artifact["model"], artifact.get("fields"))
    return SklearnModelPredictor(artifact)


class StoragePredictorFactory:
    """Resolves model ids against a local storage directory."""

    def __init__(self, storage: str = STORAGE_DIR):
        self.storage = storage

    def __call__(self, model_id: str) -> SklearnModelPredictor:
        return load_model(model_id, self.storage)


def read_resource(path: str) -> Dict[str, Any]:
    """Read a cached ensemble resource (JSON) from disk."""
    if not os.path.exists(path):
        raise ResolutionError(f"Ensemble resource not found: {path}")
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, ValueError) as e:
        raise ResolutionError(f"Ensemble resource could not be read: {path}") from e
