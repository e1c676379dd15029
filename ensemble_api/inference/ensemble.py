# ensemble_api/inference/ensemble.py

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from ..config import DEFAULT_METHOD
from ..errors import ConfigurationError, PredictionError, ResolutionError
from .combiner import CombinationMethod, CombinedPrediction, combine
from .predictors import ModelPredictor
from .votes import VoteSet

logger = logging.getLogger(__name__)

PredictorFactory = Callable[[str], ModelPredictor]


def select_models(model_ids: Sequence[str], max_models: Optional[int] = None) -> Tuple[str, ...]:
    """Active subset: the first `max_models` ids, or all of them when no cap is set."""
    ids = tuple(model_ids)
    if max_models is None:
        return ids
    if max_models < 0:
        raise ConfigurationError(f"max_models must be >= 0, got {max_models}")
    return ids[:max_models]


def _model_ids_from_resource(resource: Mapping[str, Any]) -> Tuple[Optional[str], list]:
    if resource.get("objects") is not None:
        raise ConfigurationError(
            "Ensembles given as an in-line list of model objects are not supported"
        )
    ensemble_id = resource.get("resource")
    obj = resource.get("object") or {}
    models = obj.get("models") if isinstance(obj, Mapping) else None
    if not isinstance(models, list):
        raise ResolutionError(f"Could not find the model list of ensemble {ensemble_id}")
    return ensemble_id, models


class LocalEnsemble:
    """
    A local predictive ensemble.

    Resolves each model once through `predictor_factory` and combines their
    votes locally, so predictions need no network access. The model list and
    the active subset never change after construction.
    """

    def __init__(
        self,
        model_ids: Sequence[str],
        predictor_factory: PredictorFactory,
        max_models: Optional[int] = None,
        ensemble_id: Optional[str] = None,
    ):
        if isinstance(model_ids, str) or not model_ids:
            raise ConfigurationError("An ensemble needs a non-empty list of model ids")
        if not all(isinstance(m, str) for m in model_ids):
            raise ConfigurationError("Model ids must be strings")

        self.ensemble_id = ensemble_id
        self._model_ids: Tuple[str, ...] = tuple(model_ids)
        self._active: Tuple[str, ...] = select_models(self._model_ids, max_models)

        predictors = []
        for model_id in self._active:
            try:
                predictors.append(predictor_factory(model_id))
            except ResolutionError:
                raise
            except Exception as e:
                raise ResolutionError(
                    f"Failed to resolve model {model_id}", model_id=model_id
                ) from e
        self._predictors: Tuple[ModelPredictor, ...] = tuple(predictors)

        logger.info(
            "Ensemble %s ready: %d of %d models active",
            ensemble_id or "<local>", len(self._active), len(self._model_ids),
        )

    @classmethod
    def from_resource(
        cls,
        resource: Mapping[str, Any],
        predictor_factory: PredictorFactory,
        max_models: Optional[int] = None,
    ) -> "LocalEnsemble":
        """Build from an ensemble resource: {"resource": id, "object": {"models": [...]}}."""
        ensemble_id, models = _model_ids_from_resource(resource)
        return cls(models, predictor_factory, max_models=max_models, ensemble_id=ensemble_id)

    def list_models(self) -> Tuple[str, ...]:
        """All model ids of the ensemble, in order (ignores the cap)."""
        return self._model_ids

    @property
    def active_models(self) -> Tuple[str, ...]:
        return self._active

    def generate_votes(self, input_data: Any, by_name: bool = True) -> VoteSet:
        """One vote per active model, in model order. Any failure aborts the lot."""
        votes = []
        for order, (model_id, predictor) in enumerate(zip(self._active, self._predictors)):
            try:
                vote = predictor.predict(input_data, by_name=by_name)
            except Exception as e:
                logger.error("Prediction failed for model %s: %s", model_id, e)
                raise PredictionError(
                    f"Model {model_id} failed to predict", model_id=model_id
                ) from e
            votes.append(replace(vote, order=order, model_id=model_id))
        return VoteSet(votes)

    def predict(
        self,
        input_data: Any,
        by_name: bool = True,
        method: Any = DEFAULT_METHOD,
        with_confidence: bool = False,
    ) -> CombinedPrediction:
        """
        Makes a prediction based on the prediction made by every active model.

        `method` is the numeric code of the combination method:
            0 - plurality (majority vote) / average
            1 - confidence weighted majority vote / confidence weighted average
            2 - probability weighted majority vote / confidence weighted average
        """
        method = CombinationMethod.from_code(method)
        votes = self.generate_votes(input_data, by_name=by_name)
        return combine(votes, method, with_confidence)

    def __repr__(self) -> str:
        return f"LocalEnsemble(id={self.ensemble_id!r}, models={len(self._model_ids)}, active={len(self._active)})"


def describe(ensemble: LocalEnsemble) -> Dict[str, Any]:
    return {
        "ensemble_id":   ensemble.ensemble_id,
        "models":        list(ensemble.list_models()),
        "active_models": list(ensemble.active_models),
    }
