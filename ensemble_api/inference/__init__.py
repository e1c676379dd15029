# ensemble_api/inference/__init__.py

from .votes import Vote, VoteSet
from .combiner import (
    CombinationMethod,
    CombinedPrediction,
    combine,
)
from .predictors import (
    ModelPredictor,
    SklearnModelPredictor,
    StoragePredictorFactory,
    load_model,
    read_resource,
)
from .ensemble import (
    LocalEnsemble,
    select_models,
    describe,
)

__all__ = [
    # votes
    "Vote",
    "VoteSet",
    # combination
    "CombinationMethod",
    "CombinedPrediction",
    "combine",
    # model resolution
    "ModelPredictor",
    "SklearnModelPredictor",
    "StoragePredictorFactory",
    "load_model",
    "read_resource",
    # ensemble
    "LocalEnsemble",
    "select_models",
    "describe",
]
