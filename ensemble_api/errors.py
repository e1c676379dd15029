# ensemble_api/errors.py

from typing import Optional


class EnsembleError(Exception):
    """Base class for every failure raised by the ensemble engine."""


class ConfigurationError(EnsembleError):
    """Bad construction input (empty model list, invalid cap, unsupported resource)."""


class ResolutionError(EnsembleError):
    """A model identifier could not be resolved to a usable model."""

    def __init__(self, message: str, model_id: Optional[str] = None):
        super().__init__(message)
        self.model_id = model_id


class PredictionError(EnsembleError):
    """One model's prediction failed; the original exception is chained as __cause__."""

    def __init__(self, message: str, model_id: Optional[str] = None):
        super().__init__(message)
        self.model_id = model_id


class InvalidPolicyError(EnsembleError):
    """Combination method code outside {0, 1, 2}."""


class EmptyVoteSetError(EnsembleError):
    """Nothing to combine."""


class TypeMismatchError(EnsembleError):
    """Categorical and numeric predictions mixed in one vote set."""
