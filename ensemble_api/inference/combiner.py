# ensemble_api/inference/combiner.py

import logging
import numbers
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import EmptyVoteSetError, InvalidPolicyError
from .votes import Vote, VoteSet

logger = logging.getLogger(__name__)


class CombinationMethod(IntEnum):
    """
    Ensemble combination methods. The integer codes are the public ones:
      0 - plurality (majority vote) / average
      1 - confidence weighted majority vote / confidence weighted average
      2 - probability weighted majority vote / confidence weighted average
    """
    PLURALITY = 0
    CONFIDENCE = 1
    PROBABILITY = 2

    @classmethod
    def from_code(cls, code: Any) -> "CombinationMethod":
        if isinstance(code, cls):
            return code
        if isinstance(code, bool) or not isinstance(code, numbers.Integral):
            raise InvalidPolicyError(f"Unknown combination method: {code!r}")
        try:
            return cls(int(code))
        except ValueError:
            raise InvalidPolicyError(f"Unknown combination method: {code!r}") from None


@dataclass(frozen=True)
class CombinedPrediction:
    """Final ensemble prediction."""
    prediction: Any
    method: CombinationMethod
    confidence: Optional[float] = None
    distribution: Optional[Dict[Any, float]] = None
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prediction":   self.prediction,
            "confidence":   self.confidence,
            "distribution": self.distribution,
            "method":       self.method.name.lower(),
            "count":        self.count,
        }


# ─── helpers ──────────────────────────────────────────────────────────────

def _pick_winner(scores: Mapping[Any, float]) -> Any:
    """Highest score wins; on ties the earliest inserted category is kept."""
    winner, best = None, None
    for category, score in scores.items():
        if best is None or score > best:
            winner, best = category, score
    return winner


def _weighted_mean(values: Sequence[float], weights: Sequence[float]) -> float:
    # offset from the first value keeps a unanimous vote exact
    base = float(values[0])
    total = sum(weights)
    return base + sum(w * (float(v) - base) for v, w in zip(values, weights)) / total


def _mean(values: Sequence[float]) -> float:
    return _weighted_mean(values, [1.0] * len(values))


def _confidences(votes: Iterable[Vote]) -> List[float]:
    return [float(v.confidence) for v in votes if v.confidence is not None]


# ─── classification ───────────────────────────────────────────────────────

def _plurality_classification(votes: VoteSet) -> Tuple[Any, float, Dict[Any, float]]:
    counts: Dict[Any, float] = {}
    for vote in votes:
        counts[vote.prediction] = counts.get(vote.prediction, 0) + 1
    winner = _pick_winner(counts)
    return winner, counts[winner] / len(votes), counts


def _confidence_classification(votes: VoteSet) -> Tuple[Any, float, Dict[Any, float]]:
    weights: Dict[Any, float] = {}
    for vote in votes:
        w = float(vote.confidence) if vote.confidence is not None else 0.0
        weights[vote.prediction] = weights.get(vote.prediction, 0.0) + w
    winner = _pick_winner(weights)
    total = sum(weights.values())
    return winner, (weights[winner] / total if total else 0.0), weights


def _probability_classification(votes: VoteSet) -> Tuple[Any, float, Dict[Any, float]]:
    contributing = [v for v in votes if v.distribution]
    if not contributing:
        raise EmptyVoteSetError("No vote carries a probability distribution")

    sums: Dict[Any, float] = {}
    for vote in contributing:
        for category, prob in vote.distribution.items():
            sums[category] = sums.get(category, 0.0) + float(prob)

    n = len(contributing)
    normalized = {category: total / n for category, total in sums.items()}
    winner = _pick_winner(normalized)
    return winner, normalized[winner], normalized


# ─── regression ───────────────────────────────────────────────────────────

def _plurality_regression(votes: VoteSet) -> Tuple[float, Optional[float]]:
    value = _mean(votes.predictions())
    confs = _confidences(votes)
    return value, (_mean(confs) if confs else None)


def _confidence_regression(votes: VoteSet) -> Tuple[float, Optional[float]]:
    weighted = [v for v in votes if v.confidence is not None and v.confidence > 0]
    if not weighted:
        # no usable weight: unweighted mean
        return _plurality_regression(votes)
    weights = [float(v.confidence) for v in weighted]
    value = _weighted_mean([v.prediction for v in weighted], weights)
    return value, _weighted_mean(weights, weights)


# ─── entry point ──────────────────────────────────────────────────────────

def combine(
    votes: Iterable[Vote],
    method: Any = CombinationMethod.PLURALITY,
    with_confidence: bool = False,
) -> CombinedPrediction:
    """
    Reduce a vote set to one CombinedPrediction.

    Raises InvalidPolicyError for an unknown method code, EmptyVoteSetError
    when there is nothing to combine and TypeMismatchError when categorical
    and numeric votes are mixed.
    """
    method = CombinationMethod.from_code(method)
    if not isinstance(votes, VoteSet):
        votes = VoteSet(votes)

    if votes.is_regression():
        match method:
            case CombinationMethod.PLURALITY:
                value, confidence = _plurality_regression(votes)
            case CombinationMethod.CONFIDENCE | CombinationMethod.PROBABILITY:
                value, confidence = _confidence_regression(votes)
        distribution = None
    else:
        match method:
            case CombinationMethod.PLURALITY:
                value, confidence, distribution = _plurality_classification(votes)
            case CombinationMethod.CONFIDENCE:
                value, confidence, distribution = _confidence_classification(votes)
            case CombinationMethod.PROBABILITY:
                value, confidence, distribution = _probability_classification(votes)

    logger.debug("Combined %d votes with %s -> %r", len(votes), method.name, value)
    return CombinedPrediction(
        prediction=value,
        method=method,
        confidence=confidence if with_confidence else None,
        distribution=distribution,
        count=len(votes),
    )
