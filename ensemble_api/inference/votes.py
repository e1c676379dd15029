# ensemble_api/inference/votes.py

import numbers
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple

from ..errors import EmptyVoteSetError, TypeMismatchError


def is_numeric(value: Any) -> bool:
    """Numbers count as regression output; bools and labels do not."""
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


@dataclass(frozen=True)
class Vote:
    """One model's prediction for one input record."""
    prediction: Any
    confidence: Optional[float] = None
    distribution: Optional[Mapping[Any, float]] = None
    order: int = 0
    model_id: Optional[str] = None


class VoteSet:
    """
    Ordered, read-only collection of the votes gathered for one record.
    Vote order follows the ensemble's model order and drives tie-breaking.
    """

    def __init__(self, votes: Iterable[Vote] = ()):
        self._votes: Tuple[Vote, ...] = tuple(votes)

    def __len__(self) -> int:
        return len(self._votes)

    def __iter__(self) -> Iterator[Vote]:
        return iter(self._votes)

    def __getitem__(self, index: int) -> Vote:
        return self._votes[index]

    def __repr__(self) -> str:
        return f"VoteSet({list(self._votes)!r})"

    def predictions(self) -> list:
        return [v.prediction for v in self._votes]

    def is_regression(self) -> bool:
        """
        True when every vote is numeric, False when every vote is categorical.
        Raises EmptyVoteSetError on an empty set and TypeMismatchError on a mix.
        """
        if not self._votes:
            raise EmptyVoteSetError("No votes to combine")
        kinds = {is_numeric(p) for p in self.predictions()}
        if len(kinds) > 1:
            raise TypeMismatchError(
                "Vote set mixes categorical and numeric predictions"
            )
        return kinds.pop()

