# ensemble_api/preprocessing/record_processing.py

from typing import Any, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin


class RecordVectorizer(BaseEstimator, TransformerMixin):
    """
    Turns input records into the feature matrix a fitted model expects.

    Parameters:
    - fields: the model's input field names, in training order (None when the
      model was fitted without names; records must then be given by index)
    - n_features: number of input fields, used when `fields` is None
    - by_name: True if records map field name -> value, False if they map
      field index -> value (a plain sequence works too)

    transform(X) expects X to be an iterable of records and returns a pandas
    DataFrame whose columns are `fields`, or a 2d object ndarray when the
    model has no field names. Missing fields raise KeyError/IndexError; the
    vectorizer does not fill defaults.
    """

    def __init__(
        self,
        fields: Optional[Sequence[str]] = None,
        n_features: Optional[int] = None,
        by_name: bool = True,
    ):
        self.fields = fields
        self.n_features = n_features
        self.by_name = by_name

    def fit(self, X: Iterable, y=None):
        # Stateless.
        return self

    def _width(self) -> int:
        if self.fields is not None:
            return len(self.fields)
        if self.n_features is None:
            raise ValueError("RecordVectorizer needs either fields or n_features")
        return self.n_features

    def _row(self, record: Any) -> List[Any]:
        if self.by_name:
            if self.fields is None:
                raise ValueError("Model has no field names; pass the record by index")
            return [record[name] for name in self.fields]
        return [record[i] for i in range(self._width())]

    def transform(self, X: Iterable):
        rows = [self._row(record) for record in X]
        if self.fields is not None:
            return pd.DataFrame(rows, columns=list(self.fields))
        return np.array(rows, dtype=object).reshape(len(rows), self._width())
