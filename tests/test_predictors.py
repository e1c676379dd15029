# tests/test_predictors.py

import json

import joblib
import numpy as np
import pandas as pd
import pytest
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from ensemble_api.errors import ResolutionError
from ensemble_api.inference.ensemble import LocalEnsemble
from ensemble_api.inference.predictors import (
    SklearnModelPredictor,
    StoragePredictorFactory,
    load_model,
    model_path,
    read_resource,
)

FIELDS = ["petal length", "petal width"]

@pytest.fixture
def iris_like():
    X = pd.DataFrame(
        [[1.4, 0.2], [1.3, 0.2], [4.7, 1.4], [4.5, 1.5], [6.0, 2.5], [5.9, 2.1]],
        columns=FIELDS,
    )
    y = ["setosa", "setosa", "versicolor", "versicolor", "virginica", "virginica"]
    return X, y

@pytest.fixture
def classifier(iris_like):
    X, y = iris_like
    return DecisionTreeClassifier(random_state=0).fit(X, y)

@pytest.fixture
def regressor(iris_like):
    X, _ = iris_like
    return DecisionTreeRegressor(random_state=0).fit(X, [1.0, 1.0, 2.0, 2.0, 3.0, 3.0])

# ─── SklearnModelPredictor ────────────────────────────────────────────────

def test_classifier_vote(classifier):
    vote = SklearnModelPredictor(classifier).predict({"petal length": 4.6, "petal width": 1.4})
    assert vote.prediction == "versicolor"
    assert vote.confidence == pytest.approx(1.0)
    assert set(vote.distribution) == {"setosa", "versicolor", "virginica"}
    assert sum(vote.distribution.values()) == pytest.approx(1.0)

def test_classifier_vote_by_index(classifier):
    vote = SklearnModelPredictor(classifier).predict({0: 1.35, 1: 0.2}, by_name=False)
    assert vote.prediction == "setosa"
    vote = SklearnModelPredictor(classifier).predict([6.1, 2.4], by_name=False)
    assert vote.prediction == "virginica"

def test_numeric_labels_are_plain_python():
    X = np.array([[0.0], [1.0], [2.0], [3.0]])
    clf = DecisionTreeClassifier(random_state=0).fit(X, [0, 0, 1, 1])
    vote = SklearnModelPredictor(clf).predict([2.5], by_name=False)
    assert vote.prediction == 1
    assert type(vote.prediction) is int
    assert all(type(k) is int for k in vote.distribution)

def test_regressor_vote(regressor):
    vote = SklearnModelPredictor(regressor).predict({"petal length": 5.95, "petal width": 2.3})
    assert vote.prediction == pytest.approx(3.0)
    assert isinstance(vote.prediction, float)
    assert vote.confidence is None
    assert vote.distribution is None

def test_missing_field_raises(classifier):
    with pytest.raises(KeyError):
        SklearnModelPredictor(classifier).predict({"petal length": 1.0})

def test_unnamed_model_needs_index_records():
    X = np.array([[0.0], [1.0]])
    reg = DecisionTreeRegressor().fit(X, [0.0, 1.0])
    with pytest.raises(ValueError):
        SklearnModelPredictor(reg).predict({"x": 1.0})

# ─── storage resolution ───────────────────────────────────────────────────

def test_model_path_flattens_id(tmp_path):
    assert model_path("model/abc", str(tmp_path)) == str(tmp_path / "model_abc.pkl")

def test_load_model_roundtrip(tmp_path, classifier):
    joblib.dump(classifier, model_path("model/a", str(tmp_path)))
    predictor = load_model("model/a", str(tmp_path))
    assert predictor.fields == FIELDS
    assert predictor.predict({"petal length": 1.4, "petal width": 0.2}).prediction == "setosa"

def test_load_model_with_field_list(tmp_path):
    X = np.array([[0.0], [1.0], [2.0], [3.0]])
    reg = DecisionTreeRegressor(random_state=0).fit(X, [0.0, 0.0, 10.0, 10.0])
    joblib.dump({"model": reg, "fields": ["age"]}, model_path("model/b", str(tmp_path)))
    predictor = load_model("model/b", str(tmp_path))
    assert predictor.fields == ["age"]
    assert predictor.predict({"age": 3.0}).prediction == pytest.approx(10.0)

def test_load_model_missing(tmp_path):
    with pytest.raises(ResolutionError) as exc:
        load_model("model/nope", str(tmp_path))
    assert exc.value.model_id == "model/nope"

def test_load_model_corrupt(tmp_path):
    (tmp_path / "model_bad.pkl").write_bytes(b"not a pickle")
    with pytest.raises(ResolutionError):
        load_model("model/bad", str(tmp_path))

def test_storage_factory_builds_ensemble(tmp_path, classifier, iris_like):
    X, y = iris_like
    other = DecisionTreeClassifier(max_depth=1, random_state=0).fit(X, y)
    joblib.dump(classifier, model_path("model/a", str(tmp_path)))
    joblib.dump(other, model_path("model/b", str(tmp_path)))

    ens = LocalEnsemble(["model/a", "model/b"], StoragePredictorFactory(str(tmp_path)))
    result = ens.predict({"petal length": 1.4, "petal width": 0.2}, method=2, with_confidence=True)
    assert result.prediction == "setosa"
    assert result.count == 2

def test_storage_factory_missing_model(tmp_path):
    with pytest.raises(ResolutionError):
        LocalEnsemble(["model/a"], StoragePredictorFactory(str(tmp_path)))

# ─── resource files ───────────────────────────────────────────────────────

def test_read_resource(tmp_path):
    resource = {"resource": "ensemble/e1", "object": {"models": ["model/a"]}}
    fp = tmp_path / "ensemble.json"
    fp.write_text(json.dumps(resource), encoding="utf-8")
    assert read_resource(str(fp)) == resource

def test_read_resource_missing_or_invalid(tmp_path):
    with pytest.raises(ResolutionError):
        read_resource(str(tmp_path / "missing.json"))
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ResolutionError):
        read_resource(str(bad))
