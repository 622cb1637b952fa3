"""Tests for confusion-matrix evaluation."""

import pytest

from churnstream.features import FeatureDef, FeatureExtractor
from churnstream.models import LogisticTrainer, ModelEvaluator, RiskScorer

from conftest import make_scored


@pytest.fixture
def evaluator(test_config):
    return ModelEvaluator(test_config)


def test_perfect_predictions_score_100(evaluator):
    rows = [make_scored(90, 1), make_scored(10, 0), make_scored(75, 1), make_scored(20, 0)]
    stats = evaluator.evaluate(rows)

    assert stats.accuracy == 100.0
    assert stats.precision == 100.0
    assert stats.recall == 100.0
    assert stats.f1 == 100.0


def test_empty_rows_give_zero_metrics(evaluator):
    stats = evaluator.evaluate([])

    assert stats.threshold == 50
    assert (stats.accuracy, stats.precision, stats.recall, stats.f1) == (0, 0, 0, 0)
    assert stats.total == 0


def test_no_positive_predictions_defaults_to_zero(evaluator):
    rows = [make_scored(10, 1), make_scored(20, 0)]
    stats = evaluator.evaluate(rows)

    assert stats.precision == 0
    assert stats.recall == 0
    assert stats.f1 == 0
    assert stats.accuracy == 50.0


def test_mixed_confusion_matrix(evaluator):
    rows = [
        make_scored(80, 1),
        make_scored(60, 0),
        make_scored(30, 1),
        make_scored(10, 0),
        make_scored(55, 1),
    ]
    stats = evaluator.evaluate(rows)

    assert (stats.true_positives, stats.false_positives, stats.true_negatives, stats.false_negatives) == (2, 1, 1, 1)
    assert stats.accuracy == 60.0
    assert stats.precision == 66.67
    assert stats.recall == 66.67
    assert stats.f1 == 66.67


def test_threshold_is_inclusive(evaluator):
    stats = evaluator.evaluate([make_scored(50.0, 1), make_scored(49.99, 0)])
    assert stats.true_positives == 1
    assert stats.true_negatives == 1


def test_threshold_is_reported(evaluator):
    stats = evaluator.evaluate([make_scored(40, 1)], threshold=30)
    assert stats.threshold == 30
    assert stats.true_positives == 1


def test_threshold_defaults_from_config(test_config):
    test_config["evaluation"] = {"threshold": 70}
    stats = ModelEvaluator(test_config).evaluate([make_scored(65, 1)])

    assert stats.threshold == 70
    assert stats.false_negatives == 1


def test_end_to_end_confusion_counts_sum_to_dataset_size(test_config, evaluator):
    defs = (FeatureDef("usage", "Usage"), FeatureDef("calls", "Calls"))
    extractor = FeatureExtractor(test_config, feature_defs=defs)
    labels = [1, 0, 1, 0, 1, 0, 1, 0, 1, 0]
    records = [
        {"usage": str(10 + i * 3), "calls": str(i % 4), "churn": "True" if label else "False"}
        for i, label in enumerate(labels)
    ]

    rows = extractor.extract_all(records)
    model = LogisticTrainer(test_config, extractor).train(rows, epochs=100, learning_rate=0.05, l2=0.0005)
    scored = RiskScorer(extractor).score_all(rows, model)
    stats = evaluator.evaluate(scored)

    assert [row.actual_churn for row in rows] == labels
    assert stats.total == 10
