import numpy as np
import pytest

from evaluation.statistical_tests import StatisticalTester


@pytest.fixture
def tester():
    return StatisticalTester(['high', 'low'], 'high', random_state=0)


def test_bootstrap_detects_better_classifier(tester):
    y_true = ['high', 'low'] * 20
    baseline = ['high'] * 40
    perfect = list(y_true)

    result = tester.bootstrap_confidence_interval(y_true, baseline, perfect, n_iterations=200)
    assert result['n_valid'] == 200
    assert result['mean_diff'] > 0.3
    assert result['ci_low'] > 0
    assert result['is_significant']
    assert result['p_value'] == 0.0


def test_bootstrap_identical_predictions(tester):
    y_true = ['high', 'low', 'high', 'high']
    pred = ['high', 'high', 'low', 'high']
    result = tester.bootstrap_confidence_interval(y_true, pred, pred, n_iterations=50)
    assert result['mean_diff'] == 0.0
    assert not result['is_significant']


def test_bootstrap_skips_undefined_resamples(tester):
    # Precision of 'high' is undefined in every resample
    y_true = ['high', 'low', 'low']
    pred = ['low', 'low', 'low']
    result = tester.bootstrap_confidence_interval(y_true, pred, pred, metric='precision',
                                                  n_iterations=20)
    assert result['n_valid'] == 0
    assert np.isnan(result['mean_diff'])
    assert not result['is_significant']


def test_bootstrap_rejects_misaligned_inputs(tester):
    with pytest.raises(ValueError):
        tester.bootstrap_confidence_interval(['high'], ['high', 'low'], ['low'])
    with pytest.raises(ValueError):
        tester.bootstrap_confidence_interval(['high'], ['high'], ['high'], metric='auc',
                                             n_iterations=1)


def test_mcnemar(tester):
    y_true = ['high'] * 30
    same = tester.mcnemar_test(y_true, ['low'] * 30, ['low'] * 30)
    assert same['p_value'] == 1.0
    assert not same['is_significant']

    better = tester.mcnemar_test(y_true, ['low'] * 30, ['high'] * 30)
    assert better['n10'] == 30
    assert better['n01'] == 0
    assert better['is_significant']
