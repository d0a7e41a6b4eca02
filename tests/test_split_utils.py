import numpy as np
import pytest

from utils.split_utils import DocumentSplitter, get_default_splitter


def test_bernoulli_split_is_reproducible():
    first = DocumentSplitter(random_state=7).split(200)
    second = DocumentSplitter(random_state=7).split(200)
    np.testing.assert_array_equal(first[0], second[0])
    np.testing.assert_array_equal(first[1], second[1])

    other = DocumentSplitter(random_state=8).split(200)
    assert not np.array_equal(first[1], other[1])


def test_bernoulli_split_partitions_documents():
    train_idx, test_idx = DocumentSplitter(test_size=0.25, random_state=1).split(1000)
    assert len(np.intersect1d(train_idx, test_idx)) == 0
    np.testing.assert_array_equal(np.sort(np.concatenate([train_idx, test_idx])),
                                  np.arange(1000))
    assert np.all(np.diff(train_idx) > 0)
    # Roughly one in four documents is held out
    assert 180 < len(test_idx) < 320


def test_random_split_is_stratified():
    labels = ['high'] * 80 + ['low'] * 20
    train_idx, test_idx = DocumentSplitter('random', test_size=0.2).split(100, labels)
    test_labels = [labels[i] for i in test_idx]
    assert len(test_idx) == 20
    assert test_labels.count('low') == 4


def test_invalid_configuration():
    with pytest.raises(ValueError):
        DocumentSplitter('temporal')
    with pytest.raises(ValueError):
        DocumentSplitter(test_size=0.0)
    with pytest.raises(ValueError):
        DocumentSplitter(test_size=1.5)


def test_empty_side_raises():
    with pytest.raises(ValueError):
        DocumentSplitter().split(0)


def test_default_splitter():
    splitter = get_default_splitter()
    assert splitter.split_type == 'bernoulli'
    assert splitter.test_size == 0.2
    assert splitter.random_state == 42
