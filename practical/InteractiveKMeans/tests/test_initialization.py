import numpy as np
import pytest
from sklearn.datasets import make_blobs

from practical.InteractiveKMeans.initialization import (
    InitMethod,
    farthest_first_indices,
    initialize_centroid_indices,
    initialize_centroids,
    kmeans_plus_plus_indices,
    to_init_method,
)


@pytest.fixture
def sample_data():
    """Fixture providing sample data with four blobs."""
    X, _ = make_blobs(n_samples=200, centers=4, n_features=2, random_state=10)
    return X


@pytest.mark.parametrize("init_method", ["random", "farthestFirst", "kmeans++"])
@pytest.mark.parametrize("k", [1, 4, 10])
def test_data_driven_strategies_pick_k_distinct_samples(sample_data, init_method, k):
    indices = initialize_centroid_indices(sample_data, k, init_method, random_state=0)
    assert len(indices) == k
    assert len(set(indices.tolist())) == k
    assert all(0 <= i < len(sample_data) for i in indices)

    centroids = initialize_centroids(sample_data, k, init_method, random_state=0)
    assert centroids.shape == (k, 2)
    assert np.array_equal(centroids, sample_data[indices])


@pytest.mark.parametrize("init_method", ["random", "farthestFirst", "kmeans++"])
def test_k_equals_n_picks_every_sample(init_method):
    X = np.arange(12, dtype=float).reshape(6, 2)
    indices = initialize_centroid_indices(X, 6, init_method, random_state=1)
    assert sorted(indices.tolist()) == list(range(6))


def test_same_seed_same_centroids(sample_data):
    for init_method in InitMethod:
        if init_method == InitMethod.MANUAL:
            continue
        first = initialize_centroids(sample_data, 4, init_method, random_state=42)
        second = initialize_centroids(sample_data, 4, init_method, random_state=42)
        assert np.array_equal(first, second)


def test_farthest_first():
    X = np.array([[0.0, 0.0], [1.0, 0.0], [10.0, 0.0], [5.0, 5.0]])
    indices = farthest_first_indices(X, 3, first_index=0)
    assert indices.tolist() == [0, 2, 3]


def test_farthest_first_is_deterministic_given_first_pick(sample_data):
    first = farthest_first_indices(sample_data, 5, random_state=0, first_index=17)
    second = farthest_first_indices(sample_data, 5, random_state=123, first_index=17)
    assert first[0] == 17
    assert np.array_equal(first, second)


def test_farthest_first_breaks_ties_by_first_occurrence():
    X = np.array([[0.0, 0.0], [1.0, 0.0], [-1.0, 0.0]])
    assert farthest_first_indices(X, 2, first_index=0).tolist() == [0, 1]


def test_farthest_first_with_duplicate_samples():
    X = np.zeros((5, 2))
    indices = farthest_first_indices(X, 5, first_index=2)
    assert sorted(indices.tolist()) == list(range(5))


def test_kmeans_plus_plus_never_repeats_a_sample():
    X = np.vstack([np.zeros((5, 2)), np.ones((2, 2))])
    for seed in range(20):
        indices = kmeans_plus_plus_indices(X, 7, random_state=seed)
        assert len(set(indices.tolist())) == 7


def test_kmeans_plus_plus_samples_proportional_to_squared_distance():
    X = np.array([[0.0], [1.0], [3.0]])
    random_state = np.random.RandomState(0)
    # weights after picking sample 0: [0, 1, 9]
    picks = [kmeans_plus_plus_indices(X, 2, random_state, first_index=0)[1] for _ in range(2000)]
    picks = np.array(picks)
    assert 0 not in picks
    assert 0.85 < np.mean(picks == 2) < 0.95


def test_manual_initialization():
    X = np.zeros((4, 2))
    centers = [[1, 2], [3, 4], [5, 6]]
    centroids = initialize_centroids(X, 2, "manual", centers=centers)
    assert np.array_equal(centroids, [[1.0, 2.0], [3.0, 4.0]])


def test_manual_initialization_rejects_too_few_centers():
    X = np.zeros((4, 2))
    with pytest.raises(ValueError, match="needs 3 centers, got 2"):
        initialize_centroids(X, 3, InitMethod.MANUAL, centers=[[0, 0], [1, 1]])
    with pytest.raises(ValueError):
        initialize_centroids(X, 1, InitMethod.MANUAL)


def test_manual_initialization_rejects_wrong_dimension():
    X = np.zeros((4, 2))
    with pytest.raises(ValueError, match="2 features"):
        initialize_centroids(X, 1, InitMethod.MANUAL, centers=[[0, 0, 0]])


def test_to_init_method():
    assert to_init_method("kmeans++") is InitMethod.KMEANS_PLUS_PLUS
    assert to_init_method("farthestFirst") is InitMethod.FARTHEST_FIRST
    assert to_init_method(InitMethod.MANUAL) is InitMethod.MANUAL
    with pytest.raises(ValueError, match="unknown init_method"):
        to_init_method("kmeans||")


class _TopOfRangeState(np.random.RandomState):
    """Returns the upper bound of [0, 1) as if the draw had rounded up."""

    def uniform(self, low=0.0, high=1.0, size=None):
        return high


def test_kmeans_plus_plus_draw_at_total_weight_picks_unchosen_sample():
    X = np.array([[0.0], [1.0], [2.0]])
    indices = kmeans_plus_plus_indices(X, 2, _TopOfRangeState(0), first_index=2)
    assert indices.tolist() == [2, 1]


def test_manual_initialization_rejects_malformed_centers():
    X = np.zeros((4, 2))
    with pytest.raises(ValueError):
        initialize_centroids(X, 1, InitMethod.MANUAL, centers=[1.0, 2.0])
    with pytest.raises(ValueError):
        initialize_centroids(X, 2, InitMethod.MANUAL, centers=[[0.0, 0.0], [1.0]])
