from typing import Tuple

import numpy as np


def euclidean_distance(x1: np.ndarray, x2: np.ndarray) -> float:
    """Calculates and returns the Euclidean distance between two vectors x1 and x2.

    Parameters:
    -----------
    x1: np.ndarray
        The first vector.
    x2: np.ndarray
        The second vector.

    Returns:
    --------
    float
        The Euclidean distance between the two input vectors.
    """
    diff = np.asarray(x1, dtype=float) - np.asarray(x2, dtype=float)
    return float(np.sqrt(np.sum(np.power(diff, 2))))


def pairwise_distances(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Returns the (n_samples, n_centroids) matrix of Euclidean distances."""
    # Shape: (n_samples, 1, n_features) - (1, n_centroids, n_features)
    squared_diff = (X[:, np.newaxis, :] - centroids[np.newaxis, :, :]) ** 2
    return np.sqrt(squared_diff.sum(axis=2))


def assign_to_nearest(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Returns the index of the closest centroid for every sample in X.

    np.argmin returns the first minimum, so on ties the centroid with the
    lowest index wins.
    """
    return np.argmin(pairwise_distances(X, centroids), axis=1)


def compute_means(
    X: np.ndarray, assignment: np.ndarray, k: int, fallback: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """Computes the updated centroids of the clusters.

    Parameters:
    -----------
    X: np.ndarray
        The input data matrix of shape (n_samples, n_features).
    assignment: np.ndarray
        An array containing the indices of the clusters to which each sample belongs.
    k: int
        The number of clusters.
    fallback: np.ndarray
        Centroids of shape (k, n_features) used for clusters without any
        assigned sample.

    Returns:
    --------
    Tuple[np.ndarray, np.ndarray]
        The new centroids of shape (k, n_features) and a boolean mask of length
        k that is True for every empty cluster.
    """
    counts = np.bincount(assignment, minlength=k)
    sums = np.zeros((k, X.shape[1]))
    np.add.at(sums, assignment, X)
    empty = counts == 0
    centroids = np.array(fallback, dtype=float, copy=True)
    centroids[~empty] = sums[~empty] / counts[~empty, np.newaxis]
    return centroids, empty


def centroid_shift(previous: np.ndarray, current: np.ndarray) -> np.ndarray:
    """Returns how far every centroid moved between two centroid sets."""
    return np.sqrt(np.sum((current - previous) ** 2, axis=1))


def inertia(X: np.ndarray, centroids: np.ndarray, assignment: np.ndarray) -> float:
    """Within-cluster sum of squared distances."""
    return float(np.sum((X - centroids[assignment]) ** 2))
