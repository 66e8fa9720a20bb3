import logging
from enum import Enum
from typing import List, Optional, Sequence, Union

import numpy as np
from sklearn.utils import check_random_state

from practical.InteractiveKMeans.distances import pairwise_distances


class InitMethod(Enum):
    """
    Enumeration for the centroid initialization strategies.
    """

    RANDOM = "random"
    FARTHEST_FIRST = "farthestFirst"
    KMEANS_PLUS_PLUS = "kmeans++"
    MANUAL = "manual"


def to_init_method(init_method: Union[InitMethod, str]) -> InitMethod:
    """Accepts an InitMethod or its string value ("random", "farthestFirst", ...)."""
    if isinstance(init_method, InitMethod):
        return init_method
    try:
        return InitMethod(init_method)
    except ValueError:
        valid = ", ".join(m.value for m in InitMethod)
        raise ValueError(
            f"unknown init_method '{init_method}', expected one of: {valid}"
        ) from None


def _first_index(n_samples: int, random_state: np.random.RandomState, first_index: Optional[int]) -> int:
    if first_index is None:
        return int(random_state.randint(n_samples))
    if not 0 <= first_index < n_samples:
        raise ValueError("first_index must lie in [0, n_samples)")
    return int(first_index)


def _nearest_distances(X: np.ndarray, center: np.ndarray) -> np.ndarray:
    return pairwise_distances(X, center[np.newaxis, :])[:, 0]


def random_indices(X: np.ndarray, k: int, random_state=None) -> np.ndarray:
    """Draws k distinct sample indices uniformly at random (without replacement)."""
    random_state = check_random_state(random_state)
    return random_state.choice(X.shape[0], k, replace=False)


def farthest_first_indices(
    X: np.ndarray, k: int, random_state=None, first_index: Optional[int] = None
) -> np.ndarray:
    """
    Farthest-first traversal.

    The first center is a uniformly random sample (or ``first_index``). Every
    following center is the sample whose distance to its nearest chosen center
    is largest. Ties are resolved in favour of the first sample in data order.
    Samples that are already centers are excluded, so no index is chosen twice.

    Parameters
    ----------
    X : np.ndarray
        The data of shape (n_samples, n_features).
    k : int
        Number of centers to choose.
    random_state : None | int | np.random.RandomState
        Source of randomness for the first pick.
    first_index : int, optional
        Fixes the first pick; the remaining picks are then deterministic.

    Returns
    -------
    indices : np.ndarray
        The k chosen sample indices in the order they were picked.
    """
    random_state = check_random_state(random_state)
    n_samples = X.shape[0]
    indices = [_first_index(n_samples, random_state, first_index)]
    closest = _nearest_distances(X, X[indices[0]])
    chosen = np.zeros(n_samples, dtype=bool)
    chosen[indices[0]] = True

    while len(indices) < k:
        candidates = np.where(chosen, -np.inf, closest)
        # argmax returns the first occurrence of the maximum
        next_index = int(np.argmax(candidates))
        indices.append(next_index)
        chosen[next_index] = True
        closest = np.minimum(closest, _nearest_distances(X, X[next_index]))
    return np.array(indices, dtype=int)


def kmeans_plus_plus_indices(
    X: np.ndarray, k: int, random_state=None, first_index: Optional[int] = None
) -> np.ndarray:
    """
    k-means++ seeding.

    After a uniformly random first center, each next center is drawn with a
    probability proportional to the squared distance to its nearest chosen
    center. Sampling uses the prefix sum of the weights and a binary search
    with a single uniform draw, so chosen centers (weight 0) are never drawn
    again.

    Parameters
    ----------
    X : np.ndarray
        The data of shape (n_samples, n_features).
    k : int
        Number of centers to choose.
    random_state : None | int | np.random.RandomState
        Source of randomness.
    first_index : int, optional
        Fixes the first pick.

    Returns
    -------
    indices : np.ndarray
        The k chosen sample indices in the order they were picked.
    """
    random_state = check_random_state(random_state)
    n_samples = X.shape[0]
    indices = [_first_index(n_samples, random_state, first_index)]
    closest_sq = _nearest_distances(X, X[indices[0]]) ** 2
    chosen = np.zeros(n_samples, dtype=bool)
    chosen[indices[0]] = True

    while len(indices) < k:
        weights = np.where(chosen, 0.0, closest_sq)
        cumulative = np.cumsum(weights)
        total = cumulative[-1]
        if total > 0:
            # first index whose cumulative weight exceeds the draw
            next_index = int(np.searchsorted(cumulative, random_state.uniform() * total, side="right"))
            next_index = min(next_index, int(np.flatnonzero(~chosen)[-1]))
        else:
            # every remaining sample coincides with a chosen center
            next_index = int(random_state.choice(np.flatnonzero(~chosen)))
        indices.append(next_index)
        chosen[next_index] = True
        closest_sq = np.minimum(closest_sq, _nearest_distances(X, X[next_index]) ** 2)
    return np.array(indices, dtype=int)


def manual_centers(centers: Optional[Sequence[Sequence[float]]], k: int, n_features: int) -> np.ndarray:
    """Returns the first k externally chosen centers."""
    if centers is None:
        raise ValueError(f"manual initialization needs {k} centers, got 0")
    try:
        centers = np.asarray(centers, dtype=float)
    except (TypeError, ValueError):
        raise ValueError("manual centers must be a sequence of points of equal length") from None
    if centers.ndim != 2 or centers.shape[1] != n_features:
        raise ValueError(f"manual centers must have {n_features} features")
    if len(centers) < k:
        raise ValueError(f"manual initialization needs {k} centers, got {len(centers)}")
    return centers[:k].copy()


def initialize_centroid_indices(
    X: np.ndarray,
    k: int,
    init_method: Union[InitMethod, str],
    random_state=None,
    first_index: Optional[int] = None,
) -> np.ndarray:
    """Returns the sample indices picked by one of the data-driven strategies."""
    init_method = to_init_method(init_method)
    if init_method == InitMethod.RANDOM:
        return random_indices(X, k, random_state)
    if init_method == InitMethod.FARTHEST_FIRST:
        return farthest_first_indices(X, k, random_state, first_index)
    if init_method == InitMethod.KMEANS_PLUS_PLUS:
        return kmeans_plus_plus_indices(X, k, random_state, first_index)
    raise ValueError(f"{init_method.value} initialization does not pick sample indices")


def initialize_centroids(
    X: np.ndarray,
    k: int,
    init_method: Union[InitMethod, str] = InitMethod.RANDOM,
    random_state=None,
    centers: Optional[List[Sequence[float]]] = None,
) -> np.ndarray:
    """Initializes and returns k centroids of shape (k, n_features).

    Parameters:
    -----------
    X: np.ndarray
        The input data matrix of shape (n_samples, n_features).
    k: int
        Number of centroids.
    init_method: InitMethod or str
        One of "random", "farthestFirst", "kmeans++" and "manual".
    random_state: None | int | np.random.RandomState
        Source of randomness for the randomized strategies.
    centers: list, optional
        The externally chosen centers, only used by the manual strategy.

    Returns:
    --------
    np.ndarray
        An array containing the initial centroids.
    """
    init_method = to_init_method(init_method)
    if init_method == InitMethod.MANUAL:
        centroids = manual_centers(centers, k, X.shape[1])
    else:
        indices = initialize_centroid_indices(X, k, init_method, random_state)
        centroids = X[indices].astype(float)
    logging.info(f"Initialized {k} centroids with '{init_method.value}'")
    return centroids
