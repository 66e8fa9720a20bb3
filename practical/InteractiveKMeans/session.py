import logging
from typing import List, Optional, Sequence, Union

import numpy as np
from sklearn.utils import check_random_state

from practical.InteractiveKMeans.initialization import InitMethod, to_init_method
from practical.InteractiveKMeans.kmeans_interactive import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TOL,
    KMeansInteractive,
    KMeansState,
)


def generate_random_data(
    n_samples: int = 300, n_features: int = 2, low: float = -5.0, high: float = 5.0, random_state=None
) -> np.ndarray:
    """Returns n_samples points drawn uniformly from [low, high) in every dimension."""
    random_state = check_random_state(random_state)
    return random_state.uniform(low, high, size=(n_samples, n_features))


class ManualCentroidCollector:
    """Collects hand-picked centroids one at a time until k of them are gathered."""

    def __init__(self, k: int, init_method: Union[InitMethod, str] = InitMethod.MANUAL):
        self.k = k
        self.init_method = to_init_method(init_method)
        self._points: List[List[float]] = []

    @property
    def points(self) -> List[List[float]]:
        return [list(p) for p in self._points]

    @property
    def is_complete(self) -> bool:
        return len(self._points) >= self.k

    def add(self, point: Sequence[float]) -> bool:
        """Adds a point and returns True once k points are collected."""
        if self.init_method != InitMethod.MANUAL:
            raise ValueError(
                f"centroids can only be collected for manual initialization, not '{self.init_method.value}'"
            )
        if self.is_complete:
            raise ValueError(f"all {self.k} centroids have already been selected")
        self._points.append([float(x) for x in point])
        return self.is_complete

    def pop(self) -> List[float]:
        """Removes and returns the most recently added point."""
        return self._points.pop()

    def clear(self):
        self._points = []


class KMeansSession:
    """
    Keeps a KMeansInteractive engine in sync with the user's parameters.

    Changing k, the initialization method, the manual centroids or the data
    discards the current engine and builds a new one on the (possibly
    unchanged) data. With manual initialization the engine is only built once
    all k centroids were collected.

    Parameters
    ----------
    data : np.ndarray
        The data of shape (n_samples, n_features).
    k : int
        The number of clusters.
    init_method : InitMethod or str
        The initialization strategy.
    random_state : None | int | np.random.RandomState
        Shared source of randomness for every engine built by this session.
    tol : float
        Convergence threshold handed to the engines.
    max_iterations : int
        Safety cap for run_to_convergence.
    """

    def __init__(
        self,
        data,
        k: int = 3,
        init_method: Union[InitMethod, str] = InitMethod.RANDOM,
        random_state=None,
        tol: float = DEFAULT_TOL,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        self.data = np.asarray(data, dtype=float)
        self.k = k
        self.init_method = to_init_method(init_method)
        self.random_state = check_random_state(random_state)
        self.tol = tol
        self.max_iterations = max_iterations
        self.collector = ManualCentroidCollector(k, self.init_method)
        self.kmeans: Optional[KMeansInteractive] = None
        self._rebuild()

    @property
    def state(self) -> Optional[KMeansState]:
        return None if self.kmeans is None else self.kmeans.state

    @property
    def manual_centers(self) -> List[List[float]]:
        return self.collector.points

    @property
    def is_ready(self) -> bool:
        return self.kmeans is not None

    def _build(self, data, k, init_method, collector) -> Optional[KMeansInteractive]:
        if init_method == InitMethod.MANUAL and not collector.is_complete:
            logging.info(f"Waiting for manual centroids ({len(collector.points)}/{k})")
            return None
        return KMeansInteractive(
            data,
            k,
            init_method,
            manual_centers=collector.points or None,
            random_state=self.random_state,
            tol=self.tol,
            max_iterations=self.max_iterations,
        )

    def _rebuild(self):
        self.kmeans = self._build(self.data, self.k, self.init_method, self.collector)

    def set_k(self, k: int):
        collector = ManualCentroidCollector(k, self.init_method)
        # settings change only once the new engine could be built
        self.kmeans = self._build(self.data, k, self.init_method, collector)
        self.k = k
        self.collector = collector

    def set_init_method(self, init_method: Union[InitMethod, str]):
        init_method = to_init_method(init_method)
        collector = ManualCentroidCollector(self.k, init_method)
        self.kmeans = self._build(self.data, self.k, init_method, collector)
        self.init_method = init_method
        self.collector = collector

    def set_data(self, data):
        data = np.asarray(data, dtype=float)
        collector = ManualCentroidCollector(self.k, self.init_method)
        self.kmeans = self._build(data, self.k, self.init_method, collector)
        self.data = data
        self.collector = collector

    def add_manual_center(self, point: Sequence[float]) -> bool:
        """Adds a hand-picked centroid; builds the engine once k are collected."""
        if len(point) != self.data.shape[1]:
            raise ValueError(f"manual centers must have {self.data.shape[1]} features")
        complete = self.collector.add(point)
        if complete:
            try:
                self._rebuild()
            except ValueError:
                self.collector.pop()
                raise
        return complete

    def _require_engine(self) -> KMeansInteractive:
        if self.kmeans is None:
            if self.init_method == InitMethod.MANUAL:
                raise RuntimeError(
                    f"select {self.k} centroids before stepping ({len(self.collector.points)} selected)"
                )
            raise RuntimeError("no KMeans engine has been built")
        return self.kmeans

    def step(self) -> KMeansState:
        return self._require_engine().step()

    def run_to_convergence(self) -> KMeansState:
        return self._require_engine().run_to_convergence()

    def reset(self):
        """Forgets the manual centroids and the progress of the current engine."""
        self.collector.clear()
        self._rebuild()
