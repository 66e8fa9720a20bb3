import logging
from typing import List, NamedTuple, Optional, Sequence, Union

import numpy as np
from sklearn.utils import check_random_state

from practical.InteractiveKMeans.distances import (
    assign_to_nearest,
    centroid_shift,
    compute_means,
    inertia,
)
from practical.InteractiveKMeans.initialization import (
    InitMethod,
    initialize_centroids,
    to_init_method,
)

UNASSIGNED = -1
DEFAULT_TOL = 1e-5
DEFAULT_MAX_ITERATIONS = 300


def _read_only(array: np.ndarray) -> np.ndarray:
    array = np.array(array, copy=True)
    array.flags.writeable = False
    return array


class KMeansState(NamedTuple):
    """
    Snapshot of the algorithm after one step.

    Attributes
    ----------
    centroids : np.ndarray
        Current centroids of shape (k, n_features). Row i is cluster i.
    previous_centroids : np.ndarray
        The centroids in use right before the most recent recomputation.
    assignment : np.ndarray
        Cluster index of every sample, UNASSIGNED (-1) before the first step.
    converged : bool
        Sticky: once True, stepping returns the same state.
    iteration : int
        Number of steps that produced this state.
    """

    centroids: np.ndarray
    previous_centroids: np.ndarray
    assignment: np.ndarray
    converged: bool = False
    iteration: int = 0

    @classmethod
    def initial(cls, centroids: np.ndarray, n_samples: int) -> "KMeansState":
        centroids = _read_only(np.asarray(centroids, dtype=float))
        return cls(
            centroids=centroids,
            previous_centroids=centroids,
            assignment=_read_only(np.full(n_samples, UNASSIGNED, dtype=int)),
        )

    @property
    def is_assigned(self) -> bool:
        return bool(self.assignment.size and self.assignment[0] != UNASSIGNED)


def kmeans_step(X: np.ndarray, state: KMeansState, tol: float = DEFAULT_TOL) -> KMeansState:
    """
    Performs one iteration: assignment, centroid recomputation and convergence check.

    Clusters that receive no sample keep their previous centroid. The result is
    converged when every centroid moved strictly less than ``tol``.

    Parameters
    ----------
    X : np.ndarray
        The data of shape (n_samples, n_features).
    state : KMeansState
        The state to advance. It is not modified.
    tol : float
        Convergence threshold on the centroid movement.

    Returns
    -------
    state : KMeansState
        The new state, or ``state`` itself if it is already converged.
    """
    if state.converged:
        return state

    k = state.centroids.shape[0]
    assignment = assign_to_nearest(X, state.centroids)
    centroids, empty = compute_means(X, assignment, k, fallback=state.centroids)
    if empty.any():
        logging.warning(
            f"Iteration {state.iteration + 1}: clusters {np.flatnonzero(empty).tolist()} "
            "are empty, keeping their previous centroids"
        )
    shift = centroid_shift(state.centroids, centroids)
    converged = bool(np.all(shift < tol))
    return KMeansState(
        centroids=_read_only(centroids),
        previous_centroids=state.centroids,
        assignment=_read_only(assignment),
        converged=converged,
        iteration=state.iteration + 1,
    )


class KMeansInteractive:
    """K-means that is advanced one step at a time.

    The centroids are initialized once at construction. Each call to ``step``
    assigns the samples to their nearest centroid, moves every centroid to the
    mean of its samples and checks for convergence. Every step returns a new,
    read-only KMeansState; the engine keeps the history so steps can be undone.


    Parameters:
    -----------
    data: array-like
        The data matrix of shape (n_samples, n_features).
    k: int
        The number of clusters.
    init_method: InitMethod or str, optional
        "random", "farthestFirst", "kmeans++" or "manual". Default is "random".
    manual_centers: list, optional
        The externally chosen centers. Required for the manual strategy, which
        uses the first k of them.
    random_state: None | int | np.random.RandomState, optional
        Source of randomness for the initialization.
    tol: float, optional
        Convergence threshold on the centroid movement. Default is 1e-5.
    max_iterations: int, optional
        Upper bound of steps taken by run_to_convergence. Default is 300.
    """

    def __init__(
        self,
        data,
        k: int,
        init_method: Union[InitMethod, str] = InitMethod.RANDOM,
        manual_centers: Optional[Sequence[Sequence[float]]] = None,
        random_state=None,
        tol: float = DEFAULT_TOL,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        data = np.asarray(data, dtype=float)
        if data.ndim != 2 or data.shape[0] == 0:
            raise ValueError("data must be a non-empty array of shape (n_samples, n_features)")
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
            raise ValueError("k must be an integer")
        if k <= 0:
            raise ValueError("k must be greater than 0")
        if tol < 0:
            raise ValueError("tol must be greater than or equal to 0")
        if max_iterations < 0:
            raise ValueError("max_iterations must be greater than or equal to 0")

        self.init_method = to_init_method(init_method)
        if self.init_method != InitMethod.MANUAL and k > data.shape[0]:
            raise ValueError(
                f"k must not be greater than the number of samples ({data.shape[0]})"
            )

        self.data = _read_only(data)
        self.k = int(k)
        self.manual_centers = None if manual_centers is None else np.asarray(manual_centers, dtype=float)
        self.random_state = check_random_state(random_state)
        self.tol = tol
        self.max_iterations = max_iterations

        centroids = initialize_centroids(
            self.data, self.k, self.init_method, self.random_state, self.manual_centers
        )
        self._history: List[KMeansState] = [KMeansState.initial(centroids, self.data.shape[0])]
        logging.info(
            f"KMeans engine ready: n_samples={self.data.shape[0]}, "
            f"n_features={self.data.shape[1]}, k={self.k}, init={self.init_method.value}"
        )

    @property
    def state(self) -> KMeansState:
        return self._history[-1]

    @property
    def history(self) -> List[KMeansState]:
        return list(self._history)

    @property
    def centroids(self) -> np.ndarray:
        return self.state.centroids

    @property
    def assignment(self) -> np.ndarray:
        return self.state.assignment

    @property
    def converged(self) -> bool:
        return self.state.converged

    @property
    def n_iter(self) -> int:
        return self.state.iteration

    def step(self) -> KMeansState:
        """Advances the algorithm by one iteration and returns the new state."""
        previous = self.state
        state = kmeans_step(self.data, previous, self.tol)
        if state is previous:
            return state
        self._history.append(state)
        logging.info(
            f"Step {state.iteration}: max centroid shift {_max_shift(state):.6g}, "
            f"converged={state.converged}"
        )
        return state

    def run_to_convergence(self, max_iterations: Optional[int] = None) -> KMeansState:
        """Steps until convergence or until ``max_iterations`` steps were taken in this call."""
        max_iterations = self.max_iterations if max_iterations is None else max_iterations
        state = self.state
        for _ in range(max_iterations):
            if state.converged:
                break
            state = self.step()
        if not state.converged:
            logging.warning(f"Stopped after {max_iterations} steps without convergence")
        else:
            logging.info(f"Converged after {state.iteration} steps")
        return state

    def undo(self) -> KMeansState:
        """Drops the most recent state. The initial state is never removed."""
        if len(self._history) > 1:
            self._history.pop()
        return self.state

    def inertia(self, state: Optional[KMeansState] = None) -> float:
        """Within-cluster sum of squares of ``state`` (default: the current state)."""
        state = self.state if state is None else state
        if not state.is_assigned:
            raise ValueError("state has no assignment yet")
        return inertia(self.data, state.centroids, state.assignment)


def _max_shift(state: KMeansState) -> float:
    return float(np.max(centroid_shift(state.previous_centroids, state.centroids)))
