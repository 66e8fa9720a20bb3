from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

from practical.InteractiveKMeans.kmeans_interactive import KMeansState


def plot_clusters(data: np.ndarray, centroids: Optional[np.ndarray] = None, assignment: Optional[np.ndarray] = None, ax=None):
    """
    Scatter plot of the data colored by cluster, centroids as red crosses.

    Without an assignment the points are drawn gray. Only the first two
    features are plotted.
    """
    if ax is None:
        _, ax = plt.subplots()
    data = np.asarray(data)
    if assignment is None or centroids is None or np.any(np.asarray(assignment) < 0):
        ax.scatter(data[:, 0], data[:, 1], c="gray", s=10, label="Unassigned Data")
    else:
        assignment = np.asarray(assignment)
        k = len(centroids)
        cmap = plt.get_cmap("viridis", k)
        for i in range(k):
            points = data[assignment == i]
            ax.scatter(points[:, 0], points[:, 1], color=cmap(i), label=f"Cluster {i + 1}", s=10)
    if centroids is not None and len(centroids):
        centroids = np.asarray(centroids)
        ax.scatter(centroids[:, 0], centroids[:, 1], c="red", s=100, marker="x", label="Centroids")
    return ax


def plot_state(data: np.ndarray, state: Optional[KMeansState] = None, ax=None, title: Optional[str] = None):
    if state is None:
        ax = plot_clusters(data, ax=ax)
    else:
        assignment = state.assignment if state.is_assigned else None
        ax = plot_clusters(data, state.centroids, assignment, ax=ax)
    if title is None:
        if state is None:
            title = "KMeans Clustering"
        else:
            title = f"KMeans Clustering - step {state.iteration}"
            if state.converged:
                title += " (converged)"
    ax.set_title(title)
    return ax
