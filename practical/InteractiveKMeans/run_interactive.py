import logging
import os
import pathlib
import sys

sys.path.append(os.getcwd())

import matplotlib.pyplot as plt
from tqdm import tqdm

from practical.InteractiveKMeans.config import get_config
from practical.InteractiveKMeans.initialization import InitMethod
from practical.InteractiveKMeans.session import KMeansSession, generate_random_data
from practical.InteractiveKMeans.visualization import plot_state


def setup_logging(log_path=None):
    # logging config
    logging.root.handlers = []
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_path is not None:
        log_path = pathlib.Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=handlers,
    )


def run(config):
    data = generate_random_data(
        config.data.n_samples,
        config.data.n_features,
        config.data.low,
        config.data.high,
        random_state=config.kmeans.seed,
    )
    session = KMeansSession(
        data,
        k=config.kmeans.k,
        init_method=config.kmeans.init_method,
        random_state=config.kmeans.seed,
        tol=config.kmeans.tol,
        max_iterations=config.kmeans.max_iterations,
    )
    if session.init_method == InitMethod.MANUAL:
        for center in config.kmeans.manual_centers or []:
            if session.collector.is_complete:
                break
            session.add_manual_center(center)
    if not session.is_ready:
        raise ValueError(f"config.kmeans.manual_centers must contain {session.k} centers")
    state = session.state

    if config.plot.show:
        plt.ion()
        _, ax = plt.subplots(figsize=(7, 6))
        plot_state(data, state, ax=ax)
        plt.pause(config.plot.pause)

    for _ in tqdm(range(config.kmeans.max_iterations), desc="Step"):
        state = session.step()
        if config.plot.show:
            ax.clear()
            plot_state(data, state, ax=ax)
            plt.pause(config.plot.pause)
        if state.converged:
            break

    if state.converged:
        logging.info(f"KMeans has converged after {state.iteration} steps")
    else:
        logging.warning(f"KMeans did not converge within {state.iteration} steps")
    if state.is_assigned:
        logging.info(f"Inertia: {session.kmeans.inertia(state):.4f}")

    if config.plot.show:
        plt.ioff()
        plt.show()
    return state


if __name__ == "__main__":
    config = get_config()
    setup_logging(config.logging.log_path)
    run(config)
