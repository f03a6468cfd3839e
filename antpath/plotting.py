from __future__ import annotations
import os
import shutil
import tempfile
from typing import Dict, List, Optional, Sequence, Union

import imageio
import matplotlib.pyplot as plt
import numpy as np

from .colony import ColonyResult


def ensure(path: str) -> str:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)
    return path


def plot_convergence(result: Union[ColonyResult, Sequence[float]], save_path: str, title: str = "Convergence"):
    history = result.history_best_costs if isinstance(result, ColonyResult) else list(result)
    fig, ax = plt.subplots()
    ax.plot(np.arange(1, len(history) + 1), history)
    ax.set_xlabel("Iteration")
    ax.set_ylabel("Best-so-far cost")
    ax.set_title(title)
    ensure(save_path)
    fig.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return save_path


def plot_distribution(costs_by_label: Dict[str, List[float]], save_path: str):
    fig, ax = plt.subplots()
    data = [list(costs) for costs in costs_by_label.values()]
    ax.boxplot(data)
    ax.set_xticks(range(1, len(data) + 1))
    ax.set_xticklabels(list(costs_by_label.keys()))
    ax.set_ylabel("Best cost")
    ax.set_title("Distribution of best costs across runs")
    ensure(save_path)
    fig.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return save_path


def animate_pheromones(history_pheromones: Sequence[np.ndarray], gif_path: str, step: int = 1,
                       frames_dir: Optional[str] = None, keep_frames: bool = False):
    """Render the pheromone matrix after every `step` iterations into a GIF.

    Frames go to a temp folder that is deleted afterwards, unless `keep_frames`.
    """
    if not history_pheromones:
        raise ValueError("No pheromone snapshots to animate; run with record_pheromones=True.")
    tmpdir_was_auto = False
    if frames_dir is None:
        frames_dir = tempfile.mkdtemp(prefix="pheromone_frames_")
        tmpdir_was_auto = True
    else:
        os.makedirs(frames_dir, exist_ok=True)

    vmin = min(float(np.min(t)) for t in history_pheromones)
    vmax = max(float(np.max(t)) for t in history_pheromones)
    frames = []
    for it in range(0, len(history_pheromones), step):
        fig, ax = plt.subplots(figsize=(5, 5))
        im = ax.imshow(history_pheromones[it], vmin=vmin, vmax=vmax, cmap="viridis")
        fig.colorbar(im, ax=ax)
        ax.set_xlabel("from")
        ax.set_ylabel("to")
        ax.set_title(f"Pheromones, iter={it + 1}")
        frame_path = os.path.join(frames_dir, f"pheromones_{it:03d}.png")
        # fixed size so every frame has the same shape
        fig.savefig(frame_path, dpi=80)
        plt.close(fig)
        frames.append(frame_path)

    ensure(gif_path)
    with imageio.get_writer(gif_path, mode="I", duration=0.6) as w:
        for fp in frames:
            w.append_data(imageio.v2.imread(fp))

    if not keep_frames and tmpdir_was_auto:
        shutil.rmtree(frames_dir, ignore_errors=True)
    return gif_path
