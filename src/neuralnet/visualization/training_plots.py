"""
Training visualization for the perceptron.

Plots loss evolution and weight-norm trajectories collected during training.
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import List, Optional, Sequence, Union

from neuralnet.training.loop import TrainingHistory


def plot_loss_history(history: Union[TrainingHistory, Sequence[float]],
                      title: str = "Training Loss",
                      figsize: tuple = (10, 6),
                      log_scale: bool = False,
                      save_path: Optional[str] = None):
    """
    Plot the per-epoch loss (matplotlib).

    Args:
        history: TrainingHistory or list of loss values
        title: Plot title
        figsize: Figure size
        log_scale: Use a logarithmic y axis
        save_path: Optional path to save figure
    """
    losses = history.losses if isinstance(history, TrainingHistory) else list(history)
    if not losses:
        raise ValueError("Loss history is empty")

    fig, ax = plt.subplots(figsize=figsize)

    epochs = np.arange(1, len(losses) + 1)

    ax.plot(epochs, losses, linewidth=2, color='#2E86AB')
    ax.set_xlabel('Epoch', fontsize=12)
    ax.set_ylabel('Mean Squared Error', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)
    if log_scale:
        ax.set_yscale('log')

    # Annotate initial and final
    ax.annotate(f'Initial: {losses[0]:.4f}',
                xy=(1, losses[0]),
                xytext=(10, 10), textcoords='offset points',
                fontsize=10, color='green',
                bbox=dict(boxstyle='round,pad=0.5', facecolor='white', alpha=0.8))

    ax.annotate(f'Final: {losses[-1]:.4f}',
                xy=(len(losses), losses[-1]),
                xytext=(-80, 20), textcoords='offset points',
                fontsize=10, color='red',
                bbox=dict(boxstyle='round,pad=0.5', facecolor='white', alpha=0.8))

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    return fig


def plot_weight_norms(norm_history: List[List[float]],
                      title: str = "Weight Norms",
                      figsize: tuple = (10, 6),
                      save_path: Optional[str] = None):
    """
    Plot each transition's weight norm over time.

    Args:
        norm_history: One entry per recorded step, each a list of norms
            (one per transition), e.g. from neuralnet.utils.weight_norms
        title: Plot title
        figsize: Figure size
        save_path: Optional path to save figure
    """
    norms = np.asarray(norm_history, dtype=float)
    if norms.ndim != 2 or norms.shape[0] == 0:
        raise ValueError("Norm history must be a non-empty list of per-transition norms")

    fig, ax = plt.subplots(figsize=figsize)
    steps = np.arange(norms.shape[0])

    for transition in range(norms.shape[1]):
        ax.plot(steps, norms[:, transition], linewidth=2, label=f'$W_{transition}$')

    ax.set_xlabel('Step', fontsize=12)
    ax.set_ylabel('Frobenius Norm', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.legend(loc='best')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    return fig
