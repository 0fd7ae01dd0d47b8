"""
Visualization tools for perceptron training.

Static matplotlib plots of loss evolution and weight norms.
"""

from neuralnet.visualization.training_plots import (
    plot_loss_history,
    plot_weight_norms
)

__all__ = [
    'plot_loss_history',
    'plot_weight_norms'
]
