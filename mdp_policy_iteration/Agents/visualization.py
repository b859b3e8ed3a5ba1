"""Plots for policy iteration convergence."""

from typing import Optional
import numpy as np
import matplotlib.pyplot as plt

from .data_structures import ImprovementResult


def plot_convergence(
    result: ImprovementResult,
    title: str = "Policy Iteration",
    save_path: Optional[str] = None,
    show: bool = True
):
    """Visualize the convergence of a policy iteration run.

    Creates a 2-panel figure:
    1. Largest value change per sweep, across all evaluations (log scale)
    2. Largest value change and number of changed states per improvement step

    Parameters
    ----------
    result : ImprovementResult
        Result returned by ``PolicyIterationAgent.improve``
    title : str
        Figure title
    save_path : str, optional
        Path to save figure (e.g., "images/convergence.png")
    show : bool
        Whether to display the figure
    """
    if not result.evaluations:
        print("No evaluations to plot")
        return None

    fig, axes = plt.subplots(1, 2, figsize=(12, 5))

    # Panel 1: sweep deltas, with evaluation boundaries marked
    ax = axes[0]
    deltas = np.concatenate([np.asarray(e.delta_history, dtype=float) for e in result.evaluations])
    boundaries = np.cumsum([e.sweeps for e in result.evaluations])[:-1]

    # log scale cannot show exact zeros
    positive = deltas[deltas > 0]
    floor = positive.min() / 10 if positive.size else 1e-12
    ax.semilogy(np.arange(1, len(deltas) + 1), np.maximum(deltas, floor),
                color='steelblue', linewidth=1.5)
    for b in boundaries:
        ax.axvline(b + 0.5, color='gray', linestyle=':', alpha=0.5)

    ax.set_xlabel('Sweep')
    ax.set_ylabel('Max |ΔV|')
    ax.set_title('Policy Evaluation Sweeps')
    ax.grid(True, alpha=0.3)

    # Panel 2: outer loop
    ax = axes[1]
    if result.value_changes:
        iters = np.arange(1, len(result.value_changes) + 1)
        ax.plot(iters, result.value_changes, 'o-', color='darkorange', label='Max value change')
        ax.set_xlabel('Improvement Step')
        ax.set_ylabel('Max |ΔV|')
        ax.grid(True, alpha=0.3)

        ax2 = ax.twinx()
        ax2.bar(iters, result.policy_changes, alpha=0.3, color='green', label='States changed')
        ax2.set_ylabel('States Changed')

        lines, labels = ax.get_legend_handles_labels()
        bars, bar_labels = ax2.get_legend_handles_labels()
        ax.legend(lines + bars, labels + bar_labels, loc='upper right')
    else:
        ax.text(0.5, 0.5, 'No improvement steps', ha='center', va='center',
                transform=ax.transAxes)
    ax.set_title('Policy Improvement')

    fig.suptitle(title)
    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Saved convergence plot to {save_path}")

    if show:
        plt.show()
    else:
        plt.close(fig)

    return fig
