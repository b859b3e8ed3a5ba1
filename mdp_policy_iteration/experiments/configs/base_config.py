"""Base configuration classes for experiments."""

from dataclasses import dataclass
from typing import Callable

from ...Agents import IMPROVEMENT_EVAL_SWEEPS


@dataclass
class PolicyIterationConfig:
    """Configuration for policy iteration experiments."""

    # Case study
    case_study_name: str
    build_specs_fn: Callable

    # Policy iteration parameters
    gamma: float
    epsilon: float
    outer_iterations: int
    inner_eval_sweeps: int

    # Output
    results_path: str
    figures_dir: str

    improvement_eval_sweeps: int = IMPROVEMENT_EVAL_SWEEPS

    # Check probabilities and duplicate edges when building the model
    validate: bool = True
    verbose: bool = False

    # Optional build_specs kwargs
    case_kwargs: dict = None

    def __post_init__(self):
        if self.case_kwargs is None:
            self.case_kwargs = {}
        if not 0.0 <= self.gamma <= 1.0:
            raise ValueError(f"gamma must be in [0, 1], got {self.gamma}")
