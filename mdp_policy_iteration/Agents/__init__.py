"""Policy iteration agents for tabular MDPs.

Modules
-------
policy_iteration
    PolicyIterationAgent: policy evaluation, greedy improvement, action queries
data_structures
    EvaluationResult and ImprovementResult dataclasses
visualization
    Convergence plots
"""

from .data_structures import EvaluationResult, ImprovementResult
from .policy_iteration import (
    PolicyIterationAgent,
    Policy,
    ValueTable,
    IMPROVEMENT_EVAL_SWEEPS,
)
from .visualization import plot_convergence

__all__ = [
    'EvaluationResult', 'ImprovementResult',
    'PolicyIterationAgent', 'Policy', 'ValueTable', 'IMPROVEMENT_EVAL_SWEEPS',
    'plot_convergence',
]
