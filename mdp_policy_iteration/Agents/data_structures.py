"""Result records for policy evaluation and policy iteration."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class EvaluationResult:
    """Outcome of one call to ``PolicyIterationAgent.evaluate``.

    Attributes
    ----------
    sweeps : int
        Number of synchronous sweeps performed
    max_delta : float
        Largest absolute value change in the final sweep
    converged : bool
        True if the sweep loop stopped on the tolerance, False if it hit the
        sweep cap first
    delta_history : list of float
        Largest absolute value change of every sweep, in order
    """
    sweeps: int
    max_delta: float
    converged: bool
    delta_history: List[float] = field(default_factory=list)

    def __str__(self) -> str:
        reason = "tolerance" if self.converged else "sweep cap"
        return (
            f"EvaluationResult: {self.sweeps} sweeps, "
            f"max delta {self.max_delta:.3e} (stopped on {reason})"
        )


@dataclass
class ImprovementResult:
    """Outcome of one call to ``PolicyIterationAgent.improve``.

    Attributes
    ----------
    iterations : int
        Number of improvement steps performed
    max_change : float
        Largest absolute value change across states in the last step
        (0.0 if no improvement step ran)
    converged : bool
        True if the loop stopped because the value change fell below the
        tolerance
    value_changes : list of float
        Largest absolute value change of each improvement step
    policy_changes : list of int
        Number of states whose action distribution changed in each step
    evaluations : list of EvaluationResult
        The initial evaluation followed by the evaluation of every step
    """
    iterations: int
    max_change: float
    converged: bool
    value_changes: List[float] = field(default_factory=list)
    policy_changes: List[int] = field(default_factory=list)
    evaluations: List[EvaluationResult] = field(default_factory=list)

    @property
    def total_sweeps(self) -> int:
        return sum(e.sweeps for e in self.evaluations)

    def __str__(self) -> str:
        lines = [
            "Policy Iteration",
            "=" * 40,
            f"Iterations: {self.iterations}",
            f"Converged: {self.converged}",
            f"Final Max Value Change: {self.max_change:.3e}",
            f"Total Evaluation Sweeps: {self.total_sweeps}",
        ]
        if self.policy_changes:
            lines.append(f"Policy Changes per Iteration: {self.policy_changes}")
        return "\n".join(lines)
