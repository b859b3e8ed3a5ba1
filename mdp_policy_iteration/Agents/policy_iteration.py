"""Tabular policy iteration over a built SystemModel."""

from types import MappingProxyType
from typing import Dict, Mapping, Optional

from ..Models import SystemModel, State, Action, match_mul_sum
from .data_structures import EvaluationResult, ImprovementResult

Policy = Dict[State, Dict[Action, float]]
ValueTable = Dict[State, float]

# Sweep cap used to re-evaluate each greedy policy inside ``improve``.
IMPROVEMENT_EVAL_SWEEPS = 100


def _check_discount(gamma: float):
    if not 0.0 <= gamma <= 1.0:
        raise ValueError(f"Discount factor must be in [0, 1], got {gamma}")


def _check_tolerance(epsilon: float):
    if epsilon < 0.0:
        raise ValueError(f"Tolerance must be non-negative, got {epsilon}")


class PolicyIterationAgent:
    """
    Policy iteration agent.

    Holds a read-only reference to a SystemModel plus its own policy
    (state -> {action -> probability}) and value table (state -> value).
    Both tables are replaced wholesale on every update, never edited in
    place. ``policy`` and ``values`` hand out read-only views, so a caller
    holding one sees the table as it was when the view was taken.
    """

    def __init__(self, system_model: SystemModel, policy: Policy, values: ValueTable):
        self._system = system_model
        self._policy = policy
        self._values = values
        self._gamma = 1.0

    @classmethod
    def init_random(cls, system_model: SystemModel) -> "PolicyIterationAgent":
        """Agent with a uniform random policy and an all-zero value table."""
        policy = {s: state.uniform_policy() for s, state in system_model.states()}
        values = {s: 0.0 for s in system_model.state_ids()}
        return cls(system_model, policy, values)

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    @property
    def system_model(self) -> SystemModel:
        return self._system

    @property
    def policy(self) -> Mapping[State, Mapping[Action, float]]:
        return MappingProxyType({s: MappingProxyType(p) for s, p in self._policy.items()})

    @property
    def values(self) -> Mapping[State, float]:
        return MappingProxyType(self._values)

    @property
    def discount(self) -> float:
        """Discount factor of the most recent evaluation (1.0 before any)."""
        return self._gamma

    def value(self, state: State) -> Optional[float]:
        return self._values.get(state)

    def set_policy(self, policy: Policy):
        """Replace the current policy. States missing from ``policy`` get no actions."""
        self._policy = {
            s: dict(policy.get(s, {}))
            for s in self._system.state_ids()
        }

    # ------------------------------------------------------------
    # Policy evaluation
    # ------------------------------------------------------------

    def evaluate(
        self,
        gamma: float,
        epsilon: float,
        max_sweeps: int,
        verbose: bool = False,
    ) -> EvaluationResult:
        """Iterative policy evaluation under the current policy.

        Runs synchronous sweeps of the Bellman expectation update, starting
        from the current value table, until the largest change of a sweep
        drops below ``epsilon`` or ``max_sweeps`` sweeps have run. Each sweep
        reads only the previous sweep's table.

        Parameters
        ----------
        gamma : float
            Discount factor in [0, 1]
        epsilon : float
            Stopping tolerance on the largest absolute value change
        max_sweeps : int
            Maximum number of sweeps (at least 1)
        verbose : bool
            Print a line per sweep

        Returns
        -------
        EvaluationResult
        """
        _check_discount(gamma)
        _check_tolerance(epsilon)
        if max_sweeps < 1:
            raise ValueError(f"max_sweeps must be at least 1, got {max_sweeps}")

        self._gamma = gamma

        # Expected immediate reward and next-state distribution under the policy
        static_rewards: Dict[State, float] = {}
        policy_transitions: Dict[State, Dict[State, float]] = {}
        for s, state in self._system.states():
            action_probs = self._policy.get(s, {})
            static_rewards[s] = match_mul_sum(action_probs, state.expected_action_rewards)
            transitions = {}
            for s_next, by_action in state.inbound_transitions.items():
                p = match_mul_sum(action_probs, by_action)
                if p != 0.0:
                    transitions[s_next] = p
            policy_transitions[s] = transitions

        old_values = self._values
        deltas = []
        converged = False

        while True:
            new_values = {}
            delta = 0.0
            for s, reward in static_rewards.items():
                v = reward + gamma * match_mul_sum(policy_transitions[s], old_values)
                delta = max(delta, abs(v - old_values.get(s, 0.0)))
                new_values[s] = v

            old_values = new_values
            deltas.append(delta)

            if verbose:
                print(f"  sweep {len(deltas)}: max delta = {delta:.6e}")

            if delta < epsilon:
                converged = True
                break
            if len(deltas) >= max_sweeps:
                break

        self._values = old_values

        return EvaluationResult(
            sweeps=len(deltas),
            max_delta=deltas[-1],
            converged=converged,
            delta_history=deltas,
        )

    # ------------------------------------------------------------
    # Greedy action selection
    # ------------------------------------------------------------

    def action_values(self, state: State, gamma: Optional[float] = None) -> Dict[Action, float]:
        """One-step lookahead value of every action of ``state`` under the current values.

        Returns an empty dict for a state without actions or an unknown state.
        """
        if gamma is None:
            gamma = self._gamma
        model = self._system.get_state(state)
        if model is None:
            return {}
        return {
            a: model.expected_action_rewards[a]
            + gamma * match_mul_sum(model.action_outcomes[a], self._values)
            for a in model.actions()
        }

    def best_action(self, state: State, gamma: Optional[float] = None) -> Optional[Action]:
        """Greedy action of ``state`` with respect to the current value table.

        Ties go to the smallest action label. Returns None when the state
        has no actions or is not part of the model.
        """
        best, best_q = None, None
        for a, q in self.action_values(state, gamma).items():
            if best_q is None or q > best_q:
                best, best_q = a, q
        return best

    def greedy_policy(self, gamma: Optional[float] = None) -> Policy:
        """Deterministic policy that takes ``best_action`` in every state."""
        policy = {}
        for s, model in self._system.states():
            best = self.best_action(s, gamma)
            policy[s] = {a: 1.0 if a == best else 0.0 for a in model.actions()}
        return policy

    def query_action(self, state: State) -> Optional[Action]:
        """Most probable action of the current policy in ``state``.

        Returns None exactly when the state's policy is empty (or the state
        is unknown), meaning there is no decision left to make.
        """
        action_probs = self._policy.get(state)
        if not action_probs:
            return None
        best, best_p = None, None
        for a in sorted(action_probs):
            if best_p is None or action_probs[a] > best_p:
                best, best_p = a, action_probs[a]
        return best

    # ------------------------------------------------------------
    # Policy iteration
    # ------------------------------------------------------------

    def improve(
        self,
        gamma: float,
        epsilon: float,
        outer_iterations: int,
        inner_eval_sweeps: int,
        improvement_eval_sweeps: int = IMPROVEMENT_EVAL_SWEEPS,
        verbose: bool = False,
    ) -> ImprovementResult:
        """Deterministic policy iteration.

        Evaluates the current policy, then repeatedly replaces it with the
        greedy policy and re-evaluates, until the value table moves by less
        than ``epsilon`` or ``outer_iterations`` steps have run.

        Parameters
        ----------
        gamma : float
            Discount factor in [0, 1]
        epsilon : float
            Tolerance for both the evaluation sweeps and the outer loop
        outer_iterations : int
            Maximum number of improvement steps
        inner_eval_sweeps : int
            Sweep cap of the initial evaluation
        improvement_eval_sweeps : int
            Sweep cap of the evaluation after each improvement step
        verbose : bool
            Print a line per improvement step

        Returns
        -------
        ImprovementResult
        """
        _check_discount(gamma)
        _check_tolerance(epsilon)
        if outer_iterations < 0:
            raise ValueError(f"outer_iterations must be non-negative, got {outer_iterations}")

        evaluations = [self.evaluate(gamma, epsilon, inner_eval_sweeps)]
        value_changes = []
        policy_changes = []
        converged = False

        if verbose:
            print(f"Initial evaluation: {evaluations[0]}")

        for i in range(outer_iterations):
            snapshot = self._values

            new_policy = self.greedy_policy(gamma)
            policy_changes.append(sum(
                1 for s, action_probs in new_policy.items()
                if action_probs != self._policy.get(s, {})
            ))
            self._policy = new_policy

            evaluations.append(self.evaluate(gamma, epsilon, improvement_eval_sweeps))

            max_change = max(
                (abs(v - snapshot.get(s, 0.0)) for s, v in self._values.items()),
                default=0.0,
            )
            value_changes.append(max_change)

            if verbose:
                print(f"  [iter {i + 1}/{outer_iterations}] max value change = {max_change:.6e}, "
                      f"policy changes = {policy_changes[-1]}")

            if max_change < epsilon:
                converged = True
                break

        return ImprovementResult(
            iterations=len(value_changes),
            max_change=value_changes[-1] if value_changes else 0.0,
            converged=converged,
            value_changes=value_changes,
            policy_changes=policy_changes,
            evaluations=evaluations,
        )
