"""Markov Decision Process model built from a flat list of transitions."""

from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .helper import match_mul_sum

State = int
Action = str


class SpecificationError(ValueError):
    """Raised when a transition list fails validation at build time."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        summary = "; ".join(self.problems[:5])
        if len(self.problems) > 5:
            summary += f"; ... ({len(self.problems) - 5} more)"
        super().__init__(f"Invalid transition specification: {summary}")


@dataclass(frozen=True)
class TransitionSpec:
    """
    One stochastic outcome of taking ``action`` in ``from_state``.

    from_state  : state the action is taken in
    to_state    : state reached with this outcome
    action      : action label
    probability : P(to_state | from_state, action)
    reward      : reward collected on this outcome
    """
    from_state: State
    to_state: State
    action: Action
    probability: float
    reward: float


def validate_specs(specs: Iterable[TransitionSpec], atol: float = 1e-9) -> List[str]:
    """Return a list of problems found in a transition list (empty if valid).

    Checks that probabilities lie in [0, 1], that no (from, action, to)
    triple is given twice, and that the outcome probabilities of every
    (from, action) pair sum to 1 within ``atol``.
    """
    problems = []
    seen = set()
    totals: Dict[Tuple[State, Action], float] = defaultdict(float)

    for spec in specs:
        if not 0.0 <= spec.probability <= 1.0:
            problems.append(
                f"probability {spec.probability!r} out of range for "
                f"({spec.from_state}, {spec.action!r}, {spec.to_state})"
            )
        key = (spec.from_state, spec.action, spec.to_state)
        if key in seen:
            problems.append(
                f"duplicate edge ({spec.from_state}, {spec.action!r}, {spec.to_state})"
            )
        seen.add(key)
        totals[(spec.from_state, spec.action)] += spec.probability

    for (s, a), total in totals.items():
        if not abs(total - 1.0) <= atol:
            problems.append(f"probabilities of ({s}, {a!r}) sum to {total:.6g}, expected 1")

    return problems


def _read_only(table: Dict) -> Mapping:
    return MappingProxyType({key: MappingProxyType(inner) for key, inner in table.items()})


@dataclass
class StateModel:
    """
    Outgoing edges of a single state.

    action_outcomes         : a -> {s' -> P(s' | s, a)}
    action_rewards          : a -> {s' -> R(s, a, s')}
    expected_action_rewards : a -> sum_s' P(s' | s, a) R(s, a, s')
    inbound_transitions     : s' -> {a -> P(s' | s, a)}, with a zero entry
                              for every action of s that never reaches s'

    The last two tables are filled by ``finalize`` once all edges are in.
    ``finalize`` also swaps every table for a read-only view, so a built
    state cannot be changed through the mappings it hands out.
    A state without actions keeps all four tables empty.
    """
    state_id: State
    action_outcomes: Mapping[Action, Mapping[State, float]] = field(default_factory=dict)
    action_rewards: Mapping[Action, Mapping[State, float]] = field(default_factory=dict)
    expected_action_rewards: Mapping[Action, float] = field(default_factory=dict)
    inbound_transitions: Mapping[State, Mapping[Action, float]] = field(default_factory=dict)
    frozen: bool = field(default=False, repr=False, compare=False)

    def insert_edge(self, to_state: State, action: Action, probability: float, reward: float):
        """Set the outcome and reward of (action -> to_state), overwriting any previous edge."""
        if self.frozen:
            raise RuntimeError(f"State {self.state_id} is already built")
        self.action_outcomes.setdefault(action, {})[to_state] = probability
        self.action_rewards.setdefault(action, {})[to_state] = reward

    def finalize(self):
        """Compute the derived reward and transition tables and freeze the state."""
        actions = self.actions()

        expected = {
            a: match_mul_sum(self.action_rewards[a], self.action_outcomes[a])
            for a in actions
        }

        inbound: Dict[State, Dict[Action, float]] = {}
        for a in actions:
            for s_next, p in self.action_outcomes[a].items():
                inbound.setdefault(s_next, {})[a] = p
        inbound = {
            s_next: {a: by_action.get(a, 0.0) for a in actions}
            for s_next, by_action in sorted(inbound.items())
        }

        self.action_outcomes = _read_only(self.action_outcomes)
        self.action_rewards = _read_only(self.action_rewards)
        self.expected_action_rewards = MappingProxyType(expected)
        self.inbound_transitions = _read_only(inbound)
        self.frozen = True

    def actions(self) -> List[Action]:
        """Actions enabled in this state, in sorted order."""
        return sorted(self.action_outcomes)

    def has_actions(self) -> bool:
        return bool(self.action_outcomes)

    def outcomes(self, action: Action) -> Optional[Mapping[State, float]]:
        return self.action_outcomes.get(action)

    def rewards(self, action: Action) -> Optional[Mapping[State, float]]:
        return self.action_rewards.get(action)

    def uniform_policy(self) -> Dict[Action, float]:
        """Uniform distribution over the enabled actions (empty if there are none)."""
        actions = self.actions()
        return {a: 1.0 / len(actions) for a in actions}


class SystemModel:
    """
    Full MDP: state id -> StateModel, built once from a transition list.

    The transition list is kept so the model can be rebuilt. Nothing in the
    model changes after ``build`` returns, so one instance may be shared by
    several agents.
    """

    def __init__(
        self,
        states: Dict[State, StateModel],
        specification: Tuple[TransitionSpec, ...],
        validate: bool = False,
        atol: float = 1e-9,
    ):
        self._states = states
        self._specification = specification
        self._validate = validate
        self._atol = atol

    @classmethod
    def build(
        cls,
        specs: Iterable[TransitionSpec],
        validate: bool = False,
        atol: float = 1e-9,
    ) -> "SystemModel":
        """Build the model from a sequence of transitions.

        Parameters
        ----------
        specs : iterable of TransitionSpec
            Outcomes to ingest, in order. Both endpoints of every spec
            become states.
        validate : bool
            If True, run ``validate_specs`` first and raise
            ``SpecificationError`` on any problem. Otherwise malformed input
            is accepted as given.
        atol : float
            Tolerance for the probability-sum check.

        Returns
        -------
        SystemModel
        """
        specification = tuple(specs)
        if validate:
            problems = validate_specs(specification, atol=atol)
            if problems:
                raise SpecificationError(problems)

        states: Dict[State, StateModel] = {}
        for spec in specification:
            if spec.from_state not in states:
                states[spec.from_state] = StateModel(spec.from_state)
            states[spec.from_state].insert_edge(
                spec.to_state, spec.action, spec.probability, spec.reward
            )
            if spec.to_state not in states:
                states[spec.to_state] = StateModel(spec.to_state)

        for state in states.values():
            state.finalize()

        return cls(states, specification, validate=validate, atol=atol)

    def rebuild(self) -> "SystemModel":
        """Build a fresh model from the retained transition list and validation settings."""
        return SystemModel.build(self._specification, validate=self._validate, atol=self._atol)

    @property
    def validated(self) -> bool:
        return self._validate

    @property
    def specification(self) -> Tuple[TransitionSpec, ...]:
        return self._specification

    def get_state(self, state_id: State) -> Optional[StateModel]:
        """Return the model of ``state_id``, or None if it was never built."""
        return self._states.get(state_id)

    def states(self) -> Iterator[Tuple[State, StateModel]]:
        """Iterate over (id, StateModel) pairs in ascending id order."""
        for state_id in sorted(self._states):
            yield state_id, self._states[state_id]

    def state_ids(self) -> List[State]:
        return sorted(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, state_id) -> bool:
        return state_id in self._states

    def __repr__(self) -> str:
        n_edges = sum(
            len(outcomes)
            for state in self._states.values()
            for outcomes in state.action_outcomes.values()
        )
        return f"SystemModel(states={len(self._states)}, edges={n_edges})"
