"""Tests for the transition-list MDP model."""

import math

import pytest

from .mdp import (
    TransitionSpec,
    StateModel,
    SystemModel,
    SpecificationError,
    validate_specs,
)


def two_action_specs():
    """State 0 has a safe action to 1 and a gamble that mostly stays put."""
    return [
        TransitionSpec(0, 1, "First_Action", 1.0, 0.0),
        TransitionSpec(0, 0, "Second_Action", 0.9, 0.0),
        TransitionSpec(0, 1, "Second_Action", 0.1, 10.0),
    ]


# ============================================================
# StateModel
# ============================================================

class TestStateModel:
    """Tests for StateModel edge tables and derived caches."""

    def test_self_loop_matches_built_state(self):
        expected = StateModel(0)
        expected.insert_edge(0, "Single_Action", 1.0, 10.0)
        expected.finalize()

        system = SystemModel.build([TransitionSpec(0, 0, "Single_Action", 1.0, 10.0)])

        assert system.get_state(0) == expected
        assert expected.expected_action_rewards == {"Single_Action": 10.0}
        assert expected.inbound_transitions == {0: {"Single_Action": 1.0}}

    def test_expected_rewards_and_inbound_transitions(self):
        system = SystemModel.build(two_action_specs())
        state = system.get_state(0)

        assert dict(state.expected_action_rewards) == pytest.approx(
            {"First_Action": 0.0, "Second_Action": 1.0}
        )
        # Every action appears for every destination, zero-filled
        assert state.inbound_transitions == {
            0: {"First_Action": 0.0, "Second_Action": 0.9},
            1: {"First_Action": 1.0, "Second_Action": 0.1},
        }

    def test_edge_tables(self):
        state = SystemModel.build(two_action_specs()).get_state(0)

        assert state.action_outcomes == {
            "First_Action": {1: 1.0},
            "Second_Action": {0: 0.9, 1: 0.1},
        }
        assert state.action_rewards == {
            "First_Action": {1: 0.0},
            "Second_Action": {0: 0.0, 1: 10.0},
        }
        assert state.outcomes("Second_Action") == {0: 0.9, 1: 0.1}
        assert state.rewards("First_Action") == {1: 0.0}
        assert state.outcomes("Missing") is None
        assert state.rewards("Missing") is None

    def test_terminal_state_is_empty(self):
        state = SystemModel.build(two_action_specs()).get_state(1)

        assert not state.has_actions()
        assert state.actions() == []
        assert state.action_outcomes == {}
        assert state.action_rewards == {}
        assert state.expected_action_rewards == {}
        assert state.inbound_transitions == {}
        assert state.uniform_policy() == {}

    def test_uniform_policy(self):
        state = SystemModel.build(two_action_specs()).get_state(0)

        assert state.uniform_policy() == {"First_Action": 0.5, "Second_Action": 0.5}

    def test_actions_are_sorted(self):
        specs = [
            TransitionSpec(0, 1, "c", 1.0, 0.0),
            TransitionSpec(0, 1, "a", 1.0, 0.0),
            TransitionSpec(0, 1, "b", 1.0, 0.0),
        ]
        state = SystemModel.build(specs).get_state(0)

        assert state.actions() == ["a", "b", "c"]
        assert list(state.inbound_transitions[1]) == ["a", "b", "c"]

    def test_built_state_is_frozen(self):
        state = SystemModel.build(two_action_specs()).get_state(0)

        with pytest.raises(RuntimeError):
            state.insert_edge(1, "Third_Action", 1.0, 0.0)

    def test_built_tables_are_read_only(self):
        state = SystemModel.build(two_action_specs()).get_state(0)

        with pytest.raises(TypeError):
            state.action_outcomes["First_Action"][1] = 0.5
        with pytest.raises(TypeError):
            state.action_rewards["Third_Action"] = {1: 1.0}
        with pytest.raises(TypeError):
            state.expected_action_rewards["First_Action"] = 7.0
        with pytest.raises(TypeError):
            state.inbound_transitions[1]["First_Action"] = 0.0

        assert state.outcomes("First_Action") == {1: 1.0}
        assert state.expected_action_rewards["First_Action"] == 0.0


# ============================================================
# SystemModel
# ============================================================

class TestSystemModel:
    """Tests for SystemModel construction and lookup."""

    def test_all_endpoints_become_states(self):
        specs = [
            TransitionSpec(0, 1, "a", 0.5, 0.0),
            TransitionSpec(0, 2, "a", 0.5, 1.0),
            TransitionSpec(1, 3, "b", 1.0, 2.0),
        ]
        system = SystemModel.build(specs)

        assert system.state_ids() == [0, 1, 2, 3]
        assert len(system) == 4
        assert 3 in system
        assert 7 not in system

    def test_tables_match_specs(self):
        specs = [
            TransitionSpec(0, 1, "a", 0.5, 0.0),
            TransitionSpec(0, 2, "a", 0.5, 1.0),
            TransitionSpec(0, 2, "b", 1.0, 3.0),
            TransitionSpec(1, 0, "a", 1.0, -1.0),
        ]
        system = SystemModel.build(specs)

        for s, state in system.states():
            expected = {
                (spec.action, spec.to_state): (spec.probability, spec.reward)
                for spec in specs if spec.from_state == s
            }
            actual = {
                (a, s_next): (p, state.action_rewards[a][s_next])
                for a, outcomes in state.action_outcomes.items()
                for s_next, p in outcomes.items()
            }
            assert actual == expected

    def test_two_state_model(self):
        system = SystemModel.build(two_action_specs())

        expected_0 = StateModel(0)
        for spec in two_action_specs():
            expected_0.insert_edge(spec.to_state, spec.action, spec.probability, spec.reward)
        expected_0.finalize()
        expected_1 = StateModel(1)
        expected_1.finalize()

        assert dict(system.states()) == {0: expected_0, 1: expected_1}

    def test_insertion_order_does_not_matter(self):
        specs = two_action_specs()
        forward = SystemModel.build(specs)
        backward = SystemModel.build(list(reversed(specs)))

        assert dict(forward.states()) == dict(backward.states())

    def test_duplicate_edge_overwrites(self):
        specs = [
            TransitionSpec(0, 1, "a", 0.3, 1.0),
            TransitionSpec(0, 1, "a", 1.0, 5.0),
        ]
        state = SystemModel.build(specs).get_state(0)

        assert state.action_outcomes == {"a": {1: 1.0}}
        assert state.action_rewards == {"a": {1: 5.0}}

    def test_lookup_miss_is_none(self):
        system = SystemModel.build(two_action_specs())

        assert system.get_state(42) is None

    def test_states_iterate_in_id_order(self):
        specs = [
            TransitionSpec(5, 2, "a", 1.0, 0.0),
            TransitionSpec(2, 9, "a", 1.0, 0.0),
        ]
        system = SystemModel.build(specs)

        assert [s for s, _ in system.states()] == [2, 5, 9]

    def test_specification_is_retained(self):
        specs = two_action_specs()
        system = SystemModel.build(iter(specs))

        assert system.specification == tuple(specs)

    def test_rebuild(self):
        system = SystemModel.build(two_action_specs())
        rebuilt = system.rebuild()

        assert rebuilt is not system
        assert dict(rebuilt.states()) == dict(system.states())

    def test_rebuild_keeps_validation(self):
        specs = [TransitionSpec(0, 1, "a", 0.5, 0.0)]
        system = SystemModel.build(specs, validate=True, atol=0.6)

        rebuilt = system.rebuild()

        assert system.validated
        assert rebuilt.validated
        assert not SystemModel.build(specs).rebuild().validated

    def test_rebuild_revalidates(self):
        specs = [TransitionSpec(0, 1, "a", 0.5, 0.0)]
        system = SystemModel(
            {0: StateModel(0), 1: StateModel(1)}, tuple(specs), validate=True
        )

        with pytest.raises(SpecificationError):
            system.rebuild()

    def test_empty_specification(self):
        system = SystemModel.build([])

        assert len(system) == 0
        assert list(system.states()) == []

    def test_malformed_input_is_accepted_without_validation(self):
        specs = [
            TransitionSpec(0, 1, "a", 0.7, 0.0),
            TransitionSpec(0, 2, "a", -0.2, 1.0),
        ]
        system = SystemModel.build(specs)

        assert system.get_state(0).action_outcomes == {"a": {1: 0.7, 2: -0.2}}


# ============================================================
# Validation
# ============================================================

class TestValidation:
    """Tests for optional probability validation."""

    def test_valid_specs(self):
        assert validate_specs(two_action_specs()) == []
        SystemModel.build(two_action_specs(), validate=True)

    def test_probabilities_must_sum_to_one(self):
        specs = [
            TransitionSpec(0, 1, "a", 0.5, 0.0),
            TransitionSpec(0, 2, "a", 0.4, 0.0),
        ]
        problems = validate_specs(specs)

        assert len(problems) == 1
        assert "sum to" in problems[0]

    def test_out_of_range_probability(self):
        specs = [
            TransitionSpec(0, 1, "a", 1.5, 0.0),
            TransitionSpec(0, 2, "a", -0.5, 0.0),
        ]
        problems = validate_specs(specs)

        assert sum("out of range" in p for p in problems) == 2

    def test_duplicate_edge(self):
        specs = [
            TransitionSpec(0, 1, "a", 0.5, 0.0),
            TransitionSpec(0, 1, "a", 0.5, 0.0),
        ]
        problems = validate_specs(specs)

        assert any("duplicate" in p for p in problems)

    def test_tolerance(self):
        third = 1.0 / 3.0
        specs = [TransitionSpec(0, s, "a", third, 0.0) for s in (1, 2, 3)]

        assert validate_specs(specs) == []
        assert validate_specs(
            [TransitionSpec(0, 1, "a", 0.999, 0.0)], atol=1e-2
        ) == []

    def test_nan_probability(self):
        specs = [
            TransitionSpec(0, 1, "a", math.nan, 0.0),
            TransitionSpec(0, 2, "a", 1.0, 0.0),
        ]
        problems = validate_specs(specs)

        assert any("out of range" in p for p in problems)
        assert any("sum to" in p for p in problems)
        with pytest.raises(SpecificationError):
            SystemModel.build(specs, validate=True)

    def test_build_raises(self):
        specs = [TransitionSpec(0, 1, "a", 0.5, 0.0)]

        with pytest.raises(SpecificationError) as excinfo:
            SystemModel.build(specs, validate=True)

        assert isinstance(excinfo.value, ValueError)
        assert len(excinfo.value.problems) == 1
