"""Example: Train a policy iteration agent on tic-tac-toe and play against it.

This script demonstrates:
1. Enumerating every reachable board into a transition list
2. Building the SystemModel and a random initial agent
3. Running policy iteration
4. Playing interactively against the trained agent (the bot plays O)
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mdp_policy_iteration.CaseStudies.TicTacToe import (
    build_tictactoe_specs,
    board_to_id,
    empty_board,
    play_with_agent,
)
from mdp_policy_iteration.Models import SystemModel
from mdp_policy_iteration.Agents import PolicyIterationAgent


def train_agent():
    """Build the tic-tac-toe MDP and train an agent on it."""
    print("=" * 60)
    print("Training Tic-Tac-Toe Agent")
    print("=" * 60)

    print("\nEnumerating reachable boards...")
    specs = build_tictactoe_specs()
    system = SystemModel.build(specs, validate=True)
    print(f"  Transitions: {len(specs)}")
    print(f"  States: {len(system)}")

    print("\nRunning policy iteration...")
    print("  gamma=1.0, epsilon=0.01, outer iterations=100, eval sweeps=100")
    agent = PolicyIterationAgent.init_random(system)
    result = agent.improve(gamma=1.0, epsilon=0.01, outer_iterations=100,
                           inner_eval_sweeps=100, verbose=True)

    print("\n" + str(result))
    start = board_to_id(empty_board())
    print(f"\nValue of the empty board: {agent.value(start):.4f}")
    print(f"Opening move: {agent.query_action(start)}")
    return agent


if __name__ == "__main__":
    agent = train_agent()
    try:
        play_with_agent(agent)
    except (EOFError, KeyboardInterrupt):
        print("\nBye!")
