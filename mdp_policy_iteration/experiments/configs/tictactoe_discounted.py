"""Tic-tac-toe with discounting, which favours quicker wins."""

from .base_config import PolicyIterationConfig
from ...CaseStudies.TicTacToe import build_tictactoe_specs


config = PolicyIterationConfig(
    case_study_name="tictactoe",
    build_specs_fn=build_tictactoe_specs,
    gamma=0.9,
    epsilon=1e-4,
    outer_iterations=50,
    inner_eval_sweeps=50,
    results_path="./data/tictactoe_discounted_results.json",
    figures_dir="./images/discounted",
)
