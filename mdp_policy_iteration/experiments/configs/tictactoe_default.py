"""Default policy iteration configuration for tic-tac-toe."""

from .base_config import PolicyIterationConfig
from ...CaseStudies.TicTacToe import build_tictactoe_specs


config = PolicyIterationConfig(
    case_study_name="tictactoe",
    build_specs_fn=build_tictactoe_specs,
    gamma=1.0,
    epsilon=0.01,
    outer_iterations=100,
    inner_eval_sweeps=100,
    results_path="./data/tictactoe_results.json",
    figures_dir="./images",
    verbose=True,
)
