"""Policy iteration experiment runner.

Builds a case study MDP from its transition list, trains a policy iteration
agent on it, prints a report and saves a JSON summary with metadata.

Usage:
    python -m mdp_policy_iteration.experiments.run_policy_iteration <config_module>

Example:
    python -m mdp_policy_iteration.experiments.run_policy_iteration configs.tictactoe_default
"""

import importlib
import os
import sys
import time

from .experiment_io import (
    build_metadata,
    save_experiment_results,
    summarize_run,
    tidy_rows_from_result,
)
from ..Models import SystemModel
from ..Agents import PolicyIterationAgent, plot_convergence


def run_experiment(config):
    """Build, train and summarize one configuration.

    Returns
    -------
    tuple
        (agent, result, summary, build_time_s, train_time_s)
    """
    print(f"\nBuilding {config.case_study_name.upper()} model...")
    t0 = time.time()
    specs = config.build_specs_fn(**config.case_kwargs)
    system = SystemModel.build(specs, validate=config.validate)
    build_time = time.time() - t0
    print(f"  {system} from {len(specs)} transitions ({build_time:.1f}s)")

    print("\nRunning policy iteration...")
    agent = PolicyIterationAgent.init_random(system)
    t0 = time.time()
    result = agent.improve(
        gamma=config.gamma,
        epsilon=config.epsilon,
        outer_iterations=config.outer_iterations,
        inner_eval_sweeps=config.inner_eval_sweeps,
        improvement_eval_sweeps=config.improvement_eval_sweeps,
        verbose=config.verbose,
    )
    train_time = time.time() - t0

    summary = summarize_run(agent, result)
    return agent, result, summary, build_time, train_time


def print_report(summary, case_study_name):
    print("\n" + "=" * 60)
    print(f"POLICY ITERATION REPORT: {case_study_name.upper()}")
    print("=" * 60)
    print(f"States: {summary['num_states']} ({summary['num_terminal_states']} terminal)")
    print(f"Transitions: {summary['num_transitions']}")
    print(f"Iterations: {summary['iterations']}  Converged: {summary['converged']}")
    print(f"Final max value change: {summary['final_max_change']:.3e}")
    print(f"Total evaluation sweeps: {summary['total_eval_sweeps']}")
    print(f"Values: min={summary['value_min']:.4f}  max={summary['value_max']:.4f}  "
          f"mean={summary['value_mean']:.4f}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m mdp_policy_iteration.experiments.run_policy_iteration <config_module>")
        print("Example: python -m mdp_policy_iteration.experiments.run_policy_iteration configs.tictactoe_default")
        sys.exit(1)

    config_module_name = sys.argv[1]
    try:
        config_module = importlib.import_module(
            f".{config_module_name}", package="mdp_policy_iteration.experiments"
        )
        config = config_module.config
    except (ImportError, AttributeError) as e:
        print(f"Error loading config: {e}")
        sys.exit(1)

    print("=" * 60)
    print(f"POLICY ITERATION EXPERIMENT: {config.case_study_name.upper()}")
    print(f"gamma={config.gamma}, epsilon={config.epsilon}, "
          f"outer_iterations={config.outer_iterations}, inner_eval_sweeps={config.inner_eval_sweeps}")
    print("=" * 60)

    agent, result, summary, build_time, train_time = run_experiment(config)

    print_report(summary, config.case_study_name)

    metadata = build_metadata(config, extra={"build_time_s": build_time, "train_time_s": train_time})
    save_experiment_results(config.results_path, summary, metadata,
                            tidy_rows=tidy_rows_from_result(result))
    print(f"\nResults saved to {config.results_path}")

    os.makedirs(config.figures_dir, exist_ok=True)
    plot_convergence(
        result,
        title=f"Policy Iteration ({config.case_study_name})",
        save_path=os.path.join(config.figures_dir, f"{config.case_study_name}_convergence.png"),
        show=False,
    )

    print("\n" + "=" * 60)
    print("EXPERIMENT COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()
