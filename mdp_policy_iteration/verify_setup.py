#!/usr/bin/env python3
"""Check that mdp_policy_iteration is installed and solves a small MDP."""

import sys
from importlib import import_module

DEPENDENCIES = [
    ('numpy', 'NumPy'),
    ('matplotlib', 'Matplotlib'),
]

SUBPACKAGES = [
    'mdp_policy_iteration.Models',
    'mdp_policy_iteration.Agents',
    'mdp_policy_iteration.CaseStudies',
    'mdp_policy_iteration.experiments',
]


def check_dependencies():
    """Import each third-party dependency and project subpackage, reporting failures."""
    ok = True
    for module_name, display_name in DEPENDENCIES:
        try:
            version = getattr(import_module(module_name), '__version__', 'unknown')
            print(f"✓ {display_name:20s} (version {version})")
        except ImportError as e:
            print(f"✗ {display_name:20s} MISSING ({e})")
            ok = False

    for module_name in SUBPACKAGES:
        try:
            import_module(module_name)
            print(f"✓ {module_name}")
        except ImportError as e:
            print(f"✗ {module_name} FAILED ({e})")
            ok = False
    return ok


def check_solver():
    """Solve a three-arm bandit paying 1, 2 and 3 and confirm the best arm is chosen."""
    from mdp_policy_iteration.Models import SystemModel, TransitionSpec
    from mdp_policy_iteration.Agents import PolicyIterationAgent

    system = SystemModel.build(
        [TransitionSpec(0, 1, f"Arm_{i}", 1.0, float(i)) for i in (1, 2, 3)],
        validate=True,
    )
    agent = PolicyIterationAgent.init_random(system)
    result = agent.improve(1.0, 0.01, 10, 10)

    chosen = agent.query_action(0)
    if chosen == "Arm_3" and result.converged:
        print(f"✓ Three-arm bandit solved: {chosen}, value {agent.value(0):.3f}")
        return True
    print(f"✗ Three-arm bandit: expected Arm_3 and convergence, got {chosen} ({result})")
    return False


def main():
    print("Checking installation...")
    print("-" * 50)
    ok = check_dependencies()
    if ok:
        print()
        print("Solving a test problem...")
        print("-" * 50)
        ok = check_solver()

    print("-" * 50)
    print("✓ Environment is ready." if ok else "✗ Setup check failed. See errors above.")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
