"""Experiment I/O utilities for reproducible metadata and standardized output.

Provides helpers to:
- Collect experiment metadata (git SHA, timestamp, machine info, full config)
- Summarize a policy iteration run as JSON-friendly data
- Save results in a standardized format
"""

import csv
import json
import os
import platform
import subprocess
from dataclasses import fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import numpy as np

from ..Agents import PolicyIterationAgent, ImprovementResult


def get_git_sha() -> Optional[str]:
    """Get current git SHA, or None if not in a git repo."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True, text=True, timeout=5
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode == 0:
        return result.stdout.strip()
    return None


def get_machine_info() -> Dict[str, str]:
    """Collect basic machine info."""
    return {
        "platform": platform.platform(),
        "python_version": platform.python_version(),
        "machine": platform.machine(),
        "node": platform.node(),
    }


def build_metadata(config: Any, extra: Optional[Dict] = None) -> Dict[str, Any]:
    """Build a metadata dict from a config object.

    Includes timestamp, git SHA, machine info, and the full config
    serialized as a dict.

    Parameters
    ----------
    config : dataclass or object
        Experiment config. Callable fields are stored by their qualified name.
    extra : dict, optional
        Additional metadata to merge in (e.g., timings).
    """
    meta = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "git_sha": get_git_sha(),
        "machine": get_machine_info(),
        "config": _serialize_config(config),
    }
    if extra:
        meta.update(extra)
    return meta


def _serialize_config(config: Any) -> Dict[str, Any]:
    """Serialize a config object to a JSON-compatible dict."""
    if hasattr(config, "__dataclass_fields__"):
        items = [(f.name, getattr(config, f.name)) for f in fields(config)]
    else:
        items = list(getattr(config, "__dict__", {}).items())
    return {key: _serialize_value(val) for key, val in items}


def _serialize_value(val: Any) -> Any:
    """Make a value JSON-serializable."""
    if val is None or isinstance(val, (bool, int, float, str)):
        return val
    if callable(val):
        return f"{val.__module__}.{val.__qualname__}" if hasattr(val, "__qualname__") else str(val)
    if isinstance(val, dict):
        return {str(k): _serialize_value(v) for k, v in val.items()}
    if isinstance(val, (list, tuple)):
        return [_serialize_value(v) for v in val]
    if isinstance(val, np.integer):
        return int(val)
    if isinstance(val, np.floating):
        return float(val)
    return str(val)


def summarize_run(agent: PolicyIterationAgent, result: ImprovementResult) -> Dict[str, Any]:
    """Summarize a trained agent and its run. The policy itself is not included."""
    system = agent.system_model
    values = np.array([agent.values[s] for s in system.state_ids()], dtype=float)
    n_terminal = sum(1 for _, state in system.states() if not state.has_actions())

    return {
        "num_states": len(system),
        "num_terminal_states": n_terminal,
        "num_transitions": len(system.specification),
        "iterations": result.iterations,
        "converged": result.converged,
        "final_max_change": result.max_change,
        "total_eval_sweeps": result.total_sweeps,
        "value_changes": list(result.value_changes),
        "policy_changes": list(result.policy_changes),
        "value_min": float(values.min()) if values.size else 0.0,
        "value_max": float(values.max()) if values.size else 0.0,
        "value_mean": float(values.mean()) if values.size else 0.0,
    }


def tidy_rows_from_result(result: ImprovementResult) -> List[Dict[str, Any]]:
    """One row per improvement step."""
    return [
        {
            "iteration": i + 1,
            "value_change": change,
            "policy_changes": result.policy_changes[i],
            "eval_sweeps": result.evaluations[i + 1].sweeps,
            "eval_converged": result.evaluations[i + 1].converged,
        }
        for i, change in enumerate(result.value_changes)
    ]


def save_experiment_results(
    path: str,
    results: Dict[str, Any],
    metadata: Dict[str, Any],
    tidy_rows: Optional[List[Dict]] = None,
) -> None:
    """Save experiment results to JSON (and optionally CSV).

    Parameters
    ----------
    path : str
        Path for the main JSON results file.
    results : dict
        The experiment results.
    metadata : dict
        Metadata from build_metadata().
    tidy_rows : list of dicts, optional
        If provided, also write a <name>_tidy.csv next to the JSON.
    """
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    output = {
        "metadata": metadata,
        "results": results,
    }
    with open(path, "w") as f:
        json.dump(output, f, indent=2, default=str)

    if tidy_rows:
        csv_path = path.replace(".json", "_tidy.csv")
        fieldnames = sorted({key for row in tidy_rows for key in row})
        with open(csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(tidy_rows)
