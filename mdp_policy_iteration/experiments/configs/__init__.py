"""Experiment configurations. Each module exposes a ``config`` object."""
