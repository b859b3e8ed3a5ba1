"""Experiment runners and configurations."""
