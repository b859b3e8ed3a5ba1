"""Weighted reductions over sparse mappings."""

from typing import Dict, Hashable, Mapping, TypeVar

K = TypeVar("K", bound=Hashable)


def match_mul(weights: Mapping[K, float], values: Mapping[K, float]) -> Dict[K, float]:
    """Per-key product of two mappings.

    Every key of ``weights`` appears in the result; keys missing from
    ``values`` count as zero. Keys that only appear in ``values`` are dropped.
    """
    return {key: weight * values.get(key, 0.0) for key, weight in weights.items()}


def match_mul_sum(weights: Mapping[K, float], values: Mapping[K, float]) -> float:
    """Sum of the per-key products of two mappings (a sparse dot product)."""
    return sum(weight * values.get(key, 0.0) for key, weight in weights.items())
