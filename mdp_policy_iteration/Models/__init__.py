"""Models for tabular Markov Decision Processes."""

from .helper import match_mul, match_mul_sum
from .mdp import (
    State,
    Action,
    TransitionSpec,
    StateModel,
    SystemModel,
    SpecificationError,
    validate_specs,
)

__all__ = [
    'match_mul', 'match_mul_sum',
    'State', 'Action',
    'TransitionSpec', 'StateModel', 'SystemModel',
    'SpecificationError', 'validate_specs',
]
