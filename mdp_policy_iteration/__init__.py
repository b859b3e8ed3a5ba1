"""
Tabular MDP Policy Iteration Library

Builds a Markov Decision Process from a flat list of stochastic transitions
and solves it by policy iteration.

Modules:
- Models: Core data structures (TransitionSpec, StateModel, SystemModel)
- Agents: Policy evaluation and improvement (PolicyIterationAgent)
- CaseStudies: Example applications (TicTacToe)
"""

from . import Models
from . import Agents
from . import CaseStudies

__all__ = ['Models', 'Agents', 'CaseStudies']
__version__ = '0.1.0'
