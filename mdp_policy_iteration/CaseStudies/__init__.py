"""Example applications built on the policy iteration library."""

from . import TicTacToe

__all__ = ['TicTacToe']
