"""Tic-tac-toe case study.

Boards are encoded as base-3 integers; the agent (O, moving first) learns a
policy against an opponent that replies uniformly at random.
"""

from .tictactoe import (
    EMPTY,
    CIRCLE,
    CROSS,
    ACTIONS,
    action_label,
    parse_action,
    opponent,
    empty_board,
    board_to_id,
    board_from_id,
    possible_actions,
    apply_action,
    has_won,
    is_over,
    render_board,
    tictactoe_transitions,
    build_tictactoe_specs,
    build_tictactoe_system,
    train_tictactoe_agent,
    play_game,
    play_with_agent,
)

__all__ = [
    'EMPTY', 'CIRCLE', 'CROSS', 'ACTIONS',
    'action_label', 'parse_action', 'opponent',
    'empty_board', 'board_to_id', 'board_from_id',
    'possible_actions', 'apply_action', 'has_won', 'is_over', 'render_board',
    'tictactoe_transitions', 'build_tictactoe_specs', 'build_tictactoe_system',
    'train_tictactoe_agent', 'play_game', 'play_with_agent',
]
