"""Tic-tac-toe case study: the agent plays O (moving first) against a random X."""

from typing import Callable, List, Optional, Tuple

from ...Models import SystemModel, TransitionSpec
from ...Agents import PolicyIterationAgent, ImprovementResult

EMPTY = 0
CIRCLE = 1
CROSS = 2

SIZE = 3
N_CELLS = SIZE * SIZE
N_BOARDS = 3 ** N_CELLS

WIN_REWARD = 1.0
LOSS_REWARD = -1.0
DRAW_REWARD = 0.0

MARK_SYMBOLS = {EMPTY: " ", CIRCLE: "O", CROSS: "X"}

Board = Tuple[int, ...]

WIN_LINES = (
    [tuple(SIZE * r + c for c in range(SIZE)) for r in range(SIZE)]
    + [tuple(SIZE * r + c for r in range(SIZE)) for c in range(SIZE)]
    + [tuple(SIZE * i + i for i in range(SIZE)),
       tuple(SIZE * i + (SIZE - 1 - i) for i in range(SIZE))]
)


def action_label(row: int, col: int) -> str:
    """Action label of a cell, e.g. ``"[1,2]"``."""
    return f"[{row},{col}]"


ACTIONS = [action_label(r, c) for r in range(SIZE) for c in range(SIZE)]


def parse_action(action: str) -> Tuple[int, int]:
    """Return (row, col) of an action label; accepts ``"[r,c]"``, ``"r,c"`` and ``"r c"``."""
    text = action.strip().strip("[]").replace(" ", ",")
    parts = [p for p in text.split(",") if p]
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Malformed action {action!r}")
    row, col = int(parts[0]), int(parts[1])
    if not (0 <= row < SIZE and 0 <= col < SIZE):
        raise ValueError(f"Action {action!r} is off the board")
    return row, col


def opponent(player: int) -> int:
    if player == CIRCLE:
        return CROSS
    if player == CROSS:
        return CIRCLE
    return EMPTY


def empty_board() -> Board:
    return (EMPTY,) * N_CELLS


def board_to_id(board: Board) -> int:
    """Encode a board as a base-3 number, cell (0, 0) being the least significant digit."""
    state_id = 0
    for cell in reversed(board):
        state_id = 3 * state_id + cell
    return state_id


def board_from_id(state_id: int) -> Tuple[Board, int]:
    """Decode a board id.

    Returns
    -------
    tuple
        (board, player) where player is the mark to move next: X when O
        has more marks on the board, O otherwise.
    """
    if not 0 <= state_id < N_BOARDS:
        raise ValueError(f"Board id out of range: {state_id}")
    cells = []
    remaining = state_id
    for _ in range(N_CELLS):
        remaining, cell = divmod(remaining, 3)
        cells.append(cell)
    board = tuple(cells)
    player = CROSS if board.count(CIRCLE) > board.count(CROSS) else CIRCLE
    return board, player


def possible_actions(board: Board) -> List[str]:
    """Labels of the empty cells, in row-major order."""
    return [ACTIONS[i] for i, cell in enumerate(board) if cell == EMPTY]


def apply_action(board: Board, action: str, player: int) -> Board:
    """Return a new board with ``player`` marked on the cell of ``action``."""
    row, col = parse_action(action)
    index = SIZE * row + col
    if board[index] != EMPTY:
        raise ValueError(f"Cell {action} is already taken")
    return board[:index] + (player,) + board[index + 1:]


def has_won(board: Board, player: int) -> bool:
    return any(all(board[i] == player for i in line) for line in WIN_LINES)


def is_over(board: Board) -> bool:
    return has_won(board, CIRCLE) or has_won(board, CROSS) or EMPTY not in board


def render_board(board: Board) -> str:
    rows = [
        " | ".join(MARK_SYMBOLS[board[SIZE * r + c]] for c in range(SIZE))
        for r in range(SIZE)
    ]
    return "\n---------\n".join(rows)


# ============================================================
# MDP construction
# ============================================================

def tictactoe_transitions(state_id: int) -> List[TransitionSpec]:
    """Outgoing transitions of one board, for the player to move.

    Each move either wins outright (reward +1), fills the board (draw,
    reward 0), or is followed by every possible reply of a uniformly
    random opponent, each with probability 1/(number of replies) and reward
    -1 if the reply wins. Finished boards have no transitions.
    """
    board, player = board_from_id(state_id)
    if is_over(board):
        return []

    other = opponent(player)
    specs = []
    for action in possible_actions(board):
        after = apply_action(board, action, player)

        if has_won(after, player):
            specs.append(TransitionSpec(state_id, board_to_id(after), action, 1.0, WIN_REWARD))
            continue

        replies = possible_actions(after)
        if not replies:
            specs.append(TransitionSpec(state_id, board_to_id(after), action, 1.0, DRAW_REWARD))
            continue

        prob = 1.0 / len(replies)
        for reply in replies:
            response = apply_action(after, reply, other)
            reward = LOSS_REWARD if has_won(response, other) else DRAW_REWARD
            specs.append(TransitionSpec(state_id, board_to_id(response), action, prob, reward))

    return specs


def build_tictactoe_specs(start_id: int = 0) -> List[TransitionSpec]:
    """Enumerate every board reachable from ``start_id`` and collect their transitions."""
    pending = [start_id]
    done = set()
    specs = []

    while pending:
        state_id = pending.pop()
        if state_id in done:
            continue

        outgoing = tictactoe_transitions(state_id)
        specs.extend(outgoing)
        pending.extend(spec.to_state for spec in outgoing if spec.to_state not in done)

        done.add(state_id)

    return specs


def build_tictactoe_system(start_id: int = 0, validate: bool = True) -> SystemModel:
    return SystemModel.build(build_tictactoe_specs(start_id), validate=validate)


def train_tictactoe_agent(
    gamma: float = 1.0,
    epsilon: float = 0.01,
    outer_iterations: int = 100,
    inner_eval_sweeps: int = 100,
    verbose: bool = False,
) -> Tuple[PolicyIterationAgent, ImprovementResult]:
    """Build the tic-tac-toe MDP and run policy iteration on it."""
    system = build_tictactoe_system()
    if verbose:
        print(f"Built tic-tac-toe model: {system}")

    agent = PolicyIterationAgent.init_random(system)
    result = agent.improve(gamma, epsilon, outer_iterations, inner_eval_sweeps, verbose=verbose)
    return agent, result


# ============================================================
# Interactive play
# ============================================================

def play_game(
    agent: PolicyIterationAgent,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> Optional[int]:
    """Play one game, the agent as O and the human as X.

    Returns
    -------
    int or None
        The winning mark, or None for a draw.
    """
    board = empty_board()
    bot, human = CIRCLE, CROSS

    output_fn("A new game started against the bot.")
    output_fn("\n" + render_board(board) + "\n")

    while True:
        action = agent.query_action(board_to_id(board))
        if action is None:
            output_fn("No moves left, it's a draw.")
            return None

        board = apply_action(board, action, bot)
        output_fn(f"The bot played at {action}")
        output_fn("\n" + render_board(board) + "\n")

        if has_won(board, bot):
            output_fn("The bot won!!")
            return bot
        if EMPTY not in board:
            output_fn("No moves left, it's a draw.")
            return None

        moves = possible_actions(board)
        while True:
            text = input_fn(f"Your turn, please type one of the following actions:\n{moves}\n")
            try:
                row, col = parse_action(text)
            except ValueError:
                output_fn("Please try again with a valid play.")
                continue
            play = action_label(row, col)
            if play in moves:
                break
            output_fn("Please try again with a valid play.")

        board = apply_action(board, play, human)
        output_fn(f"You played at {play}")
        output_fn("\n" + render_board(board) + "\n")

        if has_won(board, human):
            output_fn("You won!!")
            return human


def play_with_agent(
    agent: PolicyIterationAgent,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
):
    """Play games against the agent until the human declines a rematch."""
    while True:
        play_game(agent, input_fn, output_fn)
        answer = input_fn("End of game! Wanna play again? (y/n)\n")
        if answer.strip().lower() != "y":
            break
