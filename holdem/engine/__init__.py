from .config import TableConfig, DEFAULT_CONFIG, POSITIONS, UNDO_LIMIT
from .table import (
    Phase,
    Street,
    Act,
    Action,
    ActionError,
    ActionResult,
    StateError,
    PlayerState,
    TableState,
    new_table,
    start_hand,
    apply_action,
    advance_if_round_complete,
    betting_round_complete,
    legal_actions,
    raise_bounds,
    to_call,
    total_chips,
    is_terminal,
)

__all__ = [
    "TableConfig",
    "DEFAULT_CONFIG",
    "POSITIONS",
    "UNDO_LIMIT",
    "Phase",
    "Street",
    "Act",
    "Action",
    "ActionError",
    "ActionResult",
    "StateError",
    "PlayerState",
    "TableState",
    "new_table",
    "start_hand",
    "apply_action",
    "advance_if_round_complete",
    "betting_round_complete",
    "legal_actions",
    "raise_bounds",
    "to_call",
    "total_chips",
    "is_terminal",
]
