from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Type


class ErrorCategory(str, Enum):
    ILLEGAL_ACTION = "illegal_action"
    INSUFFICIENT_RESOURCES = "insufficient_resources"
    INVALID_PHASE = "invalid_phase"
    EXHAUSTED_SUPPLY = "exhausted_supply"


class ViolationKind(str, Enum):
    NOT_PLAYERS_TURN = "not_players_turn"
    VERTEX_OCCUPIED = "vertex_occupied"
    DISTANCE_RULE = "distance_rule"
    SETTLEMENT_NOT_CONNECTED = "settlement_not_connected"
    EDGE_OCCUPIED = "edge_occupied"
    ROAD_NOT_CONNECTED = "road_not_connected"
    ROAD_NOT_ADJACENT_TO_SETTLEMENT = "road_not_adjacent_to_settlement"
    NOT_VERTEX_OWNER = "not_vertex_owner"
    NOT_A_SETTLEMENT = "not_a_settlement"
    CARD_NOT_IN_HAND = "card_not_in_hand"
    VICTORY_POINT_CARD = "victory_point_card"
    CARD_ALREADY_PLAYED = "card_already_played"
    DISCARD_NOT_REQUIRED = "discard_not_required"
    DISCARD_COUNT_MISMATCH = "discard_count_mismatch"
    ROBBER_NOT_MOVED = "robber_not_moved"
    INVALID_VICTIM = "invalid_victim"
    NO_PORT_ACCESS = "no_port_access"
    INVALID_TRADE = "invalid_trade"
    INSUFFICIENT_RESOURCES = "insufficient_resources"
    COUNTERPARTY_INSUFFICIENT_RESOURCES = "counterparty_insufficient_resources"
    WRONG_PHASE = "wrong_phase"
    GAME_OVER = "game_over"
    NO_PIECES_LEFT = "no_pieces_left"
    DECK_EMPTY = "deck_empty"
    BANK_EMPTY = "bank_empty"


_CATEGORIES: Dict[ViolationKind, ErrorCategory] = {
    ViolationKind.INSUFFICIENT_RESOURCES: ErrorCategory.INSUFFICIENT_RESOURCES,
    ViolationKind.COUNTERPARTY_INSUFFICIENT_RESOURCES: ErrorCategory.INSUFFICIENT_RESOURCES,
    ViolationKind.WRONG_PHASE: ErrorCategory.INVALID_PHASE,
    ViolationKind.GAME_OVER: ErrorCategory.INVALID_PHASE,
    ViolationKind.NO_PIECES_LEFT: ErrorCategory.EXHAUSTED_SUPPLY,
    ViolationKind.DECK_EMPTY: ErrorCategory.EXHAUSTED_SUPPLY,
    ViolationKind.BANK_EMPTY: ErrorCategory.EXHAUSTED_SUPPLY,
}


@dataclass(frozen=True)
class RuleViolation:
    kind: ViolationKind
    message: str = ""
    context: Dict[str, object] = field(default_factory=dict)

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES.get(self.kind, ErrorCategory.ILLEGAL_ACTION)

    def to_error(self) -> "RuleError":
        return _ERROR_TYPES[self.category](self)

    def __str__(self) -> str:
        return self.message or self.kind.value


class RuleError(ValueError):
    """An action was rejected; the state it was applied to is unchanged."""

    def __init__(self, violation: RuleViolation):
        super().__init__(f"Illegal action: {violation}")
        self.violation = violation

    @property
    def kind(self) -> ViolationKind:
        return self.violation.kind


class IllegalActionError(RuleError):
    pass


class InsufficientResourcesError(RuleError):
    pass


class InvalidPhaseError(RuleError):
    pass


class ExhaustedSupplyError(RuleError):
    pass


class ContractError(ValueError):
    """The caller broke the engine contract: unknown ids, malformed actions, bad player counts."""


_ERROR_TYPES: Dict[ErrorCategory, Type[RuleError]] = {
    ErrorCategory.ILLEGAL_ACTION: IllegalActionError,
    ErrorCategory.INSUFFICIENT_RESOURCES: InsufficientResourcesError,
    ErrorCategory.INVALID_PHASE: InvalidPhaseError,
    ErrorCategory.EXHAUSTED_SUPPLY: ExhaustedSupplyError,
}
