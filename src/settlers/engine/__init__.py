"""Core rules engine: board, generation, economy, validation and turn flow."""

from .board import BoardGraph, longest_road
from .config import DEFAULT_RULES, GameRules, NumberShuffleConstraints
from .engine import GameEngine
from .errors import (
    ContractError,
    ErrorCategory,
    ExhaustedSupplyError,
    IllegalActionError,
    InsufficientResourcesError,
    InvalidPhaseError,
    RuleError,
    RuleViolation,
    ViolationKind,
)
from .game_state import Bank, Edge, GameState, PlayerState, Tile, Vertex
from .generator import BoardGenerator
from .topology import BoardTopology, standard_topology
from .types import (
    Action,
    ActionType,
    BuildingType,
    DevCardType,
    GamePhase,
    PortType,
    ResourceType,
    TurnPhase,
)

__all__ = [
    "Action",
    "ActionType",
    "Bank",
    "BoardGenerator",
    "BoardGraph",
    "BoardTopology",
    "BuildingType",
    "ContractError",
    "DEFAULT_RULES",
    "DevCardType",
    "Edge",
    "ErrorCategory",
    "ExhaustedSupplyError",
    "GameEngine",
    "GamePhase",
    "GameRules",
    "GameState",
    "IllegalActionError",
    "InsufficientResourcesError",
    "InvalidPhaseError",
    "NumberShuffleConstraints",
    "PlayerState",
    "PortType",
    "ResourceType",
    "RuleError",
    "RuleViolation",
    "Tile",
    "TurnPhase",
    "Vertex",
    "ViolationKind",
    "longest_road",
    "standard_topology",
]
