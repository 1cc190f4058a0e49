from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Hashable

PlayerId = Hashable


class ResourceType(str, Enum):
    BRICK = "brick"
    LUMBER = "lumber"
    ORE = "ore"
    GRAIN = "grain"
    WOOL = "wool"
    DESERT = "desert"


PRODUCTION_RESOURCES = (
    ResourceType.BRICK,
    ResourceType.LUMBER,
    ResourceType.ORE,
    ResourceType.GRAIN,
    ResourceType.WOOL,
)


class BuildingType(str, Enum):
    NONE = "none"
    SETTLEMENT = "settlement"
    CITY = "city"


class PortType(str, Enum):
    NONE = "none"
    GENERAL = "general_3_to_1"
    BRICK = "brick_2_to_1"
    LUMBER = "lumber_2_to_1"
    ORE = "ore_2_to_1"
    GRAIN = "grain_2_to_1"
    WOOL = "wool_2_to_1"

    @property
    def resource(self) -> ResourceType | None:
        """Resource a specific 2:1 port trades, None for general and no port."""
        return _PORT_RESOURCES.get(self)


_PORT_RESOURCES: Dict[PortType, ResourceType] = {
    PortType.BRICK: ResourceType.BRICK,
    PortType.LUMBER: ResourceType.LUMBER,
    PortType.ORE: ResourceType.ORE,
    PortType.GRAIN: ResourceType.GRAIN,
    PortType.WOOL: ResourceType.WOOL,
}


class DevCardType(str, Enum):
    KNIGHT = "knight"
    MONOPOLY = "monopoly"
    YEAR_OF_PLENTY = "year_of_plenty"
    ROAD_BUILDING = "road_building"
    VICTORY_POINT = "victory_point"


class GamePhase(str, Enum):
    SETUP = "setup"
    MAIN = "main"
    GAME_OVER = "game_over"


class TurnPhase(str, Enum):
    PLACING_INITIAL = "placing_initial"
    ROLLING_DICE = "rolling_dice"
    DISCARDING = "discarding"
    MOVING_ROBBER = "moving_robber"
    MAIN_ACTIONS = "main_actions"


class ActionType(str, Enum):
    PLACE_INITIAL = "place_initial"
    ROLL_DICE = "roll_dice"
    BUILD_ROAD = "build_road"
    BUILD_SETTLEMENT = "build_settlement"
    BUILD_CITY = "build_city"
    BUY_DEV_CARD = "buy_dev_card"
    PLAY_DEV_CARD = "play_dev_card"
    MOVE_ROBBER = "move_robber"
    DISCARD = "discard"
    TRADE_BANK = "trade_bank"
    TRADE_PORT = "trade_port"
    TRADE_PLAYER = "trade_player"
    END_TURN = "end_turn"


@dataclass(frozen=True)
class Action:
    action_type: ActionType
    player_id: PlayerId
    payload: Dict[str, object] = field(default_factory=dict)
