from __future__ import annotations

from typing import Dict, List

from .types import ActionType, DevCardType, PortType, ResourceType

TILE_COUNTS: Dict[ResourceType, int] = {
    ResourceType.LUMBER: 4,
    ResourceType.GRAIN: 4,
    ResourceType.WOOL: 4,
    ResourceType.BRICK: 3,
    ResourceType.ORE: 3,
    ResourceType.DESERT: 1,
}

STANDARD_NUMBER_TOKENS: List[int] = [2, 3, 3, 4, 4, 5, 5, 6, 6, 8, 8, 9, 9, 10, 10, 11, 11, 12]

HOT_NUMBERS = (6, 8)

# Dots printed on each number token: ways to roll the sum with two dice.
DICE_PROBABILITIES: Dict[int, int] = {
    2: 1,
    3: 2,
    4: 3,
    5: 4,
    6: 5,
    8: 5,
    9: 4,
    10: 3,
    11: 2,
    12: 1,
}

DEV_CARD_COUNTS: Dict[DevCardType, int] = {
    DevCardType.KNIGHT: 14,
    DevCardType.VICTORY_POINT: 5,
    DevCardType.ROAD_BUILDING: 2,
    DevCardType.MONOPOLY: 2,
    DevCardType.YEAR_OF_PLENTY: 2,
}

COSTS: Dict[ActionType, Dict[ResourceType, int]] = {
    ActionType.BUILD_ROAD: {
        ResourceType.BRICK: 1,
        ResourceType.LUMBER: 1,
    },
    ActionType.BUILD_SETTLEMENT: {
        ResourceType.BRICK: 1,
        ResourceType.LUMBER: 1,
        ResourceType.WOOL: 1,
        ResourceType.GRAIN: 1,
    },
    ActionType.BUILD_CITY: {
        ResourceType.ORE: 3,
        ResourceType.GRAIN: 2,
    },
    ActionType.BUY_DEV_CARD: {
        ResourceType.ORE: 1,
        ResourceType.WOOL: 1,
        ResourceType.GRAIN: 1,
    },
}

BANK_TRADE_RATE = 4
GENERAL_PORT_RATE = 3
SPECIFIC_PORT_RATE = 2

# Coastal edge slots (index along the ordered coastline) and the port placed on each.
PORT_SLOTS = (0, 3, 7, 10, 13, 17, 20, 23, 27)
PORT_SEQUENCE = (
    PortType.GENERAL,
    PortType.WOOL,
    PortType.GENERAL,
    PortType.GENERAL,
    PortType.BRICK,
    PortType.LUMBER,
    PortType.GENERAL,
    PortType.GRAIN,
    PortType.ORE,
)

DEFAULT_BANK_COUNT = 19
SETTLEMENTS_PER_PLAYER = 5
CITIES_PER_PLAYER = 4
ROADS_PER_PLAYER = 15

MIN_PLAYERS = 3
MAX_PLAYERS = 4
VICTORY_POINTS_TO_WIN = 10
HAND_LIMIT = 7
MIN_LONGEST_ROAD = 5
LONGEST_ROAD_BONUS = 2
MIN_LARGEST_ARMY = 3
LARGEST_ARMY_BONUS = 2
