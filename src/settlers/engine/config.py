from __future__ import annotations

from dataclasses import dataclass

from . import constants


@dataclass(frozen=True)
class NumberShuffleConstraints:
    no_adjacent_six_eight: bool = True


@dataclass(frozen=True)
class GameRules:
    victory_points_to_win: int = constants.VICTORY_POINTS_TO_WIN
    hand_limit: int = constants.HAND_LIMIT
    min_players: int = constants.MIN_PLAYERS
    max_players: int = constants.MAX_PLAYERS
    min_longest_road: int = constants.MIN_LONGEST_ROAD
    longest_road_bonus: int = constants.LONGEST_ROAD_BONUS
    min_largest_army: int = constants.MIN_LARGEST_ARMY
    largest_army_bonus: int = constants.LARGEST_ARMY_BONUS
    settlements_per_player: int = constants.SETTLEMENTS_PER_PLAYER
    cities_per_player: int = constants.CITIES_PER_PLAYER
    roads_per_player: int = constants.ROADS_PER_PLAYER
    bank_count: int = constants.DEFAULT_BANK_COUNT


DEFAULT_RULES = GameRules()
