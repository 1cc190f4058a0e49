from __future__ import annotations

import logging
import random
from typing import Dict, List, Sequence, Tuple

from .config import DEFAULT_RULES, GameRules, NumberShuffleConstraints
from .constants import (
    DEV_CARD_COUNTS,
    DICE_PROBABILITIES,
    HOT_NUMBERS,
    STANDARD_NUMBER_TOKENS,
    TILE_COUNTS,
)
from .errors import ContractError
from .game_state import Bank, Edge, GameState, PlayerState, Tile, Vertex, empty_resources
from .topology import BoardTopology, standard_topology
from .types import DevCardType, PlayerId, ResourceType

logger = logging.getLogger(__name__)


def _number_allowed(
    tile_id: int,
    number: int,
    numbers_by_tile: Dict[int, int],
    topology: BoardTopology,
) -> bool:
    if number not in HOT_NUMBERS:
        return True
    return all(
        numbers_by_tile.get(neighbor_id) not in HOT_NUMBERS
        for neighbor_id in topology.tile(tile_id).neighbor_ids
    )


class BoardGenerator:
    """Builds a randomized, balanced starting state on a fixed topology."""

    def __init__(
        self,
        topology: BoardTopology | None = None,
        rng: random.Random | None = None,
        rules: GameRules = DEFAULT_RULES,
        constraints: NumberShuffleConstraints | None = None,
    ):
        self.topology = topology or standard_topology()
        self.rng = rng or random.Random()
        self.rules = rules
        self.constraints = constraints or NumberShuffleConstraints()

    def generate(self, player_ids: Sequence[PlayerId]) -> GameState:
        player_ids = list(player_ids)
        if not self.rules.min_players <= len(player_ids) <= self.rules.max_players:
            raise ContractError(
                f"Number of players must be between {self.rules.min_players}"
                f"-{self.rules.max_players}, got {len(player_ids)}"
            )
        if len(set(player_ids)) != len(player_ids):
            raise ContractError(f"Player ids must be unique: {player_ids!r}")

        tiles, fallback_tiles = self.generate_tiles()
        robber_tile = next(tile.tile_id for tile in tiles if tile.resource == ResourceType.DESERT)

        return GameState(
            tiles=tuple(tiles),
            vertices=self.generate_vertices(),
            edges=self.generate_edges(),
            players=tuple(self.generate_player(pid) for pid in player_ids),
            bank=Bank(resources=self.initial_bank_resources(), dev_deck=self.shuffled_dev_deck()),
            robber_tile=robber_tile,
            number_fallback_tiles=tuple(fallback_tiles),
        )

    def generate_tiles(self) -> Tuple[List[Tile], List[int]]:
        resources: List[ResourceType] = []
        for resource, count in TILE_COUNTS.items():
            resources.extend([resource] * count)
        self.rng.shuffle(resources)

        numbers = list(STANDARD_NUMBER_TOKENS)
        self.rng.shuffle(numbers)

        numbers_by_tile: Dict[int, int] = {}
        fallback_tiles: List[int] = []
        for tile_topology, resource in zip(self.topology.tiles, resources):
            if resource == ResourceType.DESERT:
                continue
            tile_id = tile_topology.tile_id
            chosen = None
            if self.constraints.no_adjacent_six_eight:
                for index, candidate in enumerate(numbers):
                    if _number_allowed(tile_id, candidate, numbers_by_tile, self.topology):
                        chosen = numbers.pop(index)
                        break
            if chosen is None:
                chosen = numbers.pop(0)
                if self.constraints.no_adjacent_six_eight:
                    fallback_tiles.append(tile_id)
            numbers_by_tile[tile_id] = chosen

        if fallback_tiles:
            logger.warning("Number placement fell back to unbalanced tokens on tiles %s", fallback_tiles)

        tiles: List[Tile] = []
        for tile_topology, resource in zip(self.topology.tiles, resources):
            number = numbers_by_tile.get(tile_topology.tile_id)
            tiles.append(
                Tile(
                    tile_id=tile_topology.tile_id,
                    resource=resource,
                    number=number,
                    weight=DICE_PROBABILITIES[number] if number is not None else 0,
                    has_robber=resource == ResourceType.DESERT,
                    vertex_ids=tile_topology.vertex_ids,
                    edge_ids=tile_topology.edge_ids,
                )
            )
        return tiles, fallback_tiles

    def generate_vertices(self) -> Tuple[Vertex, ...]:
        return tuple(
            Vertex(
                vertex_id=vertex.vertex_id,
                tile_ids=vertex.tile_ids,
                edge_ids=vertex.edge_ids,
                vertex_ids=vertex.vertex_ids,
                port=self.topology.port_for_vertex(vertex.vertex_id),
            )
            for vertex in self.topology.vertices
        )

    def generate_edges(self) -> Tuple[Edge, ...]:
        return tuple(
            Edge(
                edge_id=edge.edge_id,
                vertex_ids=edge.vertex_ids,
                tile_ids=edge.tile_ids,
                edge_ids=edge.edge_ids,
            )
            for edge in self.topology.edges
        )

    def generate_player(self, player_id: PlayerId) -> PlayerState:
        return PlayerState(
            player_id=player_id,
            settlements_remaining=self.rules.settlements_per_player,
            cities_remaining=self.rules.cities_per_player,
            roads_remaining=self.rules.roads_per_player,
        )

    def initial_bank_resources(self) -> Dict[ResourceType, int]:
        bank = empty_resources()
        for resource in bank:
            if resource != ResourceType.DESERT:
                bank[resource] = self.rules.bank_count
        return bank

    def shuffled_dev_deck(self) -> Tuple[DevCardType, ...]:
        deck: List[DevCardType] = []
        for card, count in DEV_CARD_COUNTS.items():
            deck.extend([card] * count)
        self.rng.shuffle(deck)
        return tuple(deck)
