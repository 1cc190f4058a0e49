from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Tuple

from .errors import ContractError
from .types import (
    BuildingType,
    DevCardType,
    GamePhase,
    PlayerId,
    PortType,
    ResourceType,
    TurnPhase,
)

ResourceBank = Dict[ResourceType, int]
CardHand = Dict[DevCardType, int]


def empty_resources() -> ResourceBank:
    return {resource: 0 for resource in ResourceType}


def empty_hand() -> CardHand:
    return {card: 0 for card in DevCardType}


def _freeze(instance, *names: str) -> None:
    """Swap the named mapping fields for read-only copies."""
    for name in names:
        object.__setattr__(instance, name, MappingProxyType(dict(getattr(instance, name))))


@dataclass(frozen=True)
class Tile:
    tile_id: int
    resource: ResourceType
    number: int | None
    weight: int
    has_robber: bool
    vertex_ids: Tuple[int, ...]
    edge_ids: Tuple[int, ...]


@dataclass(frozen=True)
class Vertex:
    vertex_id: int
    tile_ids: Tuple[int, ...]
    edge_ids: Tuple[int, ...]
    vertex_ids: Tuple[int, ...]
    owner: PlayerId | None = None
    building: BuildingType = BuildingType.NONE
    port: PortType = PortType.NONE


@dataclass(frozen=True)
class Edge:
    edge_id: int
    vertex_ids: Tuple[int, int]
    tile_ids: Tuple[int, ...] = ()
    edge_ids: Tuple[int, ...] = ()
    owner: PlayerId | None = None


@dataclass(frozen=True)
class PlayerState:
    player_id: PlayerId
    resources: Mapping[ResourceType, int] = field(default_factory=empty_resources)
    dev_cards: Mapping[DevCardType, int] = field(default_factory=empty_hand)
    new_dev_cards: Mapping[DevCardType, int] = field(default_factory=empty_hand)
    dev_cards_played_this_turn: Tuple[DevCardType, ...] = ()
    settlements_remaining: int = 0
    cities_remaining: int = 0
    roads_remaining: int = 0
    victory_points: int = 0
    knights_played: int = 0
    longest_road_length: int = 0

    def __post_init__(self):
        _freeze(self, "resources", "dev_cards", "new_dev_cards")

    @property
    def resource_count(self) -> int:
        return sum(self.resources.values())

    @property
    def hidden_victory_points(self) -> int:
        return self.dev_cards[DevCardType.VICTORY_POINT] + self.new_dev_cards[DevCardType.VICTORY_POINT]

    @property
    def total_victory_points(self) -> int:
        return self.victory_points + self.hidden_victory_points


@dataclass(frozen=True)
class Bank:
    resources: Mapping[ResourceType, int]
    dev_deck: Tuple[DevCardType, ...] = ()

    def __post_init__(self):
        _freeze(self, "resources")


@dataclass(frozen=True)
class GameState:
    """One immutable snapshot of a game. Transitions return new snapshots."""

    tiles: Tuple[Tile, ...]
    vertices: Tuple[Vertex, ...]
    edges: Tuple[Edge, ...]
    players: Tuple[PlayerState, ...]
    bank: Bank
    robber_tile: int
    current_player_index: int = 0
    phase: GamePhase = GamePhase.SETUP
    turn_phase: TurnPhase = TurnPhase.PLACING_INITIAL
    turn_number: int = 0
    last_roll: int | None = None
    longest_road_holder: PlayerId | None = None
    largest_army_holder: PlayerId | None = None
    winner: PlayerId | None = None
    setup_round: int = 1
    setup_direction: int = 1
    pending_discards: Mapping[PlayerId, int] = field(default_factory=dict)
    number_fallback_tiles: Tuple[int, ...] = ()

    def __post_init__(self):
        _freeze(self, "pending_discards")

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_player_index]

    def player_ids(self) -> Iterator[PlayerId]:
        return (player.player_id for player in self.players)

    def player_index(self, player_id: PlayerId) -> int:
        for index, player in enumerate(self.players):
            if player.player_id == player_id:
                return index
        raise ContractError(f"Unknown player id: {player_id!r}")

    def player(self, player_id: PlayerId) -> PlayerState:
        return self.players[self.player_index(player_id)]

    def with_player(self, player: PlayerState) -> "GameState":
        index = self.player_index(player.player_id)
        players = self.players[:index] + (player,) + self.players[index + 1 :]
        return replace(self, players=players)

    def with_vertex(self, vertex: Vertex) -> "GameState":
        vid = vertex.vertex_id
        return replace(self, vertices=self.vertices[:vid] + (vertex,) + self.vertices[vid + 1 :])

    def with_edge(self, edge: Edge) -> "GameState":
        eid = edge.edge_id
        return replace(self, edges=self.edges[:eid] + (edge,) + self.edges[eid + 1 :])

    def with_tile(self, tile: Tile) -> "GameState":
        tid = tile.tile_id
        return replace(self, tiles=self.tiles[:tid] + (tile,) + self.tiles[tid + 1 :])

    def ports_of(self, player_id: PlayerId) -> set:
        return {
            vertex.port
            for vertex in self.vertices
            if vertex.owner == player_id and vertex.port != PortType.NONE
        }
