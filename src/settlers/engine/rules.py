"""Stateless legality checks.

Each check returns ``None`` when the move is legal, otherwise the
``RuleViolation`` describing why not. None of them touch the state.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from .board import distance_rule_ok
from .constants import HAND_LIMIT
from .errors import RuleViolation, ViolationKind
from .game_state import GameState, PlayerState
from .types import BuildingType, DevCardType, GamePhase, PlayerId, ResourceType, TurnPhase


def _owns_road_at(state: GameState, player_id: PlayerId, vertex_id: int) -> bool:
    return any(state.edges[edge_id].owner == player_id for edge_id in state.vertices[vertex_id].edge_ids)


def check_turn(state: GameState, player_id: PlayerId) -> RuleViolation | None:
    if state.current_player.player_id != player_id:
        return RuleViolation(
            ViolationKind.NOT_PLAYERS_TURN,
            f"It is not {player_id}'s turn",
            {"player_id": player_id, "current_player": state.current_player.player_id},
        )
    return None


def check_phase(
    state: GameState, game_phase: GamePhase, turn_phases: Iterable[TurnPhase] = ()
) -> RuleViolation | None:
    if state.phase == GamePhase.GAME_OVER:
        return RuleViolation(ViolationKind.GAME_OVER, "The game is over", {"winner": state.winner})
    allowed = tuple(turn_phases)
    if state.phase != game_phase or (allowed and state.turn_phase not in allowed):
        return RuleViolation(
            ViolationKind.WRONG_PHASE,
            f"Not allowed during {state.phase.value}/{state.turn_phase.value}",
            {"phase": state.phase, "turn_phase": state.turn_phase},
        )
    return None


def check_settlement(
    state: GameState, player_id: PlayerId, vertex_id: int, is_setup: bool = False
) -> RuleViolation | None:
    vertex = state.vertices[vertex_id]
    if vertex.owner is not None:
        return RuleViolation(ViolationKind.VERTEX_OCCUPIED, "Vertex is already built on", {"vertex_id": vertex_id})
    if not distance_rule_ok(state.vertices, vertex_id):
        return RuleViolation(
            ViolationKind.DISTANCE_RULE,
            "Distance rule: an adjacent vertex is already built on",
            {"vertex_id": vertex_id},
        )
    if not is_setup and not _owns_road_at(state, player_id, vertex_id):
        return RuleViolation(
            ViolationKind.SETTLEMENT_NOT_CONNECTED,
            "Settlement must touch one of your roads",
            {"vertex_id": vertex_id},
        )
    return None


def check_road(state: GameState, player_id: PlayerId, edge_id: int) -> RuleViolation | None:
    edge = state.edges[edge_id]
    if edge.owner is not None:
        return RuleViolation(ViolationKind.EDGE_OCCUPIED, "Edge already has a road", {"edge_id": edge_id})
    for vertex_id in edge.vertex_ids:
        if state.vertices[vertex_id].owner == player_id or _owns_road_at(state, player_id, vertex_id):
            return None
    return RuleViolation(
        ViolationKind.ROAD_NOT_CONNECTED,
        "Road must connect to your existing road or building",
        {"edge_id": edge_id},
    )


def check_setup_road(state: GameState, edge_id: int, settlement_vertex: int) -> RuleViolation | None:
    edge = state.edges[edge_id]
    if edge.owner is not None:
        return RuleViolation(ViolationKind.EDGE_OCCUPIED, "Edge already has a road", {"edge_id": edge_id})
    if settlement_vertex not in edge.vertex_ids:
        return RuleViolation(
            ViolationKind.ROAD_NOT_ADJACENT_TO_SETTLEMENT,
            "Setup road must touch the settlement just placed",
            {"edge_id": edge_id, "vertex_id": settlement_vertex},
        )
    return None


def check_city(state: GameState, player_id: PlayerId, vertex_id: int) -> RuleViolation | None:
    vertex = state.vertices[vertex_id]
    if vertex.owner != player_id:
        return RuleViolation(ViolationKind.NOT_VERTEX_OWNER, "You do not own this vertex", {"vertex_id": vertex_id})
    if vertex.building != BuildingType.SETTLEMENT:
        return RuleViolation(
            ViolationKind.NOT_A_SETTLEMENT,
            "Only a settlement can be upgraded to a city",
            {"vertex_id": vertex_id, "building": vertex.building},
        )
    return None


def check_dev_card_play(player: PlayerState, card: DevCardType) -> RuleViolation | None:
    if card == DevCardType.VICTORY_POINT:
        return RuleViolation(ViolationKind.VICTORY_POINT_CARD, "Victory point cards are never played", {"card": card})
    if player.dev_cards[card] <= 0:
        return RuleViolation(ViolationKind.CARD_NOT_IN_HAND, f"No playable {card.value} card", {"card": card})
    if player.dev_cards_played_this_turn:
        return RuleViolation(
            ViolationKind.CARD_ALREADY_PLAYED,
            "Only one development card per turn",
            {"played": player.dev_cards_played_this_turn},
        )
    return None


def must_discard(player: PlayerState, hand_limit: int = HAND_LIMIT) -> bool:
    return player.resource_count > hand_limit


def discard_requirement(player: PlayerState, hand_limit: int = HAND_LIMIT) -> int:
    """Cards ``player`` must give up on a seven: half the hand, rounded down."""
    if not must_discard(player, hand_limit):
        return 0
    return player.resource_count // 2


def check_discard(player: PlayerState, discard: Mapping[ResourceType, int], required: int) -> RuleViolation | None:
    if required <= 0:
        return RuleViolation(
            ViolationKind.DISCARD_NOT_REQUIRED, "No discard is pending", {"player_id": player.player_id}
        )
    count = sum(discard.values())
    if count != required:
        return RuleViolation(
            ViolationKind.DISCARD_COUNT_MISMATCH,
            f"Must discard exactly {required} cards, got {count}",
            {"required": required, "given": count},
        )
    for resource, amount in discard.items():
        if amount < 0 or player.resources[resource] < amount:
            return RuleViolation(
                ViolationKind.INSUFFICIENT_RESOURCES,
                f"Not enough {resource.value} to discard",
                {"resource": resource, "amount": amount},
            )
    return None


def check_robber(state: GameState, tile_id: int) -> RuleViolation | None:
    if tile_id == state.robber_tile:
        return RuleViolation(
            ViolationKind.ROBBER_NOT_MOVED, "The robber must move to a different tile", {"tile_id": tile_id}
        )
    return None


def check_victim(state: GameState, player_id: PlayerId, tile_id: int, victim_id: PlayerId) -> RuleViolation | None:
    owners = {state.vertices[vid].owner for vid in state.tiles[tile_id].vertex_ids}
    if victim_id == player_id or victim_id not in owners:
        return RuleViolation(
            ViolationKind.INVALID_VICTIM,
            "Victim must own a building on the robber's tile",
            {"tile_id": tile_id, "victim_id": victim_id},
        )
    return None
