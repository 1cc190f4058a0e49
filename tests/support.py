"""Builders for hand-made game states used across the test modules."""

from __future__ import annotations

import random
from dataclasses import replace
from typing import List

from settlers.engine import BuildingType, GameEngine, GamePhase, GameState, ResourceType, TurnPhase

PLAYERS = ("alice", "bob", "carol")


def new_game(seed: int = 7, players=PLAYERS):
    engine = GameEngine(rng=random.Random(seed))
    return engine, engine.start_game(players)


def in_main(state: GameState, turn_phase: TurnPhase = TurnPhase.MAIN_ACTIONS, current: int = 0) -> GameState:
    return replace(
        state,
        phase=GamePhase.MAIN,
        turn_phase=turn_phase,
        current_player_index=current,
        turn_number=1,
    )


def with_resources(state: GameState, player_id, **amounts: int) -> GameState:
    player = state.player(player_id)
    resources = dict(player.resources)
    for name, amount in amounts.items():
        resources[ResourceType(name)] = amount
    return state.with_player(replace(player, resources=resources))


def settle(state: GameState, player_id, vertex_id: int, building: BuildingType = BuildingType.SETTLEMENT) -> GameState:
    return state.with_vertex(replace(state.vertices[vertex_id], owner=player_id, building=building))


def pave(state: GameState, player_id, *edge_ids: int) -> GameState:
    for edge_id in edge_ids:
        state = state.with_edge(replace(state.edges[edge_id], owner=player_id))
    return state


def spread_vertices(state: GameState, count: int) -> List[int]:
    """Vertices pairwise far enough apart to all satisfy the distance rule."""
    chosen: List[int] = []
    blocked = set()
    for vertex in state.vertices:
        if vertex.vertex_id in blocked:
            continue
        chosen.append(vertex.vertex_id)
        blocked.add(vertex.vertex_id)
        blocked.update(vertex.vertex_ids)
        if len(chosen) == count:
            break
    return chosen
