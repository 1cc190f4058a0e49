"""Resource economy: affordability, transfers, dice production and trade ratios.

Every function here returns new mappings or a new ``GameState``; nothing is
updated in place. Transfers clamp at zero instead of raising, so callers check
affordability first.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Mapping

from .constants import BANK_TRADE_RATE, GENERAL_PORT_RATE, SPECIFIC_PORT_RATE
from .game_state import GameState, ResourceBank, empty_resources
from .types import PRODUCTION_RESOURCES, BuildingType, PlayerId, PortType, ResourceType

BANK = None

ResourceBundle = Mapping[ResourceType, int]


def can_afford(resources: ResourceBundle, cost: ResourceBundle) -> bool:
    return all(resources.get(resource, 0) >= amount for resource, amount in cost.items())


def add_resources(resources: ResourceBundle, bundle: ResourceBundle) -> ResourceBank:
    updated = dict(resources)
    for resource, amount in bundle.items():
        updated[resource] = updated.get(resource, 0) + amount
    return updated


def deduct_resources(resources: ResourceBundle, bundle: ResourceBundle) -> ResourceBank:
    updated = dict(resources)
    for resource, amount in bundle.items():
        updated[resource] = max(0, updated.get(resource, 0) - amount)
    return updated


def transfer(
    state: GameState,
    bundle: ResourceBundle,
    giver: PlayerId | None = BANK,
    receiver: PlayerId | None = BANK,
) -> GameState:
    """Move ``bundle`` from ``giver`` to ``receiver``; ``BANK`` stands for the bank."""
    bank_resources = state.bank.resources
    if giver is BANK:
        bank_resources = deduct_resources(bank_resources, bundle)
    else:
        giving = state.player(giver)
        state = state.with_player(replace(giving, resources=deduct_resources(giving.resources, bundle)))
    if receiver is BANK:
        bank_resources = add_resources(bank_resources, bundle)
    else:
        receiving = state.player(receiver)
        state = state.with_player(replace(receiving, resources=add_resources(receiving.resources, bundle)))
    return replace(state, bank=replace(state.bank, resources=bank_resources))


def production(state: GameState, roll: int) -> Dict[PlayerId, ResourceBank]:
    """Resources each player earns from ``roll`` before the bank is consulted."""
    earned: Dict[PlayerId, ResourceBank] = {pid: empty_resources() for pid in state.player_ids()}
    for tile in state.tiles:
        if tile.number != roll or tile.has_robber or tile.resource == ResourceType.DESERT:
            continue
        for vertex_id in tile.vertex_ids:
            vertex = state.vertices[vertex_id]
            if vertex.owner is None:
                continue
            amount = 2 if vertex.building == BuildingType.CITY else 1
            earned[vertex.owner][tile.resource] += amount
    return earned


def distribute_resources(state: GameState, roll: int) -> GameState:
    earned = production(state, roll)

    # A kind the bank cannot fully cover is paid to nobody.
    for resource in PRODUCTION_RESOURCES:
        needed = sum(award[resource] for award in earned.values())
        if needed > state.bank.resources[resource]:
            for award in earned.values():
                award[resource] = 0

    for pid, award in earned.items():
        award = {resource: amount for resource, amount in award.items() if amount > 0}
        if award:
            state = transfer(state, award, giver=BANK, receiver=pid)
    return state


def initial_handout(state: GameState, vertex_id: int) -> GameState:
    """Pay the owner of ``vertex_id`` one card per adjacent producing tile."""
    vertex = state.vertices[vertex_id]
    if vertex.owner is None:
        return state
    award: ResourceBank = {}
    for tile_id in vertex.tile_ids:
        tile = state.tiles[tile_id]
        if tile.resource == ResourceType.DESERT or tile_id == state.robber_tile:
            continue
        award[tile.resource] = award.get(tile.resource, 0) + 1
    award = {
        resource: min(amount, state.bank.resources[resource])
        for resource, amount in award.items()
        if state.bank.resources[resource] > 0
    }
    if not award:
        return state
    return transfer(state, award, giver=BANK, receiver=vertex.owner)


def port_ratio(port: PortType, resource: ResourceType) -> int | None:
    """Rate a single port offers for ``resource``; None when it does not trade it."""
    if port == PortType.GENERAL:
        return GENERAL_PORT_RATE
    if port.resource == resource:
        return SPECIFIC_PORT_RATE
    return None


def trade_ratio(state: GameState, player_id: PlayerId, resource: ResourceType) -> int:
    ratio = BANK_TRADE_RATE
    for port in state.ports_of(player_id):
        rate = port_ratio(port, resource)
        if rate is not None:
            ratio = min(ratio, rate)
    return ratio


def exchange(
    state: GameState,
    player_id: PlayerId,
    give: ResourceType,
    receive: ResourceType,
    ratio: int,
) -> GameState | None:
    """Swap ``ratio`` of ``give`` for one ``receive`` with the bank, or None if unaffordable."""
    if state.player(player_id).resources[give] < ratio:
        return None
    state = transfer(state, {give: ratio}, giver=player_id, receiver=BANK)
    return transfer(state, {receive: 1}, giver=BANK, receiver=player_id)


def bank_trade(
    state: GameState, player_id: PlayerId, give: ResourceType, receive: ResourceType
) -> GameState | None:
    return exchange(state, player_id, give, receive, trade_ratio(state, player_id, give))


def port_trade(
    state: GameState, player_id: PlayerId, port: PortType, give: ResourceType, receive: ResourceType
) -> GameState | None:
    """Trade through one named port; None unless the player occupies it, it takes ``give`` and they can pay."""
    if port not in state.ports_of(player_id):
        return None
    ratio = port_ratio(port, give)
    if ratio is None:
        return None
    return exchange(state, player_id, give, receive, ratio)
