import random
from collections import Counter

import pytest

from settlers.engine import BoardGenerator, ContractError, NumberShuffleConstraints, PortType, ResourceType
from settlers.engine.constants import DEV_CARD_COUNTS, DICE_PROBABILITIES, STANDARD_NUMBER_TOKENS, TILE_COUNTS
from settlers.engine.topology import standard_topology

from support import PLAYERS


def test_topology_counts():
    topology = standard_topology()
    assert len(topology.tiles) == 19
    assert len(topology.vertices) == 54
    assert len(topology.edges) == 72
    assert len(topology.ports) == 9


def test_topology_degrees():
    topology = standard_topology()
    for tile in topology.tiles:
        assert len(tile.vertex_ids) == 6
        assert len(tile.edge_ids) == 6
    for vertex in topology.vertices:
        assert 1 <= len(vertex.tile_ids) <= 3
        assert 2 <= len(vertex.edge_ids) <= 3
        assert len(vertex.vertex_ids) == len(vertex.edge_ids)
    for edge in topology.edges:
        assert 1 <= len(edge.tile_ids) <= 2
        a, b = edge.vertex_ids
        assert b in topology.vertex(a).vertex_ids


def test_coast_has_thirty_edges():
    topology = standard_topology()
    assert sum(1 for edge in topology.edges if len(edge.tile_ids) == 1) == 30


def test_ports_sit_on_coastal_edges():
    topology = standard_topology()
    kinds = Counter(port.port_type for port in topology.ports)
    assert kinds[PortType.GENERAL] == 4
    for port_type in (PortType.BRICK, PortType.LUMBER, PortType.ORE, PortType.GRAIN, PortType.WOOL):
        assert kinds[port_type] == 1
    for port in topology.ports:
        edge_id = topology.edge_between(*port.vertex_ids)
        assert edge_id is not None
        assert len(topology.edge(edge_id).tile_ids) == 1


def test_unknown_ids_are_contract_errors():
    topology = standard_topology()
    with pytest.raises(ContractError):
        topology.vertex(54)
    with pytest.raises(ContractError):
        topology.edge(-1)
    with pytest.raises(ContractError):
        topology.tile(19)


@pytest.mark.parametrize("seed", [1, 7, 42, 99])
def test_generated_board_composition(seed):
    state = BoardGenerator(rng=random.Random(seed)).generate(PLAYERS)
    resources = Counter(tile.resource for tile in state.tiles)
    assert resources == Counter(TILE_COUNTS)

    numbers = sorted(tile.number for tile in state.tiles if tile.number is not None)
    assert numbers == sorted(STANDARD_NUMBER_TOKENS)

    deserts = [tile for tile in state.tiles if tile.resource == ResourceType.DESERT]
    assert len(deserts) == 1
    assert deserts[0].number is None
    assert deserts[0].weight == 0
    assert state.robber_tile == deserts[0].tile_id
    assert [tile.tile_id for tile in state.tiles if tile.has_robber] == [deserts[0].tile_id]

    for tile in state.tiles:
        if tile.number is not None:
            assert tile.weight == DICE_PROBABILITIES[tile.number]


@pytest.mark.parametrize("seed", range(20))
def test_no_adjacent_six_or_eight_outside_fallback(seed):
    state = BoardGenerator(rng=random.Random(seed)).generate(PLAYERS)
    topology = standard_topology()
    for tile in state.tiles:
        if tile.number not in (6, 8) or tile.tile_id in state.number_fallback_tiles:
            continue
        for neighbor_id in topology.tile(tile.tile_id).neighbor_ids:
            neighbor = state.tiles[neighbor_id]
            if neighbor.tile_id in state.number_fallback_tiles:
                continue
            assert neighbor.number not in (6, 8)


def test_disabled_balancing_never_reports_fallback():
    generator = BoardGenerator(
        rng=random.Random(5), constraints=NumberShuffleConstraints(no_adjacent_six_eight=False)
    )
    assert generator.generate(PLAYERS).number_fallback_tiles == ()


def test_same_seed_same_board():
    first = BoardGenerator(rng=random.Random(13)).generate(PLAYERS)
    second = BoardGenerator(rng=random.Random(13)).generate(PLAYERS)
    assert first.tiles == second.tiles
    assert first.bank.dev_deck == second.bank.dev_deck


def test_players_keep_given_order_and_pieces():
    state = BoardGenerator(rng=random.Random(3)).generate(["p4", "p1", "p3", "p2"])
    assert list(state.player_ids()) == ["p4", "p1", "p3", "p2"]
    for player in state.players:
        assert player.settlements_remaining == 5
        assert player.cities_remaining == 4
        assert player.roads_remaining == 15
        assert player.resource_count == 0


def test_bank_and_deck():
    state = BoardGenerator(rng=random.Random(3)).generate(PLAYERS)
    assert state.bank.resources[ResourceType.DESERT] == 0
    for resource in (ResourceType.BRICK, ResourceType.LUMBER, ResourceType.ORE, ResourceType.GRAIN, ResourceType.WOOL):
        assert state.bank.resources[resource] == 19
    assert Counter(state.bank.dev_deck) == Counter(DEV_CARD_COUNTS)


def test_vertices_carry_port_kinds():
    state = BoardGenerator(rng=random.Random(3)).generate(PLAYERS)
    port_vertices = [vertex for vertex in state.vertices if vertex.port != PortType.NONE]
    assert len(port_vertices) == 18
    assert all(vertex.owner is None for vertex in state.vertices)
    assert all(edge.owner is None for edge in state.edges)


@pytest.mark.parametrize("players", [["a", "b"], ["a", "b", "c", "d", "e"], ["a", "a", "b"]])
def test_rejects_bad_player_lists(players):
    with pytest.raises(ContractError):
        BoardGenerator(rng=random.Random(1)).generate(players)
