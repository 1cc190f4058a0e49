from dataclasses import replace

import pytest

from settlers.engine import (
    Action,
    ActionType,
    DevCardType,
    ExhaustedSupplyError,
    GamePhase,
    IllegalActionError,
    ResourceType,
    TurnPhase,
    ViolationKind,
)

from support import in_main, new_game, pave, settle, with_resources


def _with_deck(state, *cards):
    return replace(state, bank=replace(state.bank, dev_deck=tuple(cards)))


def _with_cards(state, player_id, **counts):
    player = state.player(player_id)
    cards = dict(player.dev_cards)
    for name, count in counts.items():
        cards[DevCardType(name)] = count
    return state.with_player(replace(player, dev_cards=cards))


def _play(engine, state, player_id, card, **fields):
    return engine.handle_action(
        state, Action(ActionType.PLAY_DEV_CARD, player_id, {"dev_card": card.value, **fields})
    )


def test_buy_dev_card():
    engine, state = new_game()
    state = in_main(with_resources(state, "alice", ore=1, grain=1, wool=1))
    deck_size = len(state.bank.dev_deck)
    top = state.bank.dev_deck[0]

    state = engine.handle_action(state, Action(ActionType.BUY_DEV_CARD, "alice"))
    player = state.player("alice")
    assert player.resource_count == 0
    assert len(state.bank.dev_deck) == deck_size - 1
    assert player.new_dev_cards[top] == 1
    assert player.dev_cards[top] == 0
    assert state.bank.resources[ResourceType.ORE] == 20


def test_empty_deck_is_exhausted_supply():
    engine, state = new_game()
    state = _with_deck(in_main(with_resources(state, "alice", ore=1, grain=1, wool=1)))
    with pytest.raises(ExhaustedSupplyError) as excinfo:
        engine.handle_action(state, Action(ActionType.BUY_DEV_CARD, "alice"))
    assert excinfo.value.kind == ViolationKind.DECK_EMPTY


def test_bought_card_waits_for_next_turn():
    engine, state = new_game()
    state = _with_deck(in_main(with_resources(state, "alice", ore=1, grain=1, wool=1)), DevCardType.KNIGHT)
    state = engine.handle_action(state, Action(ActionType.BUY_DEV_CARD, "alice"))

    with pytest.raises(IllegalActionError) as excinfo:
        _play(engine, state, "alice", DevCardType.KNIGHT)
    assert excinfo.value.kind == ViolationKind.CARD_NOT_IN_HAND

    state = engine.handle_action(state, Action(ActionType.END_TURN, "alice"))
    alice = state.player("alice")
    assert alice.dev_cards[DevCardType.KNIGHT] == 1
    assert alice.new_dev_cards[DevCardType.KNIGHT] == 0


def test_victory_point_card_counts_hidden_and_wins():
    engine, state = new_game()
    state = _with_deck(in_main(with_resources(state, "alice", ore=1, grain=1, wool=1)), DevCardType.VICTORY_POINT)
    state = state.with_player(replace(state.player("alice"), victory_points=9))
    state = engine.handle_action(state, Action(ActionType.BUY_DEV_CARD, "alice"))

    alice = state.player("alice")
    assert alice.victory_points == 9
    assert alice.hidden_victory_points == 1
    assert alice.total_victory_points == 10

    state = engine.handle_action(state, Action(ActionType.END_TURN, "alice"))
    assert state.phase == GamePhase.GAME_OVER
    assert state.winner == "alice"


def test_victory_point_card_cannot_be_played():
    engine, state = new_game()
    state = in_main(_with_cards(state, "alice", victory_point=1))
    with pytest.raises(IllegalActionError) as excinfo:
        _play(engine, state, "alice", DevCardType.VICTORY_POINT)
    assert excinfo.value.kind == ViolationKind.VICTORY_POINT_CARD


def test_knight_sends_player_to_move_robber():
    engine, state = new_game()
    state = in_main(_with_cards(state, "alice", knight=1))
    state = _play(engine, state, "alice", DevCardType.KNIGHT)
    alice = state.player("alice")
    assert alice.knights_played == 1
    assert alice.dev_cards[DevCardType.KNIGHT] == 0
    assert alice.dev_cards_played_this_turn == (DevCardType.KNIGHT,)
    assert state.turn_phase == TurnPhase.MOVING_ROBBER

    target = next(tile.tile_id for tile in state.tiles if tile.tile_id != state.robber_tile)
    state = engine.handle_action(state, Action(ActionType.MOVE_ROBBER, "alice", {"tile_id": target}))
    assert state.robber_tile == target
    assert state.turn_phase == TurnPhase.MAIN_ACTIONS


def test_one_card_per_turn():
    engine, state = new_game()
    state = in_main(_with_cards(state, "alice", monopoly=1, year_of_plenty=1))
    state = _play(engine, state, "alice", DevCardType.MONOPOLY, resource="ore")
    with pytest.raises(IllegalActionError) as excinfo:
        _play(engine, state, "alice", DevCardType.YEAR_OF_PLENTY, resources=["ore", "ore"])
    assert excinfo.value.kind == ViolationKind.CARD_ALREADY_PLAYED


def test_largest_army_needs_three_and_strict_lead():
    engine, state = new_game()
    state = _with_cards(state, "alice", knight=1)
    state = _with_cards(state, "bob", knight=2)
    state = state.with_player(replace(state.player("alice"), knights_played=2))
    state = state.with_player(replace(state.player("bob"), knights_played=2))
    state = in_main(state)

    state = _play(engine, state, "alice", DevCardType.KNIGHT)
    assert state.largest_army_holder == "alice"
    assert state.player("alice").victory_points == 2

    state = in_main(state, current=1)
    state = _play(engine, state, "bob", DevCardType.KNIGHT)
    assert state.largest_army_holder == "alice"

    bob = state.player("bob")
    state = state.with_player(replace(bob, dev_cards_played_this_turn=()))
    state = in_main(state, current=1)
    state = _play(engine, state, "bob", DevCardType.KNIGHT)
    assert state.largest_army_holder == "bob"
    assert state.player("bob").victory_points == 2
    assert state.player("alice").victory_points == 0


def test_monopoly_collects_from_everyone():
    engine, state = new_game()
    state = with_resources(state, "bob", wool=3, ore=1)
    state = with_resources(state, "carol", wool=2)
    state = in_main(_with_cards(state, "alice", monopoly=1))
    state = _play(engine, state, "alice", DevCardType.MONOPOLY, resource="wool")
    assert state.player("alice").resources[ResourceType.WOOL] == 5
    assert state.player("bob").resources[ResourceType.WOOL] == 0
    assert state.player("bob").resources[ResourceType.ORE] == 1
    assert state.player("carol").resources[ResourceType.WOOL] == 0


def test_year_of_plenty_takes_from_bank():
    engine, state = new_game()
    state = in_main(_with_cards(state, "alice", year_of_plenty=1))
    after = _play(engine, state, "alice", DevCardType.YEAR_OF_PLENTY, resources=["brick", "brick"])
    assert after.player("alice").resources[ResourceType.BRICK] == 2
    assert after.bank.resources[ResourceType.BRICK] == 17

    bank = dict(state.bank.resources)
    bank[ResourceType.ORE] = 1
    state = replace(state, bank=replace(state.bank, resources=bank))
    with pytest.raises(ExhaustedSupplyError):
        _play(engine, state, "alice", DevCardType.YEAR_OF_PLENTY, resources=["ore", "ore"])
    assert state.player("alice").dev_cards[DevCardType.YEAR_OF_PLENTY] == 1


def test_road_building_places_free_connected_roads():
    engine, state = new_game()
    tile = state.tiles[9]
    state = settle(state, "alice", tile.vertex_ids[0])
    state = in_main(_with_cards(state, "alice", road_building=1))

    state = _play(engine, state, "alice", DevCardType.ROAD_BUILDING, edge_ids=[tile.edge_ids[0], tile.edge_ids[1]])
    alice = state.player("alice")
    assert state.edges[tile.edge_ids[0]].owner == "alice"
    assert state.edges[tile.edge_ids[1]].owner == "alice"
    assert alice.roads_remaining == 13
    assert alice.resource_count == 0
    assert alice.longest_road_length == 2


def test_road_building_rejects_disconnected_second_road():
    engine, state = new_game()
    tile = state.tiles[9]
    state = settle(state, "alice", tile.vertex_ids[0])
    state = in_main(_with_cards(state, "alice", road_building=1))
    with pytest.raises(IllegalActionError) as excinfo:
        _play(engine, state, "alice", DevCardType.ROAD_BUILDING, edge_ids=[tile.edge_ids[0], tile.edge_ids[3]])
    assert excinfo.value.kind == ViolationKind.ROAD_NOT_CONNECTED
    assert state.edges[tile.edge_ids[0]].owner is None


def test_road_building_with_existing_network():
    engine, state = new_game()
    tile = state.tiles[4]
    state = pave(state, "alice", tile.edge_ids[0])
    state = in_main(_with_cards(state, "alice", road_building=1))
    state = _play(engine, state, "alice", DevCardType.ROAD_BUILDING, edge_ids=[tile.edge_ids[1]])
    assert state.player("alice").longest_road_length == 2
    assert state.player("alice").dev_cards[DevCardType.ROAD_BUILDING] == 0
