from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Callable, Dict, List, Mapping, Sequence

from . import ledger
from .board import BoardGraph
from .config import DEFAULT_RULES, GameRules, NumberShuffleConstraints
from .constants import COSTS
from .errors import ContractError, RuleViolation, ViolationKind
from .game_state import GameState, PlayerState, empty_hand
from .generator import BoardGenerator
from .rules import (
    check_city,
    check_dev_card_play,
    check_discard,
    check_phase,
    check_road,
    check_robber,
    check_settlement,
    check_setup_road,
    check_turn,
    check_victim,
    discard_requirement,
)
from .topology import BoardTopology, standard_topology
from .types import (
    PRODUCTION_RESOURCES,
    Action,
    ActionType,
    BuildingType,
    DevCardType,
    GamePhase,
    PlayerId,
    PortType,
    ResourceType,
    TurnPhase,
)

logger = logging.getLogger(__name__)

Handler = Callable[[GameState, Action], GameState]


def _require(violation: RuleViolation | None) -> None:
    if violation is not None:
        logger.debug("Rejected: %s (%s) %s", violation.kind.value, violation, violation.context)
        raise violation.to_error()


def _field(action: Action, key: str):
    try:
        return action.payload[key]
    except KeyError:
        raise ContractError(f"{action.action_type.value} requires payload field '{key}'") from None


def _as_int(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ContractError(f"{label} must be an int, got {value!r}")
    return value


def _as_resource(value, label: str) -> ResourceType:
    try:
        resource = ResourceType(value)
    except ValueError:
        raise ContractError(f"{label}: unknown resource {value!r}") from None
    if resource == ResourceType.DESERT:
        raise ContractError(f"{label}: desert is not a tradeable resource")
    return resource


def _as_bundle(value, label: str) -> Dict[ResourceType, int]:
    if not isinstance(value, Mapping):
        raise ContractError(f"{label} must map resources to counts, got {value!r}")
    bundle: Dict[ResourceType, int] = {}
    for key, amount in value.items():
        amount = _as_int(amount, label)
        if amount < 0:
            raise ContractError(f"{label}: negative amount for {key!r}")
        if amount:
            resource = _as_resource(key, label)
            bundle[resource] = bundle.get(resource, 0) + amount
    return bundle


class GameEngine:
    """Applies actions to ``GameState`` snapshots.

    The engine holds configuration, the board graph and the RNG, never a
    game. Every public transition takes a state and returns a new one; a
    rejected action raises a ``RuleError`` and the input state stays valid.
    """

    def __init__(
        self,
        rules: GameRules = DEFAULT_RULES,
        rng: random.Random | None = None,
        topology: BoardTopology | None = None,
    ):
        self.rules = rules
        self.rng = rng or random.Random()
        self.topology = topology or standard_topology()
        self.board = BoardGraph(self.topology)
        self._handlers: Dict[ActionType, Handler] = {
            ActionType.PLACE_INITIAL: self._place_initial,
            ActionType.ROLL_DICE: self._roll_dice,
            ActionType.BUILD_ROAD: self._build_road,
            ActionType.BUILD_SETTLEMENT: self._build_settlement,
            ActionType.BUILD_CITY: self._build_city,
            ActionType.BUY_DEV_CARD: self._buy_dev_card,
            ActionType.PLAY_DEV_CARD: self._play_dev_card,
            ActionType.MOVE_ROBBER: self._move_robber,
            ActionType.DISCARD: self._discard,
            ActionType.TRADE_BANK: self._trade_bank,
            ActionType.TRADE_PORT: self._trade_port,
            ActionType.TRADE_PLAYER: self._trade_player,
            ActionType.END_TURN: self._end_turn,
        }

    # ------------------------------------------------------------------
    # Public entry points

    def start_game(
        self, player_ids: Sequence[PlayerId], constraints: NumberShuffleConstraints | None = None
    ) -> GameState:
        generator = BoardGenerator(
            topology=self.topology, rng=self.rng, rules=self.rules, constraints=constraints
        )
        state = generator.generate(player_ids)
        logger.info(
            "Game started with %d players %s, robber on tile %d",
            len(state.players),
            list(state.player_ids()),
            state.robber_tile,
        )
        return state

    def handle_action(self, state: GameState, action: Action) -> GameState:
        try:
            action_type = ActionType(action.action_type)
        except ValueError:
            raise ContractError(f"Unknown action type: {action.action_type!r}") from None
        if not isinstance(action.payload, Mapping):
            raise ContractError(f"Action payload must be a mapping, got {action.payload!r}")
        state.player_index(action.player_id)

        if action_type != action.action_type:
            action = replace(action, action_type=action_type)
        next_state = self._handlers[action_type](state, action)
        logger.debug("Applied %s for %r", action_type.value, action.player_id)
        return next_state

    def place_initial_settlement_and_road(
        self, state: GameState, player_id: PlayerId, vertex_id: int, edge_id: int
    ) -> GameState:
        """Place one setup settlement plus its road and advance the snake order.

        Round one walks forward through the players, round two walks back.
        Settlements placed in round two pay out their adjacent tiles
        immediately. After the first player's second placement the main game
        begins with that player rolling.
        """
        _require(check_phase(state, GamePhase.SETUP, (TurnPhase.PLACING_INITIAL,)))
        state.player_index(player_id)
        self.topology.vertex(vertex_id)
        self.topology.edge(edge_id)
        _require(check_turn(state, player_id))
        _require(check_settlement(state, player_id, vertex_id, is_setup=True))
        _require(check_setup_road(state, edge_id, vertex_id))

        state = self._place_settlement(state, player_id, vertex_id)
        state = self._place_road(state, player_id, edge_id)
        if state.setup_round == 2:
            state = self.process_initial_resource_handout(state, vertex_id)
        return self._advance_setup(state)

    def process_initial_resource_handout(self, state: GameState, vertex_id: int) -> GameState:
        """Pay out a round-two setup settlement; a no-op outside setup round two."""
        self.topology.vertex(vertex_id)
        if state.phase != GamePhase.SETUP or state.setup_round != 2:
            return state
        return ledger.initial_handout(state, vertex_id)

    def next_turn(self, state: GameState) -> GameState:
        """Hand the dice to the next player; cards bought this turn become playable."""
        player = state.current_player
        dev_cards = {card: count + player.new_dev_cards[card] for card, count in player.dev_cards.items()}
        state = state.with_player(
            replace(player, dev_cards=dev_cards, new_dev_cards=empty_hand(), dev_cards_played_this_turn=())
        )
        return replace(
            state,
            current_player_index=(state.current_player_index + 1) % len(state.players),
            turn_number=state.turn_number + 1,
            turn_phase=TurnPhase.ROLLING_DICE,
            last_roll=None,
        )

    # ------------------------------------------------------------------
    # Setup

    def _place_initial(self, state: GameState, action: Action) -> GameState:
        vertex_id = _as_int(_field(action, "vertex_id"), "vertex_id")
        edge_id = _as_int(_field(action, "edge_id"), "edge_id")
        return self.place_initial_settlement_and_road(state, action.player_id, vertex_id, edge_id)

    def _advance_setup(self, state: GameState) -> GameState:
        index = state.current_player_index + state.setup_direction
        if 0 <= index < len(state.players):
            return replace(state, current_player_index=index)
        if state.setup_round == 1:
            return replace(state, setup_round=2, setup_direction=-1)

        logger.info("Setup finished; %r rolls first", state.players[0].player_id)
        return replace(
            state,
            phase=GamePhase.MAIN,
            turn_phase=TurnPhase.ROLLING_DICE,
            current_player_index=0,
            turn_number=1,
        )

    # ------------------------------------------------------------------
    # Dice, discards and the robber

    def _roll_dice(self, state: GameState, action: Action) -> GameState:
        _require(check_phase(state, GamePhase.MAIN, (TurnPhase.ROLLING_DICE,)))
        _require(check_turn(state, action.player_id))

        dice = action.payload.get("dice")
        if dice is None:
            dice = (self.rng.randint(1, 6), self.rng.randint(1, 6))
        if not isinstance(dice, (tuple, list)) or len(dice) != 2:
            raise ContractError(f"dice must be a pair, got {dice!r}")
        for die in dice:
            if not 1 <= _as_int(die, "dice") <= 6:
                raise ContractError(f"Die value out of range: {die!r}")

        roll = dice[0] + dice[1]
        logger.debug("%r rolled %d", action.player_id, roll)
        state = replace(state, last_roll=roll)

        if roll != 7:
            state = ledger.distribute_resources(state, roll)
            return replace(state, turn_phase=TurnPhase.MAIN_ACTIONS)

        pending = {}
        for player in state.players:
            required = discard_requirement(player, self.rules.hand_limit)
            if required:
                pending[player.player_id] = required
        if pending:
            return replace(state, turn_phase=TurnPhase.DISCARDING, pending_discards=pending)
        return replace(state, turn_phase=TurnPhase.MOVING_ROBBER, pending_discards={})

    def _discard(self, state: GameState, action: Action) -> GameState:
        _require(check_phase(state, GamePhase.MAIN, (TurnPhase.DISCARDING,)))
        discard = _as_bundle(_field(action, "resources"), "resources")
        player = state.player(action.player_id)
        _require(check_discard(player, discard, state.pending_discards.get(action.player_id, 0)))

        state = ledger.transfer(state, discard, giver=action.player_id, receiver=ledger.BANK)
        pending = {pid: count for pid, count in state.pending_discards.items() if pid != action.player_id}
        turn_phase = TurnPhase.DISCARDING if pending else TurnPhase.MOVING_ROBBER
        return replace(state, pending_discards=pending, turn_phase=turn_phase)

    def _move_robber(self, state: GameState, action: Action) -> GameState:
        _require(check_phase(state, GamePhase.MAIN, (TurnPhase.MOVING_ROBBER,)))
        _require(check_turn(state, action.player_id))
        tile_id = _as_int(_field(action, "tile_id"), "tile_id")
        self.topology.tile(tile_id)
        _require(check_robber(state, tile_id))
        victim_id = action.payload.get("victim_id")
        if victim_id is not None:
            state.player_index(victim_id)
            _require(check_victim(state, action.player_id, tile_id, victim_id))

        previous = state.tiles[state.robber_tile]
        state = state.with_tile(replace(previous, has_robber=False))
        state = state.with_tile(replace(state.tiles[tile_id], has_robber=True))
        state = replace(state, robber_tile=tile_id, turn_phase=TurnPhase.MAIN_ACTIONS)
        if victim_id is not None:
            state = self._steal(state, action.player_id, victim_id)
        return state

    def _steal(self, state: GameState, thief: PlayerId, victim: PlayerId) -> GameState:
        hand: List[ResourceType] = []
        for resource in PRODUCTION_RESOURCES:
            hand.extend([resource] * state.player(victim).resources[resource])
        if not hand:
            return state
        stolen = self.rng.choice(hand)
        logger.debug("%r stole one card from %r", thief, victim)
        return ledger.transfer(state, {stolen: 1}, giver=victim, receiver=thief)

    # ------------------------------------------------------------------
    # Building

    def _require_main_turn(self, state: GameState, player_id: PlayerId) -> None:
        _require(check_phase(state, GamePhase.MAIN, (TurnPhase.MAIN_ACTIONS,)))
        _require(check_turn(state, player_id))

    def _require_funds(self, player: PlayerState, cost: Mapping[ResourceType, int]) -> None:
        if not ledger.can_afford(player.resources, cost):
            _require(
                RuleViolation(
                    ViolationKind.INSUFFICIENT_RESOURCES,
                    "Not enough resources",
                    {"player_id": player.player_id, "cost": dict(cost)},
                )
            )

    def _require_pieces(self, remaining: int, piece: str) -> None:
        if remaining <= 0:
            _require(RuleViolation(ViolationKind.NO_PIECES_LEFT, f"No {piece} left", {"piece": piece}))

    def _build_road(self, state: GameState, action: Action) -> GameState:
        edge_id = _as_int(_field(action, "edge_id"), "edge_id")
        self.topology.edge(edge_id)
        self._require_main_turn(state, action.player_id)
        player = state.player(action.player_id)
        cost = COSTS[ActionType.BUILD_ROAD]
        self._require_funds(player, cost)
        _require(check_road(state, action.player_id, edge_id))
        self._require_pieces(player.roads_remaining, "roads")

        state = self._place_road(state, action.player_id, edge_id)
        state = ledger.transfer(state, cost, giver=action.player_id, receiver=ledger.BANK)
        return self._update_longest_road(state)

    def _build_settlement(self, state: GameState, action: Action) -> GameState:
        vertex_id = _as_int(_field(action, "vertex_id"), "vertex_id")
        self.topology.vertex(vertex_id)
        self._require_main_turn(state, action.player_id)
        player = state.player(action.player_id)
        cost = COSTS[ActionType.BUILD_SETTLEMENT]
        self._require_funds(player, cost)
        _require(check_settlement(state, action.player_id, vertex_id))
        self._require_pieces(player.settlements_remaining, "settlements")

        state = self._place_settlement(state, action.player_id, vertex_id)
        return ledger.transfer(state, cost, giver=action.player_id, receiver=ledger.BANK)

    def _build_city(self, state: GameState, action: Action) -> GameState:
        vertex_id = _as_int(_field(action, "vertex_id"), "vertex_id")
        self.topology.vertex(vertex_id)
        self._require_main_turn(state, action.player_id)
        player = state.player(action.player_id)
        cost = COSTS[ActionType.BUILD_CITY]
        self._require_funds(player, cost)
        _require(check_city(state, action.player_id, vertex_id))
        self._require_pieces(player.cities_remaining, "cities")

        state = state.with_vertex(replace(state.vertices[vertex_id], building=BuildingType.CITY))
        state = state.with_player(
            replace(
                player,
                cities_remaining=player.cities_remaining - 1,
                settlements_remaining=player.settlements_remaining + 1,
                victory_points=player.victory_points + 1,
            )
        )
        return ledger.transfer(state, cost, giver=action.player_id, receiver=ledger.BANK)

    def _place_settlement(self, state: GameState, player_id: PlayerId, vertex_id: int) -> GameState:
        player = state.player(player_id)
        state = state.with_vertex(
            replace(state.vertices[vertex_id], owner=player_id, building=BuildingType.SETTLEMENT)
        )
        return state.with_player(
            replace(
                player,
                settlements_remaining=player.settlements_remaining - 1,
                victory_points=player.victory_points + 1,
            )
        )

    def _place_road(self, state: GameState, player_id: PlayerId, edge_id: int) -> GameState:
        player = state.player(player_id)
        state = state.with_edge(replace(state.edges[edge_id], owner=player_id))
        return state.with_player(replace(player, roads_remaining=player.roads_remaining - 1))

    # ------------------------------------------------------------------
    # Development cards

    def _buy_dev_card(self, state: GameState, action: Action) -> GameState:
        self._require_main_turn(state, action.player_id)
        player = state.player(action.player_id)
        cost = COSTS[ActionType.BUY_DEV_CARD]
        self._require_funds(player, cost)
        if not state.bank.dev_deck:
            _require(RuleViolation(ViolationKind.DECK_EMPTY, "The development card deck is empty"))

        card, deck = state.bank.dev_deck[0], state.bank.dev_deck[1:]
        new_cards = dict(player.new_dev_cards)
        new_cards[card] += 1
        state = state.with_player(replace(player, new_dev_cards=new_cards))
        state = replace(state, bank=replace(state.bank, dev_deck=deck))
        logger.debug("%r bought a development card, %d left", action.player_id, len(deck))
        return ledger.transfer(state, cost, giver=action.player_id, receiver=ledger.BANK)

    def _play_dev_card(self, state: GameState, action: Action) -> GameState:
        self._require_main_turn(state, action.player_id)
        value = _field(action, "dev_card")
        try:
            card = DevCardType(value)
        except ValueError:
            raise ContractError(f"Unknown development card: {value!r}") from None
        player = state.player(action.player_id)
        _require(check_dev_card_play(player, card))

        if card == DevCardType.KNIGHT:
            state = self._play_knight(state, action.player_id)
        elif card == DevCardType.MONOPOLY:
            state = self._play_monopoly(state, action)
        elif card == DevCardType.YEAR_OF_PLENTY:
            state = self._play_year_of_plenty(state, action)
        elif card == DevCardType.ROAD_BUILDING:
            state = self._play_road_building(state, action)

        player = state.player(action.player_id)
        dev_cards = dict(player.dev_cards)
        dev_cards[card] -= 1
        logger.debug("%r played %s", action.player_id, card.value)
        return state.with_player(
            replace(
                player,
                dev_cards=dev_cards,
                dev_cards_played_this_turn=player.dev_cards_played_this_turn + (card,),
            )
        )

    def _play_knight(self, state: GameState, player_id: PlayerId) -> GameState:
        player = state.player(player_id)
        state = state.with_player(replace(player, knights_played=player.knights_played + 1))
        state = self._update_largest_army(state)
        return replace(state, turn_phase=TurnPhase.MOVING_ROBBER)

    def _play_monopoly(self, state: GameState, action: Action) -> GameState:
        resource = _as_resource(_field(action, "resource"), "resource")
        for other in state.players:
            if other.player_id == action.player_id or not other.resources[resource]:
                continue
            state = ledger.transfer(
                state, {resource: other.resources[resource]}, giver=other.player_id, receiver=action.player_id
            )
        return state

    def _play_year_of_plenty(self, state: GameState, action: Action) -> GameState:
        picks = _field(action, "resources")
        if not isinstance(picks, (tuple, list)) or len(picks) != 2:
            raise ContractError(f"resources must name two resources, got {picks!r}")
        bundle: Dict[ResourceType, int] = {}
        for pick in picks:
            resource = _as_resource(pick, "resources")
            bundle[resource] = bundle.get(resource, 0) + 1
        if not ledger.can_afford(state.bank.resources, bundle):
            _require(
                RuleViolation(ViolationKind.BANK_EMPTY, "The bank cannot supply those resources", {"resources": bundle})
            )
        return ledger.transfer(state, bundle, giver=ledger.BANK, receiver=action.player_id)

    def _play_road_building(self, state: GameState, action: Action) -> GameState:
        edge_ids = _field(action, "edge_ids")
        if not isinstance(edge_ids, (tuple, list)) or not 1 <= len(edge_ids) <= 2:
            raise ContractError(f"edge_ids must hold one or two edges, got {edge_ids!r}")
        for edge_id in edge_ids:
            self.topology.edge(_as_int(edge_id, "edge_ids"))
        if state.player(action.player_id).roads_remaining < len(edge_ids):
            _require(RuleViolation(ViolationKind.NO_PIECES_LEFT, "Not enough roads left", {"piece": "roads"}))

        for edge_id in edge_ids:
            _require(check_road(state, action.player_id, edge_id))
            state = self._place_road(state, action.player_id, edge_id)
        return self._update_longest_road(state)

    # ------------------------------------------------------------------
    # Trading

    def _trade_pair(self, action: Action):
        give = _as_resource(_field(action, "give"), "give")
        receive = _as_resource(_field(action, "receive"), "receive")
        if give == receive:
            _require(RuleViolation(ViolationKind.INVALID_TRADE, "Cannot trade a resource for itself", {"resource": give}))
        return give, receive

    def _require_bank_has(self, state: GameState, resource: ResourceType) -> None:
        if state.bank.resources[resource] <= 0:
            _require(RuleViolation(ViolationKind.BANK_EMPTY, f"The bank has no {resource.value}", {"resource": resource}))

    def _trade_bank(self, state: GameState, action: Action) -> GameState:
        self._require_main_turn(state, action.player_id)
        give, receive = self._trade_pair(action)
        ratio = ledger.trade_ratio(state, action.player_id, give)
        self._require_funds(state.player(action.player_id), {give: ratio})
        self._require_bank_has(state, receive)
        return ledger.bank_trade(state, action.player_id, give, receive)

    def _trade_port(self, state: GameState, action: Action) -> GameState:
        self._require_main_turn(state, action.player_id)
        value = _field(action, "port")
        try:
            port = PortType(value)
        except ValueError:
            raise ContractError(f"Unknown port: {value!r}") from None
        give, receive = self._trade_pair(action)
        if port not in state.ports_of(action.player_id):
            _require(RuleViolation(ViolationKind.NO_PORT_ACCESS, f"No settlement on a {port.value} port", {"port": port}))
        ratio = ledger.port_ratio(port, give)
        if ratio is None:
            _require(RuleViolation(ViolationKind.INVALID_TRADE, f"{port.value} does not take {give.value}", {"port": port}))
        self._require_funds(state.player(action.player_id), {give: ratio})
        self._require_bank_has(state, receive)
        return ledger.port_trade(state, action.player_id, port, give, receive)

    def _trade_player(self, state: GameState, action: Action) -> GameState:
        self._require_main_turn(state, action.player_id)
        partner_id = _field(action, "to_player")
        partner = state.player(partner_id)
        give = _as_bundle(_field(action, "give"), "give")
        receive = _as_bundle(_field(action, "receive"), "receive")
        if partner_id == action.player_id or not give or not receive:
            _require(
                RuleViolation(
                    ViolationKind.INVALID_TRADE,
                    "A trade needs another player and something on both sides",
                    {"to_player": partner_id},
                )
            )
        self._require_funds(state.player(action.player_id), give)
        if not ledger.can_afford(partner.resources, receive):
            _require(
                RuleViolation(
                    ViolationKind.COUNTERPARTY_INSUFFICIENT_RESOURCES,
                    f"{partner_id} cannot pay their side",
                    {"to_player": partner_id, "receive": receive},
                )
            )

        state = ledger.transfer(state, give, giver=action.player_id, receiver=partner_id)
        return ledger.transfer(state, receive, giver=partner_id, receiver=action.player_id)

    # ------------------------------------------------------------------
    # Turn end and titles

    def _end_turn(self, state: GameState, action: Action) -> GameState:
        self._require_main_turn(state, action.player_id)
        player = state.player(action.player_id)
        if player.total_victory_points >= self.rules.victory_points_to_win:
            logger.info(
                "Game over: %r wins with %d points on turn %d",
                player.player_id,
                player.total_victory_points,
                state.turn_number,
            )
            return replace(state, phase=GamePhase.GAME_OVER, winner=player.player_id)
        return self.next_turn(state)

    def _update_longest_road(self, state: GameState) -> GameState:
        lengths = {pid: self.board.longest_road(state.edges, pid) for pid in state.player_ids()}
        for player in state.players:
            if player.longest_road_length != lengths[player.player_id]:
                state = state.with_player(replace(player, longest_road_length=lengths[player.player_id]))

        holder = state.longest_road_holder
        best = lengths[holder] if holder is not None else self.rules.min_longest_road - 1
        challenger = holder
        for pid, length in lengths.items():
            if length > best:
                best, challenger = length, pid
        if challenger == holder:
            return state
        state = self._move_bonus(state, holder, challenger, self.rules.longest_road_bonus)
        logger.debug("Longest road (%d) passes from %r to %r", best, holder, challenger)
        return replace(state, longest_road_holder=challenger)

    def _update_largest_army(self, state: GameState) -> GameState:
        holder = state.largest_army_holder
        best = state.player(holder).knights_played if holder is not None else self.rules.min_largest_army - 1
        challenger = holder
        for player in state.players:
            if player.knights_played > best:
                best, challenger = player.knights_played, player.player_id
        if challenger == holder:
            return state
        state = self._move_bonus(state, holder, challenger, self.rules.largest_army_bonus)
        logger.debug("Largest army (%d) passes from %r to %r", best, holder, challenger)
        return replace(state, largest_army_holder=challenger)

    @staticmethod
    def _move_bonus(state: GameState, previous: PlayerId | None, new: PlayerId, bonus: int) -> GameState:
        if previous is not None:
            loser = state.player(previous)
            state = state.with_player(replace(loser, victory_points=loser.victory_points - bonus))
        winner = state.player(new)
        return state.with_player(replace(winner, victory_points=winner.victory_points + bonus))
