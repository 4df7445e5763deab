"""Trading resolver for the Catan rules engine.

Two kinds of trade are supported during MainPhase:

Maritime trades exchange N cards of one resource with the bank for one
card of another, at the best rate the player's harbors give (2:1 for a
matching specific harbor, 3:1 for a generic harbor, 4:1 otherwise).

Interactive trades go through a single pending offer:
- The current player proposes an offer to one player or to the table
- A responder accepts (atomic two-way exchange), rejects, or counters
  with an offer back to the proposer, which replaces the pending one
- The proposer or the named target may cancel
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from core.constants import Resource
from core.player import ResourceHand
from core.trade import PendingTrade, TradeOffer

from ..errors import ActionError, ErrorKind
from ..events import (
    Event,
    MaritimeTradeCompleted,
    TradeCancelled,
    TradeCompleted,
    TradeProposed,
    TradeRejected,
)

if TYPE_CHECKING:
    from core.game_state import GameState


class TradingResolver:
    """Validates and executes maritime and interactive trades."""

    def __init__(self, state: GameState):
        self.state = state

    # -------------------------------------------------------------------------
    # Maritime
    # -------------------------------------------------------------------------

    def maritime_rate(self, player_id: int, resource: Resource) -> int:
        return self.state.board.trade_rate(player_id, resource)

    def validate_maritime(self, player_id: int, give: Resource, give_count: int, receive: Resource) -> None:
        if give == receive:
            raise ActionError(ErrorKind.INVALID_TRADE, "Cannot trade a resource for itself")
        rate = self.maritime_rate(player_id, give)
        if give_count != rate:
            raise ActionError(
                ErrorKind.INVALID_TRADE, f"{give.value} trades at {rate}:1, not {give_count}:1"
            )
        if self.state.get_player(player_id).resources.get(give) < give_count:
            raise ActionError(ErrorKind.CANNOT_AFFORD, f"Need {give_count} {give.value}")

    def maritime_trade(self, player_id: int, give: Resource, give_count: int, receive: Resource) -> list[Event]:
        self.validate_maritime(player_id, give, give_count, receive)
        hand = self.state.get_player(player_id).resources
        hand.remove(give, give_count)
        hand.add(receive)
        return [
            MaritimeTradeCompleted(player=player_id, gave=give, gave_count=give_count, received=receive)
        ]

    def get_valid_maritime_trades(self, player_id: int) -> list[tuple[Resource, int, Resource]]:
        """(give, give_count, receive) triples at the player's best rates."""
        hand = self.state.get_player(player_id).resources
        trades = []
        for give in Resource:
            rate = self.maritime_rate(player_id, give)
            if hand.get(give) < rate:
                continue
            for receive in Resource:
                if receive != give:
                    trades.append((give, rate, receive))
        return trades

    # -------------------------------------------------------------------------
    # Offer validation
    # -------------------------------------------------------------------------

    def _validate_offer_shape(self, offer: TradeOffer) -> None:
        if offer.offering.is_empty() or offer.requesting.is_empty():
            raise ActionError(ErrorKind.INVALID_TRADE, "Both sides of a trade must be non-empty")
        for hand in (offer.offering, offer.requesting):
            if any(hand.get(r) < 0 for r in Resource):
                raise ActionError(ErrorKind.INVALID_TRADE, "Trade amounts cannot be negative")
        if offer.to_player is not None:
            if offer.to_player == offer.from_player:
                raise ActionError(ErrorKind.INVALID_TRADE, "Cannot trade with yourself")
            if not 0 <= offer.to_player < self.state.num_players():
                raise ActionError(ErrorKind.INVALID_TRADE, f"No player {offer.to_player}")
        if not self.state.get_player(offer.from_player).resources.can_afford(offer.offering):
            raise ActionError(ErrorKind.CANNOT_AFFORD, "Cannot offer cards not held")

    def _pending(self) -> PendingTrade:
        if self.state.pending_trade is None:
            raise ActionError(ErrorKind.NO_ACTIVE_TRADE)
        return self.state.pending_trade

    def _validate_responder(self, pending: PendingTrade, player_id: int) -> None:
        if not pending.offer.can_respond(player_id):
            raise ActionError(ErrorKind.NOT_YOUR_TURN, "This offer is not addressed to you")
        if player_id in pending.rejected_by:
            raise ActionError(ErrorKind.INVALID_TRADE, "Already rejected this offer")

    # -------------------------------------------------------------------------
    # Interactive
    # -------------------------------------------------------------------------

    def propose(self, player_id: int, offer: TradeOffer) -> list[Event]:
        if offer.from_player != player_id:
            raise ActionError(ErrorKind.INVALID_TRADE, "Offers must come from the proposing player")
        if self.state.pending_trade is not None:
            raise ActionError(ErrorKind.INVALID_TRADE, "Another offer is already pending")
        self._validate_offer_shape(offer)
        self.state.pending_trade = PendingTrade(offer=offer.copy())
        return [TradeProposed(offer=offer.copy())]

    def validate_accept(self, player_id: int) -> TradeOffer:
        pending = self._pending()
        self._validate_responder(pending, player_id)
        offer = pending.offer
        if not self.state.get_player(offer.from_player).resources.can_afford(offer.offering):
            raise ActionError(ErrorKind.CANNOT_AFFORD, "Proposer no longer holds the offered cards")
        if not self.state.get_player(player_id).resources.can_afford(offer.requesting):
            raise ActionError(ErrorKind.CANNOT_AFFORD, "Cannot give the requested cards")
        return offer

    def accept(self, player_id: int) -> list[Event]:
        offer = self.validate_accept(player_id)
        proposer = self.state.get_player(offer.from_player).resources
        responder = self.state.get_player(player_id).resources
        proposer.subtract(offer.offering)
        responder.subtract(offer.requesting)
        proposer.add_hand(offer.requesting)
        responder.add_hand(offer.offering)
        self.state.pending_trade = None
        return [
            TradeCompleted(
                from_player=offer.from_player,
                to_player=player_id,
                gave=offer.offering.copy(),
                received=offer.requesting.copy(),
            )
        ]

    def reject(self, player_id: int) -> list[Event]:
        """Reject the pending offer.

        A targeted offer is cancelled by its target's rejection; an open
        offer is cancelled once every other player has rejected it.
        """
        pending = self._pending()
        self._validate_responder(pending, player_id)
        pending.rejected_by.add(player_id)
        events: list[Event] = [TradeRejected(player=player_id)]

        others = {p.player_id for p in self.state.players} - {pending.offer.from_player}
        if not pending.offer.is_open() or pending.rejected_by >= others:
            self.state.pending_trade = None
            events.append(TradeCancelled())
        return events

    def counter(self, player_id: int, offer: TradeOffer) -> list[Event]:
        pending = self._pending()
        self._validate_responder(pending, player_id)
        if offer.from_player != player_id:
            raise ActionError(ErrorKind.INVALID_TRADE, "Counter-offers must come from the responder")
        if offer.to_player != pending.offer.from_player:
            raise ActionError(ErrorKind.INVALID_TRADE, "Counter-offers go back to the proposer")
        self._validate_offer_shape(offer)
        self.state.pending_trade = PendingTrade(offer=offer.copy())
        return [TradeProposed(offer=offer.copy())]

    def cancel(self, player_id: int) -> list[Event]:
        pending = self._pending()
        if player_id not in (pending.offer.from_player, pending.offer.to_player):
            raise ActionError(ErrorKind.NOT_YOUR_TURN, "Only the proposer or the target may cancel")
        self.state.pending_trade = None
        return [TradeCancelled()]

    def clear(self) -> list[Event]:
        """Drop any pending offer (end of turn)."""
        if self.state.pending_trade is None:
            return []
        self.state.pending_trade = None
        return [TradeCancelled()]

    # -------------------------------------------------------------------------
    # Enumeration
    # -------------------------------------------------------------------------

    def can_accept(self, player_id: int) -> bool:
        try:
            self.validate_accept(player_id)
        except ActionError:
            return False
        return True

    def can_reject(self, player_id: int) -> bool:
        pending: Optional[PendingTrade] = self.state.pending_trade
        return (
            pending is not None
            and pending.offer.can_respond(player_id)
            and player_id not in pending.rejected_by
        )

    def can_cancel(self, player_id: int) -> bool:
        pending = self.state.pending_trade
        return pending is not None and player_id in (pending.offer.from_player, pending.offer.to_player)


def make_offer(
    from_player: int,
    offering: dict,
    requesting: dict,
    to_player: Optional[int] = None,
) -> TradeOffer:
    """Build an offer from plain resource mappings."""
    return TradeOffer(
        from_player=from_player,
        to_player=to_player,
        offering=ResourceHand.from_dict(offering),
        requesting=ResourceHand.from_dict(requesting),
    )
