"""Tests for resource hands, players and trade offers."""

import random

import pytest

from core.constants import DevelopmentCard, Resource
from core.player import CITY, DEVELOPMENT_CARD, ROAD, SETTLEMENT, Player, ResourceHand
from core.trade import PendingTrade, TradeOffer


# =============================================================================
# ResourceHand Tests
# =============================================================================


class TestResourceHand:
    """Test resource hand arithmetic."""

    def test_costs(self):
        """Cost hands match the building price list."""
        assert ROAD.total() == 2
        assert SETTLEMENT.total() == 4
        assert CITY == ResourceHand(ore=3, grain=2)
        assert DEVELOPMENT_CARD == ResourceHand(ore=1, grain=1, wool=1)

    def test_from_dict_accepts_names_and_enums(self):
        """Keys may be Resource members or their string values."""
        hand = ResourceHand.from_dict({"brick": 2, Resource.WOOL: 1})
        assert hand == ResourceHand(brick=2, wool=1)

    def test_remove_more_than_held_raises(self):
        """A hand never goes negative."""
        hand = ResourceHand(ore=1)
        with pytest.raises(ValueError):
            hand.remove(Resource.ORE, 2)
        assert hand.ore == 1

    def test_subtract_is_all_or_nothing(self):
        """A failed subtraction leaves the hand unchanged."""
        hand = ResourceHand(brick=1, lumber=0)
        with pytest.raises(ValueError):
            hand.subtract(ROAD)
        assert hand == ResourceHand(brick=1)

    def test_can_afford(self):
        """can_afford checks every resource of the cost."""
        hand = ResourceHand(ore=3, grain=2, wool=1)
        assert hand.can_afford(CITY)
        assert hand.can_afford(DEVELOPMENT_CARD)
        assert not hand.can_afford(ROAD)

    def test_add_hand(self):
        """Adding hands sums each resource."""
        hand = ResourceHand(brick=1)
        hand.add_hand(ResourceHand(brick=2, ore=1))
        assert hand == ResourceHand(brick=3, ore=1)

    def test_steal_random_takes_one_held_card(self):
        """A stolen card was in the hand and the total drops by one."""
        hand = ResourceHand(brick=2, wool=3)
        stolen = hand.steal_random(random.Random(4))
        assert stolen in (Resource.BRICK, Resource.WOOL)
        assert hand.total() == 4

    def test_steal_from_empty_hand(self):
        """Stealing from an empty hand yields nothing."""
        assert ResourceHand().steal_random(random.Random(0)) is None

    def test_steal_picks_a_card_not_a_resource(self):
        """Card positions run through the resources in canonical order."""
        picks = []
        for position in range(4):
            rng = random.Random()
            rng.randrange = lambda total, position=position: position
            picks.append(ResourceHand(brick=3, wool=1).steal_random(rng))
        assert picks == [Resource.BRICK, Resource.BRICK, Resource.BRICK, Resource.WOOL]

    def test_steal_is_weighted_by_card_count(self):
        """Three brick and one wool lose a brick about three times in four."""
        rng = random.Random(7)
        stolen = [ResourceHand(brick=3, wool=1).steal_random(rng) for _ in range(4000)]
        assert set(stolen) == {Resource.BRICK, Resource.WOOL}
        assert stolen.count(Resource.BRICK) / len(stolen) == pytest.approx(0.75, abs=0.03)

    def test_items_skip_zero_counts(self):
        """items() lists only resources actually held, in canonical order."""
        hand = ResourceHand(wool=1, brick=2)
        assert hand.items() == [(Resource.BRICK, 2), (Resource.WOOL, 1)]

    def test_copy_is_independent(self):
        hand = ResourceHand(grain=2)
        copied = hand.copy()
        copied.add(Resource.GRAIN)
        assert hand.grain == 2


# =============================================================================
# Player Tests
# =============================================================================


class TestPlayer:
    """Test development card bookkeeping and serialization."""

    def test_starting_stock(self):
        """Players start with 5 settlements, 4 cities and 15 roads."""
        player = Player(0)
        assert (player.settlements_remaining, player.cities_remaining, player.roads_remaining) == (5, 4, 15)

    def test_bought_card_is_not_playable_until_promoted(self):
        """Cards bought this turn become playable after promotion."""
        player = Player(0)
        player.buy_dev_card(DevelopmentCard.KNIGHT)
        assert not player.has_playable(DevelopmentCard.KNIGHT)
        with pytest.raises(ValueError):
            player.play_dev_card(DevelopmentCard.KNIGHT)

        player.promote_bought_cards()
        assert player.has_playable(DevelopmentCard.KNIGHT)
        player.play_dev_card(DevelopmentCard.KNIGHT)
        assert player.dev_cards == []

    def test_victory_point_cards_count_immediately(self):
        """Victory point cards count whether or not they were bought this turn."""
        player = Player(0, dev_cards=[DevelopmentCard.VICTORY_POINT])
        player.buy_dev_card(DevelopmentCard.VICTORY_POINT)
        assert player.victory_point_cards == 2
        assert player.dev_card_count == 2

    def test_to_dict_hides_private_information(self):
        """The opponent view shows counts instead of cards."""
        player = Player(1, resources=ResourceHand(ore=2), dev_cards=[DevelopmentCard.MONOPOLY])
        public = player.to_dict(hide_private=True)
        assert public["resource_count"] == 2
        assert public["dev_card_count"] == 1
        assert "resources" not in public
        assert "dev_cards" not in public

        private = player.to_dict()
        assert private["resources"]["ore"] == 2
        assert private["dev_cards"] == ["monopoly"]


# =============================================================================
# TradeOffer Tests
# =============================================================================


class TestTradeOffer:
    """Test trade offer targeting."""

    def test_open_offer_accepts_any_other_player(self):
        """Anyone but the proposer may respond to an open offer."""
        offer = TradeOffer(0, None, ResourceHand(brick=1), ResourceHand(ore=1))
        assert offer.is_open()
        assert not offer.can_respond(0)
        assert offer.can_respond(1)
        assert offer.can_respond(3)

    def test_targeted_offer_only_target_responds(self):
        """A targeted offer can only be answered by its target."""
        offer = TradeOffer(0, 2, ResourceHand(brick=1), ResourceHand(ore=1))
        assert not offer.is_open()
        assert offer.can_respond(2)
        assert not offer.can_respond(1)

    def test_dict_round_trip(self):
        """to_dict/from_dict preserve an offer."""
        offer = TradeOffer(1, None, ResourceHand(grain=2), ResourceHand(wool=1))
        assert TradeOffer.from_dict(offer.to_dict()) == offer

    def test_pending_trade_lists_rejections_sorted(self):
        pending = PendingTrade(TradeOffer(0, None, ResourceHand(brick=1), ResourceHand(ore=1)))
        pending.rejected_by.update({3, 1})
        assert pending.to_dict()["rejected_by"] == [1, 3]
