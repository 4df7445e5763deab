"""Action resolvers for the Catan rules engine.

Each resolver:
- Takes the game state as input
- Validates an action, raising ActionError before any mutation
- Applies the action and returns the events it produced
- Provides get_valid_* helpers used to enumerate legal actions

Resolvers are used by the engine's apply_action/valid_actions functions.
"""

from .awards import (
    AwardsResolver,
    AwardStanding,
)

from .dice import (
    DiceResolver,
    DiceResult,
)

from .robber import (
    RobberResolver,
    StealResult,
)

from .building import (
    BuildingResolver,
    PurchaseOption,
)

from .dev_cards import (
    DevCardResolver,
)

from .trading import (
    TradingResolver,
    make_offer,
)

from .turn import (
    TurnResolver,
)

__all__ = [
    # Awards
    "AwardsResolver",
    "AwardStanding",
    # Dice
    "DiceResolver",
    "DiceResult",
    # Robber
    "RobberResolver",
    "StealResult",
    # Building
    "BuildingResolver",
    "PurchaseOption",
    # Development cards
    "DevCardResolver",
    # Trading
    "TradingResolver",
    "make_offer",
    # Turn
    "TurnResolver",
]
