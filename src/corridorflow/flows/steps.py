"""Business step model for corridor flow definitions.

A flow definition is an ordered list of business steps. Each step is a
tagged variant discriminated by its ``type`` field:

- PAYOUT: pay the user through the payout provider (always first)
- MOVE_TO_EXCHANGE: send funds from the hot wallet to a venue
- CONVERT: exchange one asset for another at a venue
- TRANSFER_VENUE: withdraw funds from one venue to another
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Venue(str, Enum):
    """Execution venues where funds can be held, converted or transferred."""

    BINANCE = "BINANCE"
    TRANSFERO = "TRANSFERO"


class SupportedCurrency(str, Enum):
    """Every asset a step may reference."""

    BRL = "BRL"
    COP = "COP"
    USDC = "USDC"
    USDT = "USDT"


class TargetCurrency(str, Enum):
    """Fiat currencies a corridor can pay out in."""

    BRL = "BRL"
    COP = "COP"


class CryptoCurrency(str, Enum):
    """Crypto assets a corridor can be funded with."""

    USDC = "USDC"
    USDT = "USDT"


class BlockchainNetwork(str, Enum):
    """Networks the source crypto asset can arrive on."""

    STELLAR = "STELLAR"
    SOLANA = "SOLANA"
    CELO = "CELO"


class PaymentMethod(str, Enum):
    """Payout providers."""

    BREB = "BREB"
    PIX = "PIX"


class PricingProvider(str, Enum):
    """Exchange rate providers."""

    BINANCE = "BINANCE"
    TRANSFERO = "TRANSFERO"


FIAT_CURRENCIES = frozenset(currency.value for currency in TargetCurrency)


def is_fiat(currency: SupportedCurrency) -> bool:
    """Check if an asset is one of the corridor fiat currencies."""
    return currency.value in FIAT_CURRENCIES


class _Step(BaseModel):
    """Common config for all step variants: immutable, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PayoutStep(_Step):
    """Pay the user out through the corridor's payout provider."""

    type: Literal["PAYOUT"] = "PAYOUT"

    def describe(self) -> str:
        return "Payout"


class MoveToExchangeStep(_Step):
    """Send funds from the hot wallet into a venue."""

    type: Literal["MOVE_TO_EXCHANGE"] = "MOVE_TO_EXCHANGE"
    venue: Venue = Field(..., description="Destination venue")

    def describe(self) -> str:
        return f"Move to {self.venue.value}"


class ConvertStep(_Step):
    """Convert the held asset into another one at a venue."""

    type: Literal["CONVERT"] = "CONVERT"
    venue: Venue = Field(..., description="Venue executing the conversion")
    from_asset: SupportedCurrency = Field(..., description="Asset sold")
    to_asset: SupportedCurrency = Field(..., description="Asset bought")

    def describe(self) -> str:
        return f"Convert {self.from_asset.value} -> {self.to_asset.value} at {self.venue.value}"


class TransferVenueStep(_Step):
    """Withdraw funds from one venue into another."""

    type: Literal["TRANSFER_VENUE"] = "TRANSFER_VENUE"
    from_venue: Venue = Field(..., description="Venue currently holding the funds")
    to_venue: Venue = Field(..., description="Receiving venue")
    asset: SupportedCurrency = Field(..., description="Asset being moved")

    def describe(self) -> str:
        return f"Transfer {self.asset.value} {self.from_venue.value} -> {self.to_venue.value}"


Step = Annotated[
    Union[PayoutStep, MoveToExchangeStep, ConvertStep, TransferVenueStep],
    Field(discriminator="type"),
]
