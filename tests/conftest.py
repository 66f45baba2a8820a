"""Pytest configuration and fixtures."""

import os

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"

from corridorflow.flows.contracts import CorridorKey, PipelineDraft
from corridorflow.flows.pipeline_validator import VenueRules
from corridorflow.flows.provider_defaults import ProviderDefaultsTable, default_provider_table
from corridorflow.flows.steps import (
    BlockchainNetwork,
    ConvertStep,
    CryptoCurrency,
    MoveToExchangeStep,
    PaymentMethod,
    PayoutStep,
    PricingProvider,
    SupportedCurrency,
    TargetCurrency,
    TransferVenueStep,
    Venue,
)


@pytest.fixture
def table() -> ProviderDefaultsTable:
    """Built-in provider reference data."""
    return default_provider_table()


@pytest.fixture
def rules() -> VenueRules:
    """Default venue rules (TRANSFERO off-ramp, BINANCE transfer source)."""
    return VenueRules()


@pytest.fixture
def cop_corridor() -> CorridorKey:
    return CorridorKey(
        crypto_currency=CryptoCurrency.USDC,
        blockchain=BlockchainNetwork.STELLAR,
        target_currency=TargetCurrency.COP,
    )


@pytest.fixture
def brl_corridor() -> CorridorKey:
    return CorridorKey(
        crypto_currency=CryptoCurrency.USDC,
        blockchain=BlockchainNetwork.SOLANA,
        target_currency=TargetCurrency.BRL,
    )


def cop_binance_steps() -> list:
    """USDC on hot wallet -> Binance -> sold for COP."""
    return [
        PayoutStep(),
        MoveToExchangeStep(venue=Venue.BINANCE),
        ConvertStep(venue=Venue.BINANCE, from_asset=SupportedCurrency.USDC, to_asset=SupportedCurrency.COP),
    ]


def brl_transfero_steps() -> list:
    """USDC -> Binance, sold for USDT, moved to Transfero, off-ramped to BRL."""
    return [
        PayoutStep(),
        MoveToExchangeStep(venue=Venue.BINANCE),
        ConvertStep(venue=Venue.BINANCE, from_asset=SupportedCurrency.USDC, to_asset=SupportedCurrency.USDT),
        TransferVenueStep(from_venue=Venue.BINANCE, to_venue=Venue.TRANSFERO, asset=SupportedCurrency.USDT),
        ConvertStep(venue=Venue.TRANSFERO, from_asset=SupportedCurrency.USDT, to_asset=SupportedCurrency.BRL),
    ]


def make_draft(**overrides) -> PipelineDraft:
    """Valid COP draft; override any field."""
    values = dict(
        crypto_currency=CryptoCurrency.USDC,
        blockchain=BlockchainNetwork.STELLAR,
        target_currency=TargetCurrency.COP,
        name="USDC Stellar to COP",
        enabled=True,
        payout_provider=PaymentMethod.BREB,
        pricing_provider=PricingProvider.BINANCE,
        exchange_fee_pct="0.0085",
        fixed_fee="0",
        min_amount="5000",
        max_amount="5000000",
        steps=cop_binance_steps(),
    )
    values.update(overrides)
    return PipelineDraft(**values)


def make_brl_draft(**overrides) -> PipelineDraft:
    values = dict(
        crypto_currency=CryptoCurrency.USDC,
        blockchain=BlockchainNetwork.SOLANA,
        target_currency=TargetCurrency.BRL,
        name="USDC Solana to BRL",
        payout_provider=PaymentMethod.PIX,
        pricing_provider=PricingProvider.TRANSFERO,
        exchange_fee_pct="0.001",
        fixed_fee="0",
        min_amount="0",
        max_amount="",
        steps=brl_transfero_steps(),
    )
    values.update(overrides)
    return PipelineDraft(**values)
