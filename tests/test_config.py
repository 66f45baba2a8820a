"""Tests for settings."""

import json

from corridorflow.config import Settings
from corridorflow.flows.steps import PaymentMethod, PricingProvider, Venue


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        rules = settings.venue_rules()

        assert rules.offramp_venue == Venue.TRANSFERO
        assert rules.transfer_sources == frozenset({Venue.BINANCE})
        assert settings.is_production is False

    def test_transfer_sources_parsing(self):
        settings = Settings(_env_file=None, transfer_source_venues=" binance , ,TRANSFERO ")
        assert settings.transfer_sources == frozenset({Venue.BINANCE, Venue.TRANSFERO})

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("OFFRAMP_VENUE", "BINANCE")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings(_env_file=None)

        assert settings.offramp_venue == Venue.BINANCE
        assert settings.is_production is True

    def test_builtin_provider_table(self):
        settings = Settings(_env_file=None, default_pricing_provider="TRANSFERO")
        table = settings.load_provider_table()

        assert table.default_pricing_provider == PricingProvider.TRANSFERO
        assert table.payout_defaults(PaymentMethod.BREB).min_amount == "5000"

    def test_provider_table_from_file(self, tmp_path):
        path = tmp_path / "providers.json"
        path.write_text(
            json.dumps(
                {
                    "payout": {"PIX": {"min_amount": "10", "currency": "BRL", "is_async": True}},
                    "pricing": {"TRANSFERO": {"exchange_fee_pct": "0.002"}},
                }
            )
        )
        settings = Settings(_env_file=None, provider_defaults_path=str(path))
        table = settings.load_provider_table()

        assert table.payout_defaults(PaymentMethod.PIX).min_amount == "10"
        assert table.default_pricing_provider == PricingProvider.BINANCE

    def test_safe_dict(self):
        safe = Settings(_env_file=None).get_safe_dict()

        assert safe["venues"] == {"offramp": "TRANSFERO", "transfer_sources": ["BINANCE"]}
        assert safe["providers"]["defaults_file"] == "(built-in)"
