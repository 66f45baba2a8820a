"""Tests for provider reference data and the default cascade."""

import json

import pytest

from conftest import make_draft
from corridorflow.flows.errors import ProviderDefaultsError
from corridorflow.flows.provider_defaults import (
    PayoutProviderDefaults,
    ProviderDefaultsTable,
    apply_provider_defaults,
    on_provider_change,
    seed_draft,
)
from corridorflow.flows.steps import PaymentMethod, PayoutStep, PricingProvider, TargetCurrency


class TestProviderTable:
    """Tests for the built-in reference data."""

    def test_payout_defaults(self, table):
        breb = table.payout_defaults(PaymentMethod.BREB)
        assert breb.min_amount == "5000"
        assert breb.max_amount == "5000000"
        assert breb.currency == TargetCurrency.COP
        assert breb.is_async is False

        pix = table.payout_defaults(PaymentMethod.PIX)
        assert pix.max_amount == ""
        assert pix.is_async is True

    def test_pricing_defaults(self, table):
        assert table.pricing_defaults(PricingProvider.BINANCE).exchange_fee_pct == "0.0085"
        assert table.pricing_defaults(PricingProvider.TRANSFERO).exchange_fee_pct == "0.001"

    def test_payout_provider_for_target(self, table):
        assert table.payout_provider_for(TargetCurrency.COP) == PaymentMethod.BREB
        assert table.payout_provider_for(TargetCurrency.BRL) == PaymentMethod.PIX

    def test_missing_provider_raises(self):
        table = ProviderDefaultsTable(
            payout={
                PaymentMethod.BREB: PayoutProviderDefaults(currency=TargetCurrency.COP),
            },
            pricing={},
        )

        with pytest.raises(ProviderDefaultsError) as exc_info:
            table.payout_defaults(PaymentMethod.PIX)
        assert exc_info.value.provider == "PIX"

        with pytest.raises(ProviderDefaultsError):
            table.pricing_defaults(PricingProvider.BINANCE)

        with pytest.raises(ProviderDefaultsError):
            table.payout_provider_for(TargetCurrency.BRL)

    def test_from_file(self, tmp_path):
        path = tmp_path / "providers.json"
        path.write_text(
            json.dumps(
                {
                    "payout": {
                        "BREB": {
                            "fixed_fee": "100",
                            "min_amount": "1000",
                            "max_amount": "",
                            "currency": "COP",
                        }
                    },
                    "pricing": {"BINANCE": {"exchange_fee_pct": "0.01"}},
                }
            )
        )

        table = ProviderDefaultsTable.from_file(path)

        assert table.payout_defaults(PaymentMethod.BREB).fixed_fee == "100"
        assert table.pricing_defaults(PricingProvider.BINANCE).exchange_fee_pct == "0.01"
        assert PaymentMethod.PIX not in table.payout


class TestProviderCascade:
    """Tests for on_provider_change."""

    def test_untouched_fields_follow_provider(self, table):
        """Fields still at the old default move to the new default."""
        draft = make_draft()
        updated = on_provider_change(draft, "payout_provider", PaymentMethod.PIX, table)

        assert updated.payout_provider == PaymentMethod.PIX
        assert updated.fixed_fee == "0"
        assert updated.min_amount == "0"
        assert updated.max_amount == ""

    def test_override_preserved(self, table):
        """A value the operator typed over survives the switch."""
        draft = make_draft(min_amount="10000")
        updated = on_provider_change(draft, "payout_provider", PaymentMethod.PIX, table)

        assert updated.min_amount == "10000"
        assert updated.max_amount == ""

    def test_pricing_provider_cascade(self, table):
        draft = make_draft()
        updated = on_provider_change(draft, "pricing_provider", PricingProvider.TRANSFERO, table)

        assert updated.pricing_provider == PricingProvider.TRANSFERO
        assert updated.exchange_fee_pct == "0.001"
        # Payout-dependent fields are untouched
        assert updated.min_amount == draft.min_amount

    def test_pricing_override_preserved(self, table):
        draft = make_draft(exchange_fee_pct="0.02")
        updated = on_provider_change(draft, "pricing_provider", PricingProvider.TRANSFERO, table)

        assert updated.exchange_fee_pct == "0.02"

    def test_retyped_default_counts_as_untouched(self, table):
        """Exact string match only: '5000.0' is an override, '5000' is not."""
        kept = on_provider_change(make_draft(min_amount="5000.0"), "payout_provider", PaymentMethod.PIX, table)
        moved = on_provider_change(make_draft(min_amount="5000"), "payout_provider", PaymentMethod.PIX, table)

        assert kept.min_amount == "5000.0"
        assert moved.min_amount == "0"

    def test_input_draft_not_modified(self, table):
        draft = make_draft()
        on_provider_change(draft, "payout_provider", PaymentMethod.PIX, table)

        assert draft.payout_provider == PaymentMethod.BREB
        assert draft.min_amount == "5000"

    def test_same_provider_is_noop(self, table):
        draft = make_draft(min_amount="7")
        updated = on_provider_change(draft, "payout_provider", PaymentMethod.BREB, table)

        assert updated.model_dump() == draft.model_dump()

    def test_invalid_field(self, table):
        with pytest.raises(ValueError):
            on_provider_change(make_draft(), "name", PaymentMethod.PIX, table)

    def test_apply_provider_defaults_overwrites(self, table):
        draft = make_draft(min_amount="1", max_amount="2", exchange_fee_pct="3")
        updated = apply_provider_defaults(draft, table)

        assert updated.min_amount == "5000"
        assert updated.max_amount == "5000000"
        assert updated.exchange_fee_pct == "0.0085"


class TestSeedDraft:
    """Tests for fresh drafts."""

    def test_seed_cop(self, table, cop_corridor):
        draft = seed_draft(cop_corridor, table)

        assert draft.id is None
        assert draft.name == ""
        assert draft.enabled is True
        assert draft.corridor == cop_corridor
        assert draft.payout_provider == PaymentMethod.BREB
        assert draft.pricing_provider == PricingProvider.BINANCE
        assert draft.min_amount == "5000"
        assert draft.max_amount == "5000000"
        assert draft.exchange_fee_pct == "0.0085"
        assert draft.steps == [PayoutStep()]

    def test_seed_brl_with_pricing_override(self, table, brl_corridor):
        draft = seed_draft(brl_corridor, table, pricing_provider=PricingProvider.TRANSFERO)

        assert draft.payout_provider == PaymentMethod.PIX
        assert draft.min_amount == "0"
        assert draft.max_amount == ""
        assert draft.exchange_fee_pct == "0.001"

    def test_seed_uses_table_pricing_default(self, table, cop_corridor):
        table = table.model_copy(update={"default_pricing_provider": PricingProvider.TRANSFERO})
        draft = seed_draft(cop_corridor, table)

        assert draft.pricing_provider == PricingProvider.TRANSFERO
        assert draft.exchange_fee_pct == "0.001"
