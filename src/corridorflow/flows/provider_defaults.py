"""Provider reference data and the provider-default cascade.

Each payout provider implies default fixed fee and amount limits. Each
pricing provider implies a default exchange fee. When the operator switches
provider, dependent fields that still hold the previous provider's default
(exact string match) are moved to the new provider's default; anything the
operator typed over is left alone.

Known trade-off: an operator who retypes exactly the old default value is
treated as never having touched the field.
"""

import json
import logging
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from corridorflow.flows.contracts import CorridorKey, PipelineDraft
from corridorflow.flows.errors import ProviderDefaultsError
from corridorflow.flows.steps import PaymentMethod, PayoutStep, PricingProvider, TargetCurrency

logger = logging.getLogger(__name__)

ProviderField = Literal["payout_provider", "pricing_provider"]

PAYOUT_DEPENDENT_FIELDS = ("fixed_fee", "min_amount", "max_amount")
PRICING_DEPENDENT_FIELDS = ("exchange_fee_pct",)


class PayoutProviderDefaults(BaseModel):
    """Defaults implied by a payout provider. Blank limits mean unbounded."""

    model_config = ConfigDict(frozen=True)

    fixed_fee: str = "0"
    min_amount: str = ""
    max_amount: str = ""
    currency: TargetCurrency = Field(..., description="Fiat currency the provider pays out")
    is_async: bool = Field(False, description="Completion arrives later as a provider webhook")


class PricingProviderDefaults(BaseModel):
    """Defaults implied by a pricing provider."""

    model_config = ConfigDict(frozen=True)

    exchange_fee_pct: str = "0"


class ProviderDefaultsTable(BaseModel):
    """Immutable lookup of provider defaults, injected into the cascade."""

    model_config = ConfigDict(frozen=True)

    payout: dict[PaymentMethod, PayoutProviderDefaults]
    pricing: dict[PricingProvider, PricingProviderDefaults]
    default_pricing_provider: PricingProvider = PricingProvider.BINANCE

    def payout_defaults(self, provider: PaymentMethod) -> PayoutProviderDefaults:
        try:
            return self.payout[provider]
        except KeyError:
            raise ProviderDefaultsError(str(provider.value)) from None

    def pricing_defaults(self, provider: PricingProvider) -> PricingProviderDefaults:
        try:
            return self.pricing[provider]
        except KeyError:
            raise ProviderDefaultsError(str(provider.value)) from None

    def payout_provider_for(self, target_currency: TargetCurrency) -> PaymentMethod:
        """First payout provider that pays out in the given fiat currency."""
        for provider, defaults in self.payout.items():
            if defaults.currency == target_currency:
                return provider
        raise ProviderDefaultsError(f"payout:{target_currency.value}")

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ProviderDefaultsTable":
        """Load reference data from a JSON file shaped like the model."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        table = cls.model_validate(data)
        logger.info(
            f"Loaded provider defaults from {path}: "
            f"{len(table.payout)} payout, {len(table.pricing)} pricing providers"
        )
        return table


def default_provider_table() -> ProviderDefaultsTable:
    """Built-in reference data matching the live payout and pricing providers."""
    return ProviderDefaultsTable(
        payout={
            PaymentMethod.BREB: PayoutProviderDefaults(
                fixed_fee="0",
                min_amount="5000",
                max_amount="5000000",
                currency=TargetCurrency.COP,
                is_async=False,
            ),
            PaymentMethod.PIX: PayoutProviderDefaults(
                fixed_fee="0",
                min_amount="0",
                max_amount="",
                currency=TargetCurrency.BRL,
                is_async=True,
            ),
        },
        pricing={
            PricingProvider.BINANCE: PricingProviderDefaults(exchange_fee_pct="0.0085"),
            PricingProvider.TRANSFERO: PricingProviderDefaults(exchange_fee_pct="0.001"),
        },
    )


def _cascade(
    draft: PipelineDraft,
    fields: tuple[str, ...],
    old_defaults: BaseModel,
    new_defaults: BaseModel,
) -> dict[str, str]:
    updates: dict[str, str] = {}
    for name in fields:
        current = getattr(draft, name)
        if current == getattr(old_defaults, name):
            updates[name] = getattr(new_defaults, name)
        else:
            logger.debug(f"Keeping operator override {name}={current!r}")
    return updates


def on_provider_change(
    draft: PipelineDraft,
    field: ProviderField,
    new_provider: Union[PaymentMethod, PricingProvider],
    table: ProviderDefaultsTable,
) -> PipelineDraft:
    """Switch a provider and re-derive its untouched dependent fields.

    Args:
        draft: Current draft (not modified)
        field: "payout_provider" or "pricing_provider"
        new_provider: Provider being selected
        table: Provider reference data

    Returns:
        A new draft with the provider and cascaded defaults applied
    """
    provider: Union[PaymentMethod, PricingProvider]
    if field == "payout_provider":
        provider = PaymentMethod(new_provider)
        updates = _cascade(
            draft,
            PAYOUT_DEPENDENT_FIELDS,
            table.payout_defaults(draft.payout_provider),
            table.payout_defaults(provider),
        )
    elif field == "pricing_provider":
        provider = PricingProvider(new_provider)
        updates = _cascade(
            draft,
            PRICING_DEPENDENT_FIELDS,
            table.pricing_defaults(draft.pricing_provider),
            table.pricing_defaults(provider),
        )
    else:
        raise ValueError(f"Not a provider field: {field}")

    logger.debug(f"{field} -> {provider.value}, cascaded: {sorted(updates)}")
    updates[field] = provider
    return draft.model_copy(update=updates)


def apply_provider_defaults(draft: PipelineDraft, table: ProviderDefaultsTable) -> PipelineDraft:
    """Overwrite every dependent field with the current providers' defaults."""
    payout = table.payout_defaults(draft.payout_provider)
    pricing = table.pricing_defaults(draft.pricing_provider)
    return draft.model_copy(
        update={
            "fixed_fee": payout.fixed_fee,
            "min_amount": payout.min_amount,
            "max_amount": payout.max_amount,
            "exchange_fee_pct": pricing.exchange_fee_pct,
        }
    )


def seed_draft(
    corridor: CorridorKey,
    table: ProviderDefaultsTable,
    payout_provider: Optional[PaymentMethod] = None,
    pricing_provider: Optional[PricingProvider] = None,
) -> PipelineDraft:
    """Fresh draft for a corridor with no definition yet."""
    draft = PipelineDraft(
        crypto_currency=corridor.crypto_currency,
        blockchain=corridor.blockchain,
        target_currency=corridor.target_currency,
        payout_provider=payout_provider or table.payout_provider_for(corridor.target_currency),
        pricing_provider=pricing_provider or table.default_pricing_provider,
        steps=[PayoutStep()],
    )
    return apply_provider_defaults(draft, table)
