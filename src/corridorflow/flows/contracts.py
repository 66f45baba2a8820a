"""Draft, definition and validation result contracts.

PipelineDraft is the editable form: fee and amount fields are kept as the
strings the operator typed. PipelineDefinition is the normalized payload
handed to persistence, with Decimal values and None for unbounded limits.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from corridorflow.flows.errors import ValidationIssue, issues_to_map
from corridorflow.flows.steps import (
    BlockchainNetwork,
    CryptoCurrency,
    PaymentMethod,
    PayoutStep,
    PricingProvider,
    Step,
    TargetCurrency,
)

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)

PAYLOAD_NUMBER_FIELDS = ("exchange_fee_pct", "fixed_fee", "min_amount", "max_amount")


def _json_number(value: Optional[Decimal]) -> Union[int, float, None]:
    if value is None:
        return None
    if value == value.to_integral_value():
        return int(value)
    return float(value)


class CorridorKey(BaseModel):
    """A (crypto asset, blockchain, target fiat) payment route."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    crypto_currency: CryptoCurrency
    blockchain: BlockchainNetwork
    target_currency: TargetCurrency

    @property
    def key(self) -> str:
        return f"{self.crypto_currency.value}-{self.blockchain.value}-{self.target_currency.value}"

    def __str__(self) -> str:
        return self.key


class PipelineDraft(BaseModel):
    """Editable, string-typed flow definition owned by one editing session."""

    model_config = _CAMEL

    id: Optional[str] = Field(None, description="Definition id when editing a saved flow")
    crypto_currency: CryptoCurrency
    blockchain: BlockchainNetwork
    target_currency: TargetCurrency
    name: str = ""
    enabled: bool = True
    payout_provider: PaymentMethod
    pricing_provider: PricingProvider
    exchange_fee_pct: str = "0"
    fixed_fee: str = "0"
    min_amount: str = ""
    max_amount: str = ""
    steps: list[Step] = Field(default_factory=lambda: [PayoutStep()])

    @property
    def corridor(self) -> CorridorKey:
        return CorridorKey(
            crypto_currency=self.crypto_currency,
            blockchain=self.blockchain,
            target_currency=self.target_currency,
        )


class PipelineDefinition(BaseModel):
    """Normalized flow definition, ready to persist."""

    model_config = _CAMEL

    id: Optional[str] = None
    crypto_currency: CryptoCurrency
    blockchain: BlockchainNetwork
    target_currency: TargetCurrency
    name: str = Field(..., min_length=1)
    enabled: bool = True
    payout_provider: PaymentMethod
    pricing_provider: PricingProvider
    exchange_fee_pct: Decimal = Field(default=Decimal("0"), ge=0)
    fixed_fee: Decimal = Field(default=Decimal("0"), ge=0)
    min_amount: Optional[Decimal] = Field(None, ge=0, description="Minimum fiat amount (None = no floor)")
    max_amount: Optional[Decimal] = Field(None, ge=0, description="Maximum fiat amount (None = unbounded)")
    steps: list[Step] = Field(..., min_length=1)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def corridor(self) -> CorridorKey:
        return CorridorKey(
            crypto_currency=self.crypto_currency,
            blockchain=self.blockchain,
            target_currency=self.target_currency,
        )

    def to_payload(self) -> dict[str, Any]:
        """Convert to the camelCase create/update payload (no id or timestamps).

        Fees and limits are JSON numbers, unbounded limits are null.
        """
        payload = self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"id", "created_at", "updated_at"},
        )
        for name in PAYLOAD_NUMBER_FIELDS:
            payload[to_camel(name)] = _json_number(getattr(self, name))
        return payload


class ValidationResult(BaseModel):
    """Outcome of validating a draft.

    ``definition`` is only set when there are no issues at all.
    """

    issues: list[ValidationIssue] = Field(default_factory=list)
    definition: Optional[PipelineDefinition] = None

    @property
    def ok(self) -> bool:
        return not self.issues and self.definition is not None

    @property
    def errors(self) -> dict[str, str]:
        return issues_to_map(self.issues)
