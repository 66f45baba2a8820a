"""String to Decimal coercion for draft fields.

parse_number() answers "is this numeric" without raising. The strict
helpers used to build the persisted payload raise DraftNormalizationError
for non-blank garbage instead of quietly turning it into 0 or None.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from corridorflow.flows.contracts import PipelineDefinition, PipelineDraft
from corridorflow.flows.errors import DraftNormalizationError

logger = logging.getLogger(__name__)


def parse_number(value: str) -> Optional[Decimal]:
    """Parse a form value as a finite Decimal.

    Returns None for blank, unparsable, NaN or infinite input.
    """
    text = value.strip()
    # Decimal() accepts digit separators, form input should not
    if not text or "_" in text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def is_blank(value: str) -> bool:
    return not value.strip()


def is_numeric(value: str) -> bool:
    """Check if a non-blank value parses as a finite number."""
    return parse_number(value) is not None


def parse_optional_amount(value: str, field: str = "amount") -> Optional[Decimal]:
    """Parse an optional bound: blank means unbounded (None)."""
    if is_blank(value):
        return None
    number = parse_number(value)
    if number is None:
        raise DraftNormalizationError(field, value)
    return number


def parse_fee(value: str, fallback: Decimal = Decimal("0"), field: str = "fee") -> Decimal:
    """Parse a fee field: blank falls back to the default."""
    if is_blank(value):
        return fallback
    number = parse_number(value)
    if number is None:
        raise DraftNormalizationError(field, value)
    return number


def format_number(value: Optional[Decimal]) -> str:
    """Render a Decimal the way the form shows it ("" for None)."""
    if value is None:
        return ""
    return format(value, "f")


def normalize_draft(draft: PipelineDraft) -> PipelineDefinition:
    """Build the persistable definition from an already-validated draft.

    Raises:
        DraftNormalizationError: If a numeric field is not a number
    """
    definition = PipelineDefinition(
        id=draft.id,
        crypto_currency=draft.crypto_currency,
        blockchain=draft.blockchain,
        target_currency=draft.target_currency,
        name=draft.name.strip(),
        enabled=draft.enabled,
        payout_provider=draft.payout_provider,
        pricing_provider=draft.pricing_provider,
        exchange_fee_pct=parse_fee(draft.exchange_fee_pct, field="exchangeFeePct"),
        fixed_fee=parse_fee(draft.fixed_fee, field="fixedFee"),
        min_amount=parse_optional_amount(draft.min_amount, field="minAmount"),
        max_amount=parse_optional_amount(draft.max_amount, field="maxAmount"),
        steps=list(draft.steps),
    )
    logger.debug(f"Normalized draft for {definition.corridor}: {definition.name}")
    return definition


def draft_from_definition(definition: PipelineDefinition) -> PipelineDraft:
    """Turn a saved definition back into an editable draft."""
    return PipelineDraft(
        id=definition.id,
        crypto_currency=definition.crypto_currency,
        blockchain=definition.blockchain,
        target_currency=definition.target_currency,
        name=definition.name,
        enabled=definition.enabled,
        payout_provider=definition.payout_provider,
        pricing_provider=definition.pricing_provider,
        exchange_fee_pct=format_number(definition.exchange_fee_pct),
        fixed_fee=format_number(definition.fixed_fee),
        min_amount=format_number(definition.min_amount),
        max_amount=format_number(definition.max_amount),
        steps=list(definition.steps),
    )
