"""Expand a validated flow definition into orchestrator system steps.

Business step -> system steps:

- PAYOUT           -> PAYOUT_SEND (+ AWAIT_PROVIDER_STATUS for async providers)
- MOVE_TO_EXCHANGE -> EXCHANGE_SEND, AWAIT_EXCHANGE_BALANCE
- CONVERT          -> EXCHANGE_CONVERT
- TRANSFER_VENUE   -> TREASURY_TRANSFER, AWAIT_EXCHANGE_BALANCE

The builder never executes anything; the plan is consumed by the runtime
orchestrator.
"""

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from corridorflow.flows.contracts import PipelineDefinition
from corridorflow.flows.errors import FlowDefinitionBuilderError, UnknownStepError
from corridorflow.flows.pipeline_validator import VenueRules, validate_steps
from corridorflow.flows.provider_defaults import ProviderDefaultsTable
from corridorflow.flows.steps import (
    ConvertStep,
    MoveToExchangeStep,
    PaymentMethod,
    PayoutStep,
    TargetCurrency,
    TransferVenueStep,
    Venue,
)

logger = logging.getLogger(__name__)


class FlowStepType(str, Enum):
    """Orchestrator step types."""

    PAYOUT_SEND = "PAYOUT_SEND"
    AWAIT_PROVIDER_STATUS = "AWAIT_PROVIDER_STATUS"
    EXCHANGE_SEND = "EXCHANGE_SEND"
    AWAIT_EXCHANGE_BALANCE = "AWAIT_EXCHANGE_BALANCE"
    EXCHANGE_CONVERT = "EXCHANGE_CONVERT"
    TREASURY_TRANSFER = "TREASURY_TRANSFER"


class CompletionPolicy(str, Enum):
    """How the orchestrator knows a step finished."""

    SYNC = "SYNC"
    AWAIT_EVENT = "AWAIT_EVENT"


class SystemStep(BaseModel):
    """One orchestrator step in a flow plan."""

    step_order: int = Field(..., gt=0)
    step_type: FlowStepType
    completion_policy: CompletionPolicy
    config: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to the orchestrator's camelCase shape."""
        return {
            "stepOrder": self.step_order,
            "stepType": self.step_type.value,
            "completionPolicy": self.completion_policy.value,
            "config": dict(self.config),
        }


def venue_provider(venue: Venue) -> str:
    """Provider identifier the orchestrator uses for a venue."""
    return venue.value.lower()


def _step(step_type: FlowStepType, policy: CompletionPolicy, **config: Any) -> SystemStep:
    # step_order is renumbered once the whole plan is assembled
    return SystemStep(step_order=1, step_type=step_type, completion_policy=policy, config=config)


class FlowDefinitionBuilder:
    """Builds orchestrator plans from flow definitions."""

    def __init__(self, table: ProviderDefaultsTable, rules: Optional[VenueRules] = None):
        self.table = table
        self.rules = rules or VenueRules()

    def build(self, definition: PipelineDefinition) -> list[SystemStep]:
        """Expand a definition into ordered system steps.

        Raises:
            FlowDefinitionBuilderError: If the step sequence is not valid
        """
        issues = validate_steps(
            definition.steps,
            definition.crypto_currency,
            definition.target_currency,
            self.rules,
        )
        if issues:
            first = issues[0]
            raise FlowDefinitionBuilderError(f"{first.key}: {first.message}")

        plan = self._payout_steps(definition.payout_provider)
        for step in definition.steps[1:]:
            plan.extend(self._expand(step, definition.target_currency))

        ordered = [
            step.model_copy(update={"step_order": index})
            for index, step in enumerate(plan, start=1)
        ]
        logger.info(
            f"Built {len(ordered)} system steps for {definition.corridor} "
            f"from {len(definition.steps)} business steps"
        )
        return ordered

    def _payout_steps(self, payout_provider: PaymentMethod) -> list[SystemStep]:
        steps = [
            _step(
                FlowStepType.PAYOUT_SEND,
                CompletionPolicy.SYNC,
                paymentMethod=payout_provider.value,
            )
        ]
        if self.table.payout_defaults(payout_provider).is_async:
            steps.append(_step(FlowStepType.AWAIT_PROVIDER_STATUS, CompletionPolicy.AWAIT_EVENT))
        return steps

    def _expand(self, step: object, target_currency: TargetCurrency) -> list[SystemStep]:
        if isinstance(step, MoveToExchangeStep):
            provider = venue_provider(step.venue)
            return [
                _step(FlowStepType.EXCHANGE_SEND, CompletionPolicy.SYNC, provider=provider),
                _step(FlowStepType.AWAIT_EXCHANGE_BALANCE, CompletionPolicy.AWAIT_EVENT, provider=provider),
            ]

        if isinstance(step, ConvertStep):
            provider = venue_provider(step.venue)
            if step.venue == self.rules.offramp_venue:
                return [
                    _step(
                        FlowStepType.EXCHANGE_CONVERT,
                        CompletionPolicy.SYNC,
                        provider=provider,
                        sourceCurrency=step.from_asset.value,
                        targetCurrency=step.to_asset.value,
                    )
                ]
            return [
                _step(
                    FlowStepType.EXCHANGE_CONVERT,
                    CompletionPolicy.SYNC,
                    provider=provider,
                    side="SELL",
                    symbol=f"{step.from_asset.value}{step.to_asset.value}",
                )
            ]

        if isinstance(step, TransferVenueStep):
            destination = venue_provider(step.to_venue)
            return [
                _step(
                    FlowStepType.TREASURY_TRANSFER,
                    CompletionPolicy.SYNC,
                    asset=step.asset.value,
                    sourceProvider=venue_provider(step.from_venue),
                    destinationProvider=destination,
                    destinationTargetCurrency=target_currency.value,
                ),
                _step(FlowStepType.AWAIT_EXCHANGE_BALANCE, CompletionPolicy.AWAIT_EVENT, provider=destination),
            ]

        if isinstance(step, PayoutStep):
            raise FlowDefinitionBuilderError("Unexpected payout step outside first position")

        raise UnknownStepError(step)
