"""Abstract interpreter for flow definition step sequences.

Walks the business steps once, left to right, simulating where the funds
sit (hot wallet or a venue) and which asset they currently are. Each step's
preconditions are checked against that simulated state and any violation
is recorded against the step's index.

Rules:
1. The first step must be PAYOUT and no other step may be PAYOUT
2. MOVE_TO_EXCHANGE only from the hot wallet
3. CONVERT only at the venue holding the funds, from the held asset
4. The off-ramp venue only converts crypto into the corridor fiat
5. TRANSFER_VENUE only out of an allowed source venue holding the funds

The state always advances to what a step declares, even when the step
itself is invalid, so one bad step does not flag every step after it.
Nothing here backtracks and nothing raises for operator mistakes.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from corridorflow.flows.contracts import PipelineDraft, ValidationResult
from corridorflow.flows.errors import ErrorKind, UnknownStepError, ValidationIssue, step_key
from corridorflow.flows.field_validator import validate_fields
from corridorflow.flows.normalizer import normalize_draft
from corridorflow.flows.steps import (
    ConvertStep,
    CryptoCurrency,
    MoveToExchangeStep,
    PayoutStep,
    SupportedCurrency,
    TargetCurrency,
    TransferVenueStep,
    Venue,
    is_fiat,
)

logger = logging.getLogger(__name__)

HOT_WALLET = "HOT_WALLET"

Location = Union[Venue, str]


@dataclass(frozen=True)
class VenueRules:
    """Venue reference data the validator checks against."""

    offramp_venue: Venue = Venue.TRANSFERO
    transfer_sources: frozenset[Venue] = field(default_factory=lambda: frozenset({Venue.BINANCE}))

    def describe_transfer_sources(self) -> str:
        return ", ".join(sorted(venue.value for venue in self.transfer_sources)) or "no venue"


@dataclass(frozen=True)
class ExecutionState:
    """Simulated position of the funds between steps."""

    location: Location
    asset: SupportedCurrency

    @classmethod
    def initial(cls, crypto_currency: CryptoCurrency) -> "ExecutionState":
        return cls(location=HOT_WALLET, asset=SupportedCurrency(crypto_currency.value))

    @property
    def in_hot_wallet(self) -> bool:
        return self.location == HOT_WALLET

    def moved_to(self, location: Location) -> "ExecutionState":
        return ExecutionState(location=location, asset=self.asset)

    def converted_to(self, asset: SupportedCurrency) -> "ExecutionState":
        return ExecutionState(location=self.location, asset=asset)


class PipelineValidator:
    """Checks a step sequence for one corridor."""

    def __init__(
        self,
        crypto_currency: CryptoCurrency,
        target_currency: TargetCurrency,
        rules: Optional[VenueRules] = None,
    ):
        self.crypto_currency = crypto_currency
        self.target_currency = target_currency
        self.rules = rules or VenueRules()

    def validate(self, steps: Sequence[object]) -> list[ValidationIssue]:
        """Return every issue found in one pass over the steps."""
        issues: list[ValidationIssue] = []

        if not steps:
            issues.append(
                ValidationIssue("steps", ErrorKind.SEQUENCE_SHAPE, "At least one step is required.")
            )
            return issues

        if not isinstance(steps[0], PayoutStep):
            issues.append(
                ValidationIssue("steps", ErrorKind.SEQUENCE_SHAPE, "Flow must start with a payout step")
            )

        state = ExecutionState.initial(self.crypto_currency)
        for index, step in enumerate(steps):
            state = self._check_step(index, step, state, issues)

        return issues

    def _check_step(
        self,
        index: int,
        step: object,
        state: ExecutionState,
        issues: list[ValidationIssue],
    ) -> ExecutionState:
        key = step_key(index)

        def shape(message: str) -> None:
            issues.append(ValidationIssue(key, ErrorKind.SEQUENCE_SHAPE, message))

        def transition(message: str) -> None:
            issues.append(ValidationIssue(key, ErrorKind.STEP_TRANSITION, message))

        if index == 0 and not isinstance(step, PayoutStep):
            shape("First step must be payout")

        if isinstance(step, PayoutStep):
            if index > 0:
                shape("Payout can only be first")
            return state

        if isinstance(step, MoveToExchangeStep):
            if not state.in_hot_wallet:
                transition("Funds must be in hot wallet to move to an exchange")
            return state.moved_to(step.venue)

        if isinstance(step, ConvertStep):
            self._check_convert(step, state, transition)
            return state.converted_to(step.to_asset)

        if isinstance(step, TransferVenueStep):
            if state.location != step.from_venue:
                transition(f"Transfer requires funds at {step.from_venue.value}")
            if step.from_venue == step.to_venue:
                transition("Transfer venues must be different")
            if step.from_venue not in self.rules.transfer_sources:
                transition(
                    f"Only {self.rules.describe_transfer_sources()} can be used as a transfer source today"
                )
            if step.asset != state.asset:
                transition(f"Transfer asset must be {state.asset.value}")
            return state.moved_to(step.to_venue)

        raise UnknownStepError(step)

    def _check_convert(self, step: ConvertStep, state: ExecutionState, transition) -> None:
        if state.location != step.venue:
            transition(f"Conversion requires funds at {step.venue.value}")
        if state.asset != step.from_asset:
            transition(f"Conversion source asset must be {state.asset.value}")
        if step.from_asset == step.to_asset:
            transition("Conversion assets must be different")

        if step.venue != self.rules.offramp_venue:
            return

        if not is_fiat(step.to_asset):
            transition("Off-ramp conversions must end in a fiat currency")
        elif step.to_asset.value != self.target_currency.value:
            transition(
                f"Off-ramp conversion must target the corridor fiat currency {self.target_currency.value}"
            )
        if is_fiat(step.from_asset):
            transition("Off-ramp conversion source must be a crypto asset")


def validate_steps(
    steps: Sequence[object],
    crypto_currency: CryptoCurrency,
    target_currency: TargetCurrency,
    rules: Optional[VenueRules] = None,
) -> list[ValidationIssue]:
    """Validate a step sequence against a corridor's source and target assets."""
    return PipelineValidator(crypto_currency, target_currency, rules).validate(steps)


def validate_draft(draft: PipelineDraft, rules: Optional[VenueRules] = None) -> ValidationResult:
    """Run field and pipeline validation and normalize the draft if clean."""
    issues = validate_fields(draft)
    issues.extend(
        validate_steps(draft.steps, draft.crypto_currency, draft.target_currency, rules)
    )

    if issues:
        logger.info(
            "Flow draft for %s rejected: %s",
            draft.corridor,
            ", ".join(sorted({issue.key for issue in issues})),
        )
        return ValidationResult(issues=issues)

    return ValidationResult(definition=normalize_draft(draft))
