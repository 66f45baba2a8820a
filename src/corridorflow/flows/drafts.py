"""Draft dirty tracking and the per-corridor editing session.

A DraftSession owns exactly one draft and the baseline it was loaded from.
Edits replace the draft; saving replaces both draft and baseline with the
confirmed definition; discarding restores the baseline.
"""

import logging
from typing import Literal, Optional, Union

from corridorflow.flows.contracts import PipelineDefinition, PipelineDraft
from corridorflow.flows.normalizer import draft_from_definition
from corridorflow.flows.provider_defaults import (
    ProviderDefaultsTable,
    ProviderField,
    on_provider_change,
)
from corridorflow.flows.steps import PaymentMethod, PricingProvider, Step

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "name",
        "enabled",
        "exchange_fee_pct",
        "fixed_fee",
        "min_amount",
        "max_amount",
    }
)


def _snapshot(draft: PipelineDraft) -> dict:
    return draft.model_dump(mode="json")


def is_dirty(draft: Optional[PipelineDraft], baseline: Optional[PipelineDraft]) -> bool:
    """Check if a draft differs from its last saved baseline.

    Compares the serialized drafts field by field, steps in order. Values
    are compared verbatim ("5000" and "5000.0" differ), and a draft with no
    baseline counts as dirty.
    """
    if draft is None:
        return False
    if baseline is None:
        return True
    return _snapshot(draft) != _snapshot(baseline)


class DraftSession:
    """Editing state for one corridor's flow definition."""

    def __init__(
        self,
        draft: PipelineDraft,
        table: ProviderDefaultsTable,
        baseline: Optional[PipelineDraft] = None,
    ):
        self.draft = draft
        self.baseline = baseline if baseline is not None else draft.model_copy(deep=True)
        self.table = table

    @classmethod
    def from_definition(
        cls, definition: PipelineDefinition, table: ProviderDefaultsTable
    ) -> "DraftSession":
        return cls(draft_from_definition(definition), table)

    @property
    def is_dirty(self) -> bool:
        return is_dirty(self.draft, self.baseline)

    @property
    def is_new(self) -> bool:
        return self.draft.id is None

    def update_field(self, field: str, value: Union[str, bool]) -> PipelineDraft:
        """Set one scalar field. Provider fields go through set_provider()."""
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field '{field}' is not editable")
        return self._replace(**{field: value})

    def set_provider(
        self,
        field: ProviderField,
        provider: Union[PaymentMethod, PricingProvider],
    ) -> PipelineDraft:
        self.draft = on_provider_change(self.draft, field, provider, self.table)
        return self.draft

    def set_steps(self, steps: list[Step]) -> PipelineDraft:
        return self._replace(steps=list(steps))

    def _replace(self, **updates) -> PipelineDraft:
        """Rebuild the draft through model validation.

        Raises:
            pydantic.ValidationError: If an edit does not fit the draft model
        """
        values = self.draft.model_dump()
        values.update(updates)
        self.draft = PipelineDraft.model_validate(values)
        return self.draft

    def add_step(self, step: Step) -> PipelineDraft:
        return self.set_steps([*self.draft.steps, step])

    def replace_step(self, index: int, step: Step) -> PipelineDraft:
        steps = list(self.draft.steps)
        steps[index] = step
        return self.set_steps(steps)

    def remove_step(self, index: int) -> PipelineDraft:
        steps = [step for idx, step in enumerate(self.draft.steps) if idx != index]
        return self.set_steps(steps)

    def move_step(self, index: int, direction: Literal["up", "down"]) -> PipelineDraft:
        """Swap a step with its neighbour; out-of-range moves are ignored."""
        target = index - 1 if direction == "up" else index + 1
        steps = list(self.draft.steps)
        if not (0 <= index < len(steps)) or not (0 <= target < len(steps)):
            return self.draft
        steps[index], steps[target] = steps[target], steps[index]
        return self.set_steps(steps)

    def discard(self) -> PipelineDraft:
        """Throw away edits and return to the baseline."""
        self.draft = self.baseline.model_copy(deep=True)
        return self.draft

    def mark_saved(self, definition: PipelineDefinition) -> PipelineDraft:
        """Adopt a confirmed definition as both the draft and the baseline."""
        self.draft = draft_from_definition(definition)
        self.baseline = self.draft.model_copy(deep=True)
        logger.debug(f"Baseline reset for {self.draft.corridor} (id={self.draft.id})")
        return self.draft
