"""Flow definition editor service.

Flow:
1. Operator opens a corridor -> existing definition or a seeded draft
2. Edits go through the DraftSession (cascade + dirty tracking)
3. Save runs field and pipeline validation; only a clean draft is
   normalized and handed to the store (create without id, update with)
4. The stored definition becomes the session's new baseline
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from corridorflow.config import Settings, get_settings
from corridorflow.flows.builder import FlowDefinitionBuilder, SystemStep
from corridorflow.flows.contracts import CorridorKey, PipelineDefinition, ValidationResult
from corridorflow.flows.corridors import CorridorRegistry, CorridorStatus
from corridorflow.flows.drafts import DraftSession
from corridorflow.flows.errors import CorridorUnsupportedError
from corridorflow.flows.pipeline_validator import VenueRules, validate_draft
from corridorflow.flows.provider_defaults import ProviderDefaultsTable, seed_draft
from corridorflow.flows.store import FlowDefinitionStore

logger = logging.getLogger(__name__)


class SaveResult(BaseModel):
    """Outcome of a save attempt."""

    success: bool = Field(..., description="Whether the definition was persisted")
    created: bool = Field(default=False, description="True for a create, False for an update")
    definition: Optional[PipelineDefinition] = Field(None, description="Stored definition")
    errors: dict[str, str] = Field(default_factory=dict, description="Validation errors by key")


class FlowDefinitionEditor:
    """Opens, validates and saves flow definitions for corridors."""

    def __init__(
        self,
        store: FlowDefinitionStore,
        registry: CorridorRegistry,
        table: ProviderDefaultsTable,
        rules: Optional[VenueRules] = None,
    ):
        self.store = store
        self.registry = registry
        self.table = table
        self.rules = rules or VenueRules()
        self.builder = FlowDefinitionBuilder(table, self.rules)

    @classmethod
    def from_settings(
        cls,
        store: FlowDefinitionStore,
        registry: CorridorRegistry,
        settings: Optional[Settings] = None,
    ) -> "FlowDefinitionEditor":
        settings = settings or get_settings()
        return cls(store, registry, settings.load_provider_table(), settings.venue_rules())

    def open_corridor(self, corridor: CorridorKey) -> DraftSession:
        """Start an editing session for a corridor.

        Raises:
            CorridorUnsupportedError: If the corridor is unsupported or not offered
        """
        entry = self.registry.get_corridor(corridor)
        if entry is None:
            raise CorridorUnsupportedError(corridor.key, "not offered")
        if entry.status == CorridorStatus.UNSUPPORTED:
            raise CorridorUnsupportedError(corridor.key, entry.unsupported_reason)

        if entry.definition is not None:
            logger.info(f"Editing flow {entry.definition.id} for {corridor}")
            return DraftSession.from_definition(entry.definition, self.table)

        logger.info(f"Seeding new flow draft for {corridor}")
        return DraftSession(seed_draft(corridor, self.table), self.table)

    def validate(self, session: DraftSession) -> ValidationResult:
        """Validate the session's current draft. Safe to call on every edit."""
        return validate_draft(session.draft, self.rules)

    async def save(self, session: DraftSession) -> SaveResult:
        """Validate and persist the session's draft.

        Invalid drafts are never sent to the store; their errors are returned.
        Store errors (conflicts, unknown ids) propagate to the caller.
        """
        result = self.validate(session)
        if not result.ok:
            return SaveResult(success=False, errors=result.errors)

        created = session.is_new
        stored = await self.store.save(result.definition)
        self.registry.record_definition(stored)
        session.mark_saved(stored)

        logger.info(
            f"{'Created' if created else 'Updated'} flow '{stored.name}' "
            f"({stored.id}) for {stored.corridor}"
        )
        return SaveResult(success=True, created=created, definition=stored)

    def build_plan(self, definition: PipelineDefinition) -> list[SystemStep]:
        """Orchestrator system steps for a saved definition."""
        return self.builder.build(definition)
