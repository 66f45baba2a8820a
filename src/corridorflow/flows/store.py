"""Persistence boundary for flow definitions.

The validation core never talks to storage itself: the editor hands a
normalized PipelineDefinition to a FlowDefinitionStore, which creates it
when it has no id and updates it otherwise.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from corridorflow.flows.contracts import PipelineDefinition
from corridorflow.flows.errors import FlowDefinitionConflictError, FlowDefinitionNotFoundError

logger = logging.getLogger(__name__)


class FlowDefinitionStore(ABC):
    """Abstract store for flow definitions."""

    @abstractmethod
    async def list_definitions(self) -> list[PipelineDefinition]:
        """All definitions, newest first."""
        pass

    @abstractmethod
    async def get(self, definition_id: str) -> Optional[PipelineDefinition]:
        pass

    @abstractmethod
    async def create(self, definition: PipelineDefinition) -> PipelineDefinition:
        """
        Persist a new definition.

        Raises:
            FlowDefinitionConflictError: If the corridor already has a flow
        """
        pass

    @abstractmethod
    async def update(self, definition_id: str, definition: PipelineDefinition) -> PipelineDefinition:
        """
        Replace an existing definition.

        Raises:
            FlowDefinitionNotFoundError: If the id is unknown
            FlowDefinitionConflictError: If another flow owns the corridor
        """
        pass

    async def save(self, definition: PipelineDefinition) -> PipelineDefinition:
        """Create or update depending on whether the definition has an id."""
        if definition.id:
            return await self.update(definition.id, definition)
        return await self.create(definition)


class InMemoryFlowDefinitionStore(FlowDefinitionStore):
    """Dict-backed store enforcing one definition per corridor."""

    def __init__(self, definitions: Optional[list[PipelineDefinition]] = None):
        self._definitions: dict[str, PipelineDefinition] = {}
        for definition in definitions or []:
            if not definition.id:
                raise ValueError("Seeded definitions must have an id")
            self._definitions[definition.id] = definition

    def _owner_of(self, definition: PipelineDefinition) -> Optional[str]:
        key = definition.corridor.key
        for definition_id, existing in self._definitions.items():
            if existing.corridor.key == key:
                return definition_id
        return None

    async def list_definitions(self) -> list[PipelineDefinition]:
        return sorted(
            self._definitions.values(),
            key=lambda d: d.created_at or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )

    async def get(self, definition_id: str) -> Optional[PipelineDefinition]:
        return self._definitions.get(definition_id)

    async def create(self, definition: PipelineDefinition) -> PipelineDefinition:
        if self._owner_of(definition) is not None:
            logger.warning(f"Rejected duplicate flow for corridor {definition.corridor}")
            raise FlowDefinitionConflictError("A flow already exists for this corridor")

        now = datetime.now(timezone.utc)
        stored = definition.model_copy(
            update={
                "id": str(uuid.uuid4()),
                "name": definition.name.strip(),
                "created_at": now,
                "updated_at": now,
            },
            deep=True,
        )
        self._definitions[stored.id] = stored
        logger.info(f"Created flow definition {stored.id} for {stored.corridor}")
        return stored

    async def update(self, definition_id: str, definition: PipelineDefinition) -> PipelineDefinition:
        existing = self._definitions.get(definition_id)
        if existing is None:
            raise FlowDefinitionNotFoundError(definition_id)

        owner = self._owner_of(definition)
        if owner is not None and owner != definition_id:
            logger.warning(f"Rejected update of {definition_id}: corridor {definition.corridor} taken by {owner}")
            raise FlowDefinitionConflictError("A flow already exists for this corridor")

        stored = definition.model_copy(
            update={
                "id": definition_id,
                "name": definition.name.strip(),
                "created_at": existing.created_at,
                "updated_at": datetime.now(timezone.utc),
            },
            deep=True,
        )
        self._definitions[definition_id] = stored
        logger.info(f"Updated flow definition {definition_id} for {stored.corridor}")
        return stored
