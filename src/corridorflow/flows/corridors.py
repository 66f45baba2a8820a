"""Corridor registry: which corridors exist and whether they have a flow.

A corridor is every enabled (crypto asset, blockchain) pair crossed with
every target fiat currency. Its status is:

- UNSUPPORTED: explicitly marked unsupported (with an optional reason)
- DEFINED: has an enabled flow definition
- MISSING: anything else (a disabled definition is still reported)
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from corridorflow.flows.contracts import CorridorKey, PipelineDefinition
from corridorflow.flows.steps import BlockchainNetwork, CryptoCurrency, PaymentMethod, TargetCurrency

logger = logging.getLogger(__name__)


class CorridorStatus(str, Enum):
    """Status of a corridor."""

    DEFINED = "DEFINED"
    MISSING = "MISSING"
    UNSUPPORTED = "UNSUPPORTED"


class CorridorEntry(BaseModel):
    """One corridor as shown to operators."""

    corridor: CorridorKey
    status: CorridorStatus
    definition: Optional[PipelineDefinition] = Field(None, description="Existing definition, if any")
    unsupported_reason: Optional[str] = None

    @property
    def definition_id(self) -> Optional[str]:
        return self.definition.id if self.definition else None

    @property
    def payout_provider(self) -> Optional[PaymentMethod]:
        return self.definition.payout_provider if self.definition else None

    @property
    def updated_at(self) -> Optional[datetime]:
        return self.definition.updated_at if self.definition else None

    @property
    def is_supported(self) -> bool:
        return self.status != CorridorStatus.UNSUPPORTED


class CorridorSummary(BaseModel):
    total: int = 0
    defined: int = 0
    missing: int = 0
    unsupported: int = 0


class CorridorList(BaseModel):
    corridors: list[CorridorEntry] = Field(default_factory=list)
    summary: CorridorSummary = Field(default_factory=CorridorSummary)


class CorridorRegistry(ABC):
    """Source of corridors and their existing definitions."""

    @abstractmethod
    def list_corridors(self) -> CorridorList:
        """All corridors with status and summary counts."""
        pass

    def get_corridor(self, corridor: CorridorKey) -> Optional[CorridorEntry]:
        """Look up a single corridor, None if it is not offered at all."""
        for entry in self.list_corridors().corridors:
            if entry.corridor == corridor:
                return entry
        return None

    def record_definition(self, definition: PipelineDefinition) -> None:
        """Called after a definition is saved. Registries that cache may override."""
        pass


class InMemoryCorridorRegistry(CorridorRegistry):
    """Registry computed from enabled assets, definitions and overrides."""

    def __init__(
        self,
        enabled_assets: Iterable[tuple[CryptoCurrency, BlockchainNetwork]],
        definitions: Iterable[PipelineDefinition] = (),
        target_currencies: Optional[Iterable[TargetCurrency]] = None,
    ):
        self.enabled_assets = list(enabled_assets)
        self.target_currencies = list(target_currencies or TargetCurrency)
        self._definitions: dict[str, PipelineDefinition] = {}
        self._unsupported: dict[str, Optional[str]] = {}
        for definition in definitions:
            self.record_definition(definition)

    def record_definition(self, definition: PipelineDefinition) -> None:
        self._definitions[definition.corridor.key] = definition

    def set_support(self, corridor: CorridorKey, supported: bool, reason: Optional[str] = None) -> CorridorEntry:
        """Mark a corridor supported or unsupported and return its new entry."""
        if self.get_corridor(corridor) is None:
            raise LookupError(f"Corridor {corridor} is not offered")

        if supported:
            self._unsupported.pop(corridor.key, None)
            logger.info(f"Corridor {corridor} marked supported")
        else:
            self._unsupported[corridor.key] = (reason or "").strip() or None
            logger.info(f"Corridor {corridor} marked unsupported: {reason or '(no reason)'}")

        return self._entry(corridor)

    def list_corridors(self) -> CorridorList:
        corridors: list[CorridorEntry] = []

        for crypto_currency, blockchain in self.enabled_assets:
            for target_currency in self.target_currencies:
                key = CorridorKey(
                    crypto_currency=crypto_currency,
                    blockchain=blockchain,
                    target_currency=target_currency,
                )
                corridors.append(self._entry(key))

        unsupported = sum(1 for c in corridors if c.status == CorridorStatus.UNSUPPORTED)
        defined = sum(1 for c in corridors if c.status == CorridorStatus.DEFINED)
        summary = CorridorSummary(
            total=len(corridors),
            defined=defined,
            missing=len(corridors) - unsupported - defined,
            unsupported=unsupported,
        )
        return CorridorList(corridors=corridors, summary=summary)

    def _entry(self, key: CorridorKey) -> CorridorEntry:
        if key.key in self._unsupported:
            return CorridorEntry(
                corridor=key,
                status=CorridorStatus.UNSUPPORTED,
                unsupported_reason=self._unsupported[key.key],
            )

        definition = self._definitions.get(key.key)
        if definition is not None and definition.enabled:
            return CorridorEntry(corridor=key, status=CorridorStatus.DEFINED, definition=definition)

        return CorridorEntry(corridor=key, status=CorridorStatus.MISSING, definition=definition)
