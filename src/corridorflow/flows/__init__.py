"""Flow definition authoring core.

Validates multi-step payment pipelines for currency corridors before they
are persisted:

- steps: business step variants and currency/venue enums
- pipeline_validator: abstract interpreter over the step sequence
- field_validator / normalizer: form field checks and Decimal coercion
- provider_defaults: provider reference data and the default cascade
- drafts: dirty tracking and the editing session
- corridors / store: registry and persistence boundaries
- builder: expansion into orchestrator system steps
"""

from corridorflow.flows.builder import FlowDefinitionBuilder, SystemStep
from corridorflow.flows.contracts import (
    CorridorKey,
    PipelineDefinition,
    PipelineDraft,
    ValidationResult,
)
from corridorflow.flows.drafts import DraftSession, is_dirty
from corridorflow.flows.errors import ErrorKind, FlowError, ValidationIssue
from corridorflow.flows.field_validator import validate_fields
from corridorflow.flows.pipeline_validator import VenueRules, validate_draft, validate_steps
from corridorflow.flows.provider_defaults import (
    ProviderDefaultsTable,
    default_provider_table,
    on_provider_change,
    seed_draft,
)
from corridorflow.flows.steps import (
    ConvertStep,
    MoveToExchangeStep,
    PayoutStep,
    TransferVenueStep,
)

__all__ = [
    # Steps
    "PayoutStep",
    "MoveToExchangeStep",
    "ConvertStep",
    "TransferVenueStep",
    # Contracts
    "CorridorKey",
    "PipelineDraft",
    "PipelineDefinition",
    "ValidationResult",
    "ValidationIssue",
    "ErrorKind",
    "FlowError",
    # Validation
    "VenueRules",
    "validate_draft",
    "validate_steps",
    "validate_fields",
    # Provider defaults
    "ProviderDefaultsTable",
    "default_provider_table",
    "on_provider_change",
    "seed_draft",
    # Editing
    "DraftSession",
    "is_dirty",
    # Plans
    "FlowDefinitionBuilder",
    "SystemStep",
]
