"""Service layer for corridor flow authoring."""

from corridorflow.services.flow_editor import FlowDefinitionEditor, SaveResult

__all__ = ["FlowDefinitionEditor", "SaveResult"]
