"""
Data models and schemas.

Provides:
- Model, version and input schema descriptors
- Typed property selections
- Request/response models for the HTTP API
"""

from .schemas import (
    ModelReference,
    InputSchemaEntry,
    PropertySelection,
    VersionDescriptor,
    PropertyOption,
    InferenceItem,
    RunInferenceRequest,
    RunInferenceResponse,
    ItemResult,
    VersionListResponse,
    PropertyListResponse,
)

__all__ = [
    "ModelReference",
    "InputSchemaEntry",
    "PropertySelection",
    "VersionDescriptor",
    "PropertyOption",
    "InferenceItem",
    "RunInferenceRequest",
    "RunInferenceResponse",
    "ItemResult",
    "VersionListResponse",
    "PropertyListResponse"
]
