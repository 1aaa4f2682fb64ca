from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Union
from app.config import REPLICATE_WEB_BASE
from app.models.schemas import (
    InputSchemaEntry,
    ModelReference,
    PropertySelection,
    VersionDescriptor,
    coerce_type,
)
from app.services.errors import RemoteServiceError
from app.obs.decorators import traced
from app.obs.logging_setup import get_logger

logger = get_logger(__name__)

Primitive = Union[bool, int, float, str]

_ZERO_VALUES: Dict[str, Primitive] = {
    "boolean": False,
    "number": 0,
    "string": "",
}

def _input_properties(schema: Mapping[str, Any]) -> Mapping[str, Any]:
    # Accept both the version document and its bare openapi_schema
    openapi = schema.get("openapi_schema", schema) or {}
    components = openapi.get("components") or {}
    input_schema = (components.get("schemas") or {}).get("Input") or {}
    properties = input_schema.get("properties")
    return properties if isinstance(properties, Mapping) else {}

def list_properties(schema: Mapping[str, Any]) -> List[InputSchemaEntry]:
    """List the input properties a model version declares, in schema order."""
    entries = []
    for key, definition in _input_properties(schema).items():
        definition = definition if isinstance(definition, Mapping) else {}
        declared_type = definition.get("type") or "string"
        entries.append(InputSchemaEntry(
            key=key,
            title=definition.get("title") or key,
            description=definition.get("description") or "",
            declared_type=str(declared_type),
            coerced_type=coerce_type(declared_type),
        ))
    return entries

def resolve_value(selection: PropertySelection) -> Primitive:
    """Return the value held in the slot matching the selection's type."""
    if selection.type == "boolean":
        value = selection.boolean_value
    elif selection.type == "number":
        value = selection.number_value
    else:
        value = selection.string_value
    return _ZERO_VALUES[selection.type] if value is None else value

def build_input(selections: Iterable[PropertySelection]) -> Dict[str, Primitive]:
    """Flatten selections into the ``input`` object of a prediction request.

    Selections without a key are skipped; a repeated key keeps the last value.
    """
    inputs: Dict[str, Primitive] = {}
    for selection in selections:
        if not selection.key:
            continue
        inputs[selection.key] = resolve_value(selection)
    return inputs

@traced("schema.resolve_input_schema")
async def resolve_input_schema(client, model_ref: ModelReference) -> List[InputSchemaEntry]:
    """Fetch a model version and list its declared inputs."""
    document = await client.get_model_version(model_ref.name, model_ref.version)
    entries = list_properties(document)
    logger.info("Resolved input schema",
                model=model_ref.name,
                version=model_ref.version,
                property_count=len(entries))
    return entries

def _created_at(raw: Mapping[str, Any]) -> datetime:
    value = raw.get("created_at")
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return datetime.min.replace(tzinfo=timezone.utc)

def _descriptor(model_name: str, raw: Any) -> VersionDescriptor:
    if not isinstance(raw, Mapping):
        raise RemoteServiceError("malformed version entry from remote service")
    try:
        return VersionDescriptor(
            id=raw["id"],
            created_at=_created_at(raw),
            cog_version=raw.get("cog_version"),
            url=f"{REPLICATE_WEB_BASE}/{model_name}/versions/{raw['id']}",
        )
    except (ValueError, TypeError) as e:
        # ValidationError is a ValueError
        raise RemoteServiceError("malformed version entry from remote service", cause=e) from e

def sort_and_filter_versions(
    model_name: str,
    versions: Iterable[Mapping[str, Any]],
    filter_substring: str = "",
) -> List[VersionDescriptor]:
    """Newest first by creation time, keeping only ids containing the filter."""
    descriptors = [
        _descriptor(model_name, raw)
        for raw in versions
        if not isinstance(raw, Mapping) or raw.get("id")
    ]
    # sorted() is stable, so equal timestamps keep their input order
    descriptors = sorted(descriptors, key=lambda d: d.created_at, reverse=True)
    return [d for d in descriptors if filter_substring in d.id]

@traced("schema.list_versions")
async def list_versions(client, model_name: str, filter_substring: str = "") -> List[VersionDescriptor]:
    """List a model's versions, newest first, filtered by id substring."""
    raw_versions = await client.list_model_versions(model_name)
    return sort_and_filter_versions(model_name, raw_versions, filter_substring or "")
