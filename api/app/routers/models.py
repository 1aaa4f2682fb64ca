from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query
from app.deps.replicate import get_replicate_client
from app.models.schemas import (
    ModelReference,
    PropertyListResponse,
    PropertyOption,
    VersionListResponse,
    validate_model_name,
)
from app.services.errors import RemoteServiceError
from app.services.replicate_client import ReplicateClient
from app.services.schema_translator import list_versions, resolve_input_schema

router = APIRouter(prefix="/models", tags=["models"])

def _status_for(error: RemoteServiceError) -> int:
    # A missing model or version is the caller's problem, anything else is upstream
    return 404 if error.status_code == 404 else 502

@router.get("/{owner}/{name}/versions", response_model=VersionListResponse)
async def get_versions(
    owner: str,
    name: str,
    filter: str = Query("", description="Keep versions whose id contains this text"),
    client: ReplicateClient = Depends(get_replicate_client),
) -> VersionListResponse:
    """List model versions, newest first."""
    try:
        model_name = validate_model_name(f"{owner}/{name}")
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    try:
        versions = await list_versions(client, model_name, filter)
    except RemoteServiceError as e:
        raise HTTPException(status_code=_status_for(e), detail=e.to_dict()) from e
    return VersionListResponse(model=model_name, results=versions)

@router.get("/{owner}/{name}/versions/{version}/properties", response_model=PropertyListResponse)
async def get_properties(
    owner: str,
    name: str,
    version: str,
    client: ReplicateClient = Depends(get_replicate_client),
) -> PropertyListResponse:
    """List the inputs a model version accepts, as selectable options."""
    try:
        model_ref = ModelReference(name=f"{owner}/{name}", version=version)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    try:
        entries = await resolve_input_schema(client, model_ref)
    except RemoteServiceError as e:
        raise HTTPException(status_code=_status_for(e), detail=e.to_dict()) from e

    return PropertyListResponse(
        model=model_ref.name,
        version=model_ref.version,
        properties=[
            PropertyOption(
                name=entry.title,
                value=entry.option_value,
                description=entry.description,
                key=entry.key,
                type=entry.coerced_type,
                declared_type=entry.declared_type,
            )
            for entry in entries
        ],
    )
