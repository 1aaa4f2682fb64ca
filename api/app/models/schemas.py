from __future__ import annotations
import re
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

CoercedType = Literal["number", "boolean", "string"]

_NUMERIC_TYPES = ("integer", "number")

def coerce_type(declared_type: Any) -> CoercedType:
    """Map a declared schema type onto one of the three accepted value kinds."""
    if declared_type in _NUMERIC_TYPES:
        return "number"
    if declared_type == "boolean":
        return "boolean"
    return "string"

_MODEL_NAME_RE = re.compile(r"^[A-Za-z0-9][\w.-]*/[A-Za-z0-9][\w.-]*$")

def validate_model_name(value: str) -> str:
    value = value.strip()
    if not _MODEL_NAME_RE.match(value):
        raise ValueError("model name must look like 'owner/model-name'")
    return value

ModelName = Annotated[str, AfterValidator(validate_model_name)]

class ModelReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: ModelName = Field(..., description="Model in owner/model-name form")
    version: str = Field(..., min_length=1, description="Opaque version identifier")

class InputSchemaEntry(BaseModel):
    """One input property declared by a model version."""

    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    description: str = ""
    declared_type: str = "string"
    coerced_type: CoercedType = "string"

    @property
    def option_value(self) -> str:
        return f"{self.key}|{self.coerced_type}"

class PropertySelection(BaseModel):
    """A host-configured input: the key, its coerced type and one filled value slot.

    ``key`` may also be given in the ``"name|type"`` form produced by
    ``InputSchemaEntry.option_value``; the type part is used when ``type`` is
    not set explicitly.
    """

    key: str = ""
    type: CoercedType = "string"
    boolean_value: Optional[bool] = None
    number_value: Optional[Union[int, float]] = None
    string_value: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def split_option_value(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        key = data.get("key")
        if isinstance(key, str) and "|" in key:
            name, _, type_part = key.partition("|")
            data = {**data, "key": name}
            if not data.get("type") and type_part:
                data["type"] = coerce_type(type_part)
        return data

class VersionDescriptor(BaseModel):
    id: str
    created_at: datetime
    cog_version: Optional[str] = None
    url: Optional[str] = None

class PropertyOption(BaseModel):
    name: str
    value: str
    description: str = ""
    key: str
    type: CoercedType
    declared_type: str

class InferenceItem(BaseModel):
    properties: List[PropertySelection] = Field(default_factory=list)

class RunInferenceRequest(BaseModel):
    model: ModelName = Field(..., description="Model in owner/model-name form")
    version: str = Field(..., min_length=1)
    items: List[InferenceItem] = Field(default_factory=lambda: [InferenceItem()])

class ItemResult(BaseModel):
    item_index: int
    payload: Dict[str, Any]

class RunInferenceResponse(BaseModel):
    model: str
    version: str
    results: List[ItemResult]

class VersionListResponse(BaseModel):
    model: str
    results: List[VersionDescriptor]

class PropertyListResponse(BaseModel):
    model: str
    version: str
    properties: List[PropertyOption]
