from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Any, List, Union


class ReferenceInput(BaseModel):
    table: str = Field(min_length=1)
    field: str = Field(min_length=1)


class FieldInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    type: Optional[str] = None
    length: Optional[Union[int, str]] = None
    primary: bool = False
    unique: bool = False
    nullable: Optional[bool] = None
    references: Optional[ReferenceInput] = None


class IndexInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    fields: List[str] = []


class ConstraintInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    name: Optional[str] = None
    definition: Optional[str] = None


class SchemaInput(BaseModel):
    """Raw table description as sent by the schema editor."""
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    fields: List[FieldInput] = Field(min_length=1)
    indexes: List[Union[IndexInput, str]] = []
    constraints: List[Union[ConstraintInput, str]] = []
    comment: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value.strip()


class EndpointInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    method: str = Field(min_length=1)
    path: str = Field(min_length=1)
    group: Optional[str] = None
    auth: bool = False
    description: Optional[str] = None
    body: Optional[Dict[str, Any]] = None
    response: Optional[str] = None

    @field_validator("method")
    @classmethod
    def upper_method(cls, value: str) -> str:
        return value.strip().upper()


class EndpointGroupInput(BaseModel):
    """Grouped wire shape: ``{"group": "Users", "endpoints": [...]}``."""
    model_config = ConfigDict(extra="ignore")

    group: str = Field(min_length=1)
    endpoints: List[Dict[str, Any]] = []


class GenerateRequest(BaseModel):
    """Request body shared by all diagram kinds.

    Field presence is checked by the diagram service so that a missing field
    becomes a 400 envelope rather than a framework 422.
    """
    model_config = ConfigDict(extra="allow")

    projectName: Optional[Any] = None
    description: Optional[Any] = None
    schemas: Optional[Any] = None
    endpoints: Optional[Any] = None
    analysis: Optional[Any] = None

