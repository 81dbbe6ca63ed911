"""
Request Spec - Declarative description of one recorded HTTP request.

Uses Pydantic for validation. The models accept the recorder's JSON shape
(camelCase storage keys, ``formData``, null sections) as well as plain
Python construction.

Example:
    >>> spec = RequestSpec.model_validate({
    ...     "url": "https://api.example.com/projects",
    ...     "method": "get",
    ...     "auth": {
    ...         "type": "bearer",
    ...         "token_storages": [{"type": "localStorage", "key": "access_token"}],
    ...     },
    ... })
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from replay_runtime.interfaces.storage import StorageKind


class AuthType(str, Enum):
    """Authorization schemes a request step can use."""
    NONE = "none"
    BEARER = "bearer"
    BASIC = "basic"


class BodyType(str, Enum):
    """Request body encodings."""
    NONE = "none"
    JSON = "json"
    FORM = "form"


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


class KeyValue(BaseModel):
    """One query parameter or header entry."""
    key: Optional[Any] = None
    value: Optional[Any] = None
    
    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (tuple, list)) and len(data) == 2:
            return {"key": data[0], "value": data[1]}
        return data
    
    @property
    def is_blank(self) -> bool:
        return _is_blank(self.key) or _is_blank(self.value)


class FormField(BaseModel):
    """One form body field."""
    name: Optional[Any] = None
    value: Optional[Any] = None
    
    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (tuple, list)) and len(data) == 2:
            return {"name": data[0], "value": data[1]}
        return data


class TokenStorageRef(BaseModel):
    """Where to read a bearer token from at run time."""
    type: StorageKind
    key: Optional[str] = None


class BasicAuthStorageRef(BaseModel):
    """Where to read basic-auth credentials from at run time."""
    type: StorageKind
    username_key: Optional[str] = Field(default=None, alias="usernameKey")
    password_key: Optional[str] = Field(default=None, alias="passwordKey")
    
    model_config = ConfigDict(populate_by_name=True)


class RequestAuth(BaseModel):
    """
    Authorization section.
    
    Literal credentials take precedence; storage references are only
    consulted when the literal values are missing.
    """
    type: AuthType = AuthType.NONE
    token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    token_storages: List[TokenStorageRef] = Field(default_factory=list)
    basic_auth_storages: List[BasicAuthStorageRef] = Field(default_factory=list)
    
    model_config = ConfigDict(extra="ignore")
    
    @field_validator("type", mode="before")
    @classmethod
    def _none_type(cls, v: Any) -> Any:
        return AuthType.NONE if v is None else v
    
    @field_validator("token_storages", "basic_auth_storages", mode="before")
    @classmethod
    def _none_list(cls, v: Any) -> Any:
        return [] if v is None else v


class RequestBody(BaseModel):
    """Body section."""
    type: BodyType = BodyType.NONE
    content: Any = None
    form_data: List[FormField] = Field(default_factory=list, alias="formData")
    
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    
    @field_validator("type", mode="before")
    @classmethod
    def _none_type(cls, v: Any) -> Any:
        return BodyType.NONE if v is None else v
    
    @field_validator("form_data", mode="before")
    @classmethod
    def _none_list(cls, v: Any) -> Any:
        return [] if v is None else v


class RequestSpec(BaseModel):
    """
    One declarative HTTP request.
    
    Attributes:
        url: Base URL, possibly already carrying a query string
        method: HTTP method (case-insensitive, defaults to GET)
        params: Ordered query parameters
        headers: Ordered explicit headers
        auth: Authorization section
        body: Body section
    """
    url: str
    method: str = "get"
    params: List[KeyValue] = Field(default_factory=list)
    headers: List[KeyValue] = Field(default_factory=list)
    auth: RequestAuth = Field(default_factory=RequestAuth)
    body: RequestBody = Field(default_factory=RequestBody)
    
    model_config = ConfigDict(extra="ignore")
    
    @field_validator("method", mode="before")
    @classmethod
    def _default_method(cls, v: Any) -> Any:
        return "get" if _is_blank(v) else v
    
    @field_validator("params", "headers", mode="before")
    @classmethod
    def _none_list(cls, v: Any) -> Any:
        return [] if v is None else v
    
    @field_validator("auth", "body", mode="before")
    @classmethod
    def _none_section(cls, v: Any) -> Any:
        return {} if v is None else v
