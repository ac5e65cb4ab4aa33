"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any, ClassVar

from strong_typing.core import JsonType as JsonType
from strong_typing.core import Schema, StrictJsonType

URL = str


@dataclass
class Ref:
    ref_type: ClassVar[str]
    id: str

    def to_json(self) -> StrictJsonType:
        return {"$ref": f"#/components/{self.ref_type}/{self.id}"}


@dataclass
class SchemaRef(Ref):
    ref_type: ClassVar[str] = "schemas"


@dataclass
class ExampleRef(Ref):
    ref_type: ClassVar[str] = "examples"


@dataclass
class Contact:
    name: str | None = None
    url: URL | None = None
    email: str | None = None


@dataclass
class License:
    name: str
    url: URL | None = None


@dataclass
class Info:
    title: str
    version: str
    description: str | None = None
    contact: Contact | None = None
    license: License | None = None


@dataclass
class MediaType:
    schema: Schema | SchemaRef | None = None
    examples: dict[str, "Example | ExampleRef"] | None = None


@dataclass
class RequestBody:
    content: dict[str, MediaType]
    description: str | None = None
    required: bool | None = None


@dataclass
class Response:
    description: str
    content: dict[str, MediaType] | None = None


@enum.unique
class ParameterLocation(enum.Enum):
    Query = "query"
    Path = "path"


@dataclass
class Parameter:
    name: str
    in_: ParameterLocation
    description: str | None = None
    required: bool | None = None
    schema: Schema | SchemaRef | None = None


@dataclass
class Operation:
    responses: dict[str, Response]
    tags: list[str] | None = None
    summary: str | None = None
    description: str | None = None
    operationId: str | None = None
    parameters: list[Parameter] | None = None
    requestBody: RequestBody | None = None
    deprecated: bool | None = None


@dataclass
class PathItem:
    summary: str | None = None
    description: str | None = None
    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    patch: Operation | None = None

    def update(self, other: "PathItem") -> None:
        "Merges another instance of this class into this object."

        for field in dataclasses.fields(self.__class__):
            value = getattr(other, field.name)
            if value is not None:
                setattr(self, field.name, value)


@dataclass
class Example:
    summary: str | None = None
    description: str | None = None
    value: Any | None = None


@dataclass
class Server:
    url: URL
    description: str | None = None


@dataclass
class Components:
    schemas: dict[str, Schema] | None = None


@dataclass
class Tag:
    name: str
    description: str | None = None


@dataclass
class Document:
    """
    This class is a Python dataclass adaptation of the OpenAPI Specification.

    For details, see <https://swagger.io/specification/>

    :param openapi: Version number of the OpenAPI Specification that the OpenAPI document uses.
    :param info: Provides metadata about the API.
    :param servers: An array of objects that provide connectivity information to a target server.
    :param paths: The available paths and operations for the API.
    :param components: An element to hold various objects for the OpenAPI description.
    :param tags: A list of tags used by the OpenAPI description with additional metadata.
    """

    openapi: str
    info: Info
    servers: list[Server]
    paths: dict[str, PathItem]
    components: Components | None = None
    tags: list[Tag] | None = None
