"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

import uuid
from dataclasses import dataclass
from typing import TypeVar

from strong_typing.schema import json_schema_type

E = TypeVar("E", bound="OperationError")


@json_schema_type
@dataclass
class OperationError(Exception):
    """
    Encapsulates an error from an endpoint operation.

    :param type: A machine-processable identifier for the error. Corresponds to the Python exception type.
    :param uuid: Unique identifier of the error. This identifier helps locate the exact source of the error (e.g. find
    the log entry in the server log stream).
    :param message: A human-readable description for the error for informational purposes. The exact format of the
    message is unspecified, and implementations should not rely on the presence of any specific information.
    """

    type: str
    uuid: uuid.UUID
    message: str

    @classmethod
    def create(cls: type[E], message: str, **kwargs: object) -> E:
        "Instantiates an error with a fresh identifier."

        return cls(cls.__name__, uuid.uuid4(), message, **kwargs)  # type: ignore[arg-type]

    def __str__(self) -> str:
        return self.message


@dataclass
class BadRequestError(OperationError):
    """
    The server cannot process the request due a client error.

    This might be due to malformed request syntax, e.g. a request body that is not valid JSON.
    """


@dataclass
class UnsupportedMediaTypeError(OperationError):
    """
    The request body is transmitted in a format the operation does not accept.

    :param content_type: The content type the client has sent.
    """

    content_type: str


@dataclass
class ValidationError(OperationError):
    """
    Raised when request data does not match the shape declared for the operation.

    :param path: JSON pointer to the location of the invalid value.
    """

    path: str


@dataclass
class InternalServerError(OperationError):
    "The server encountered an unexpected error when processing the request."
