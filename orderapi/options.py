"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

import dataclasses
from dataclasses import dataclass
from http import HTTPStatus
from typing import Callable, Optional, Union

from .specification import Info, Server

HTTPStatusCode = Union[HTTPStatus, int, str]


def status_key(code: HTTPStatusCode) -> str:
    "Converts an HTTP status code to the string form used as a key in an OpenAPI responses object."

    if isinstance(code, str):
        return code
    return str(int(code))


@dataclass
class Options:
    """
    :param server: Base URL for the API endpoint.
    :param info: Meta-information for the endpoint specification.
    :param version: OpenAPI specification version as a tuple of major, minor, revision.
    :param use_examples: Whether to emit examples for operations.
    :param success_responses: Associates operation response types with HTTP status codes.
    :param error_responses: Associates error response types with HTTP status codes.
    :param error_wrapper: True if errors are encapsulated in an error object wrapper.
    :param property_description_fun: Custom transformation function to apply to class property documentation strings.
    """

    server: Server
    info: Info
    version: tuple[int, int, int] = (3, 1, 0)
    use_examples: bool = True
    success_responses: dict[type, HTTPStatusCode] = dataclasses.field(default_factory=dict)
    error_responses: dict[type, HTTPStatusCode] = dataclasses.field(default_factory=dict)
    error_wrapper: bool = False
    property_description_fun: Optional[Callable[[type, str, str], str]] = None

    def get_error_status(self, error_type: type) -> str:
        "Looks up the HTTP status code of an error type, walking its base classes. Unmapped errors are 500."

        for cls in error_type.__mro__:
            code = self.error_responses.get(cls)
            if code is not None:
                return status_key(code)
        return status_key(HTTPStatus.INTERNAL_SERVER_ERROR)
