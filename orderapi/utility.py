"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

import json
import typing
from typing import Optional, TextIO

from strong_typing.core import JsonType, StrictJsonType
from strong_typing.serialization import object_to_json

from .generator import Generator
from .operations import EndpointOperation, HTTPMethod, get_endpoint_operations
from .options import Options
from .specification import Document


class Specification:
    """
    An OpenAPI document generated from a class whose member functions are endpoint operations.

    :param endpoint: The (protocol) class that declares the endpoint operations.
    :param document: The OpenAPI document as a tree of Python objects.
    :param operations: Type information for each endpoint operation.
    """

    endpoint: type
    options: Options
    document: Document
    operations: list[EndpointOperation]

    def __init__(self, endpoint: type, options: Options) -> None:
        generator = Generator(endpoint, options)
        self.endpoint = endpoint
        self.options = options
        self.document = generator.generate()
        self.operations = get_endpoint_operations(endpoint)

    def get_operation(self, method: HTTPMethod, route: str) -> Optional[EndpointOperation]:
        "Finds the operation bound to an HTTP method and route pattern."

        for op in self.operations:
            if op.http_method is method and op.get_route() == route:
                return op
        return None

    def get_json(self) -> StrictJsonType:
        """
        Returns the OpenAPI specification as a Python data type (e.g. `dict` for an object, `list` for an array).

        The result can be serialized to a JSON string with `json.dump` or `json.dumps`.
        """

        return typing.cast(StrictJsonType, object_to_json(self.document))

    def get_json_string(self, pretty_print: bool = False) -> str:
        """
        Returns the OpenAPI specification as a JSON string.

        :param pretty_print: Whether to use line indents to beautify the output.
        """

        json_doc = self.get_json()
        if pretty_print:
            return json.dumps(json_doc, check_circular=False, ensure_ascii=False, indent=4)
        else:
            return json.dumps(json_doc, check_circular=False, ensure_ascii=False, separators=(",", ":"))

    def write_json(self, f: TextIO, pretty_print: bool = False) -> None:
        """
        Writes the OpenAPI specification to a file as a JSON string.

        :param pretty_print: Whether to use line indents to beautify the output.
        """

        json_doc = self.get_json()
        if pretty_print:
            json.dump(json_doc, f, check_circular=False, ensure_ascii=False, indent=4)
        else:
            json.dump(json_doc, f, check_circular=False, ensure_ascii=False, separators=(",", ":"))


def get_json_path(doc: JsonType, *keys: str) -> Optional[JsonType]:
    "Walks a chain of object properties in a JSON document, returning `None` if any of them is missing."

    node = doc
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node
