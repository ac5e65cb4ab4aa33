"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

from typing import Any, Optional

import jsonschema
from jsonschema import validators
from jsonschema.exceptions import best_match
from referencing.exceptions import Unresolvable
from strong_typing.core import JsonType, Schema


class SchemaValidationError(Exception):
    """
    Raised when a JSON value does not satisfy a JSON schema.

    :param path: JSON pointer to the offending value, empty string for the root.
    :param message: What constraint has been violated.
    """

    path: str
    message: str

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path or '/'}: {message}")
        self.path = path
        self.message = message


class SchemaReferenceError(KeyError):
    "Raised when a `$ref` in a schema cannot be resolved."


def _is_integer(checker: Any, instance: Any) -> bool:
    # a JSON number with a fractional part of zero (e.g. `14.0`) is not accepted as an integer
    return isinstance(instance, int) and not isinstance(instance, bool)


StrictValidator = validators.extend(
    jsonschema.Draft202012Validator,
    type_checker=jsonschema.Draft202012Validator.TYPE_CHECKER.redefine("integer", _is_integer),
)


def json_pointer(path: Any) -> str:
    "Converts a sequence of property names and array indices into a JSON pointer."

    return "".join("/" + str(token).replace("~", "~0").replace("/", "~1") for token in path)


class SchemaValidator:
    """
    Checks JSON values against a JSON schema (draft 2020-12).

    Local references are resolved against a set of named definitions (e.g. the `components/schemas` section of an
    OpenAPI document), which may be addressed as `#/components/schemas/...`, `#/definitions/...` or `#/$defs/...`.
    Integers are strict: booleans and floating-point numbers are rejected where an integer is expected.
    """

    definitions: dict[str, Schema]

    def __init__(self, definitions: Optional[dict[str, Schema]] = None) -> None:
        self.definitions = definitions or {}

    def _root_schema(self, schema: Schema) -> Schema:
        root = dict(schema)
        root["components"] = {"schemas": self.definitions}
        root["definitions"] = self.definitions
        root["$defs"] = self.definitions
        return root

    def validate(self, schema: Schema, value: JsonType) -> None:
        "Raises `SchemaValidationError` if the value does not satisfy the schema."

        validator = StrictValidator(self._root_schema(schema))
        try:
            error = best_match(validator.iter_errors(value))
        except Unresolvable as e:
            raise SchemaReferenceError(getattr(e, "ref", str(e))) from e

        if error is not None:
            raise SchemaValidationError(json_pointer(error.absolute_path), error.message)

    def is_valid(self, schema: Schema, value: JsonType) -> bool:
        try:
            self.validate(schema, value)
        except SchemaValidationError:
            return False
        else:
            return True
