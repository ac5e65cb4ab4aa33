"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Optional, Union

from strong_typing.core import JsonType
from strong_typing.docstring import parse_type
from strong_typing.inspection import is_type_optional, unwrap_optional_type
from strong_typing.name import python_type_to_name
from strong_typing.schema import JsonSchemaGenerator, Schema, SchemaOptions, get_schema_identifier
from strong_typing.serialization import object_to_json

from .operations import EndpointOperation, HTTPMethod, get_endpoint_operations
from .options import HTTPStatusCode, Options, status_key
from .specification import (
    Components,
    Document,
    Example,
    ExampleRef,
    MediaType,
    Operation,
    Parameter,
    ParameterLocation,
    PathItem,
    RequestBody,
    Response,
    SchemaRef,
    Tag,
)

SchemaOrRef = Union[Schema, SchemaRef]

JSON_MEDIA_TYPE = "application/json"


class SchemaBuilder:
    schema_generator: JsonSchemaGenerator
    schemas: dict[str, Schema]

    def __init__(self, schema_generator: JsonSchemaGenerator) -> None:
        self.schema_generator = schema_generator
        self.schemas = {}

    def classdef_to_schema(self, typ: type) -> Schema:
        """
        Converts a type to a JSON schema.
        For nested types found in the type hierarchy, adds the type to the schema registry in the OpenAPI specification section `components`.
        """

        type_schema, type_definitions = self.schema_generator.classdef_to_schema(typ)

        # append schema to list of known schemas, to be used in OpenAPI's Components Object section
        for ref, schema in type_definitions.items():
            self._add_ref(ref, schema)

        return type_schema

    def classdef_to_ref(self, typ: type) -> SchemaOrRef:
        """
        Converts a type to a JSON schema, and if possible, returns a schema reference.
        For composite types (such as classes), adds the type to the schema registry in the OpenAPI specification section `components`.
        """

        type_schema = self.classdef_to_schema(typ)
        if typ is str or typ is int or typ is float or typ is bool:
            # represent simple types as themselves
            return type_schema

        type_name = get_schema_identifier(typ)
        if type_name is not None:
            return self._build_ref(type_name, type_schema)

        try:
            type_name = python_type_to_name(typ)
            return self._build_ref(type_name, type_schema)
        except TypeError:
            pass

        return type_schema

    def _build_ref(self, type_name: str, type_schema: Schema) -> SchemaRef:
        self._add_ref(type_name, type_schema)
        return SchemaRef(type_name)

    def _add_ref(self, type_name: str, type_schema: Schema) -> None:
        if type_name not in self.schemas:
            self.schemas[type_name] = type_schema


class ContentBuilder:
    schema_builder: SchemaBuilder
    schema_transformer: Optional[Callable[[SchemaOrRef], SchemaOrRef]]
    sample_transformer: Optional[Callable[[JsonType], JsonType]]

    def __init__(
        self,
        schema_builder: SchemaBuilder,
        schema_transformer: Optional[Callable[[SchemaOrRef], SchemaOrRef]] = None,
        sample_transformer: Optional[Callable[[JsonType], JsonType]] = None,
    ) -> None:
        self.schema_builder = schema_builder
        self.schema_transformer = schema_transformer
        self.sample_transformer = sample_transformer

    def build_content(self, payload_type: type, examples: Optional[list[Any]] = None) -> dict[str, MediaType]:
        "Creates the content subtree for a request or response. Only JSON payloads are supported."

        return {JSON_MEDIA_TYPE: self.build_media_type(payload_type, examples)}

    def build_media_type(self, item_type: type, examples: Optional[list[Any]] = None) -> MediaType:
        schema = self.schema_builder.classdef_to_ref(item_type)
        if self.schema_transformer is not None:
            schema = self.schema_transformer(schema)
        return MediaType(schema=schema, examples=self._build_examples(examples))

    def _build_examples(self, examples: Optional[list[Any]] = None) -> Optional[dict[str, Union[Example, ExampleRef]]]:
        if not examples:
            return None

        def identity(sample: JsonType) -> JsonType:
            return sample

        sample_transformer = self.sample_transformer or identity
        return {str(example): Example(value=sample_transformer(object_to_json(example))) for example in examples}


@dataclass
class ResponseOptions:
    """
    Configuration options for building a response for an operation.

    :param type_descriptions: Maps each response type to a textual description (if available).
    :param examples: A list of response examples.
    :param status_catalog: Maps each response type to an HTTP status code.
    :param default_status_code: HTTP status code assigned to responses that have no mapping.
    """

    type_descriptions: dict[Optional[type], str]
    examples: Optional[list[Any]]
    status_catalog: dict[type, HTTPStatusCode]
    default_status_code: HTTPStatusCode


class ResponseBuilder:
    content_builder: ContentBuilder

    def __init__(self, content_builder: ContentBuilder) -> None:
        self.content_builder = content_builder

    def _get_status_responses(self, options: ResponseOptions) -> dict[str, list[Optional[type]]]:
        status_responses: dict[str, list[Optional[type]]] = {}

        for response_type in options.type_descriptions.keys():
            code = options.status_catalog.get(response_type, options.default_status_code)  # type: ignore[arg-type]
            status_responses.setdefault(status_key(code), []).append(response_type)

        return status_responses

    def build_response(self, options: ResponseOptions) -> dict[str, Response]:
        """
        Groups responses that have the same status code.
        """

        responses: dict[str, Response] = {}
        status_responses = self._get_status_responses(options)
        for status_code, response_type_list in status_responses.items():
            response_type_tuple = tuple(response_type_list)
            if len(response_type_tuple) > 1:
                composite_response_type: Optional[type] = Union[response_type_tuple]  # type: ignore[assignment]
            else:
                (composite_response_type,) = response_type_tuple

            description = " **OR** ".join(
                filter(None, (options.type_descriptions[response_type] for response_type in response_type_tuple))
            )
            if not description:
                description = HTTPStatus(int(status_code)).phrase

            responses[status_code] = self._build_response(
                response_type=composite_response_type,
                description=description,
                examples=options.examples or None,
            )

        return responses

    def _build_response(
        self, response_type: Optional[type], description: str, examples: Optional[list[Any]] = None
    ) -> Response:
        "Creates a response subtree."

        if response_type is not None:
            return Response(
                description=description,
                content=self.content_builder.build_content(response_type, examples),
            )
        else:
            return Response(description=description)


class Generator:
    endpoint: type
    options: Options
    schema_builder: SchemaBuilder

    def __init__(self, endpoint: type, options: Options) -> None:
        self.endpoint = endpoint
        self.options = options
        schema_generator = JsonSchemaGenerator(
            SchemaOptions(
                definitions_path="#/components/schemas/",
                property_description_fun=options.property_description_fun,
            )
        )
        self.schema_builder = SchemaBuilder(schema_generator)

    def _get_success_status(self, op: EndpointOperation) -> HTTPStatusCode:
        if op.status is not None:
            return op.status
        if op.response_type is not None:
            return self.options.success_responses.get(op.response_type, HTTPStatus.OK)
        return HTTPStatus.OK

    def _build_operation(self, op: EndpointOperation) -> Operation:
        doc_string = parse_type(op.func_ref)
        doc_params = dict((param.name, param.description) for param in doc_string.params.values())

        # parameters passed in URL component path
        path_parameters = [
            Parameter(
                name=param_name,
                in_=ParameterLocation.Path,
                description=doc_params.get(param_name),
                required=True,
                schema=self.schema_builder.classdef_to_ref(param_type),
            )
            for param_name, param_type in op.path_params
        ]

        # parameters passed in URL component query string
        query_parameters = []
        for param_name, param_type in op.query_params:
            if is_type_optional(param_type):
                inner_type = unwrap_optional_type(param_type)
                required = False
            else:
                inner_type = param_type
                required = True

            query_parameter = Parameter(
                name=param_name,
                in_=ParameterLocation.Query,
                description=doc_params.get(param_name),
                required=required,
                schema=self.schema_builder.classdef_to_ref(inner_type),
            )
            query_parameters.append(query_parameter)

        parameters = path_parameters + query_parameters

        # data passed in payload
        if op.request_param:
            builder = ContentBuilder(self.schema_builder)
            request_name, request_type = op.request_param
            request_examples = op.request_examples if self.options.use_examples else None
            requestBody = RequestBody(
                content={JSON_MEDIA_TYPE: builder.build_media_type(request_type, request_examples)},
                description=doc_params.get(request_name),
                required=True,
            )
        else:
            requestBody = None

        # success response types
        response_examples = (op.response_examples or []) if self.options.use_examples else []
        success_examples = [example for example in response_examples if not isinstance(example, Exception)]
        if op.response_type is not None:
            success_description = doc_string.returns.description if doc_string.returns else "OK"
            status_catalog = self.options.success_responses
        else:
            success_description = HTTPStatus(int(status_key(self._get_success_status(op)))).phrase
            status_catalog = {}

        content_builder = ContentBuilder(self.schema_builder)
        response_builder = ResponseBuilder(content_builder)
        response_options = ResponseOptions(
            {op.response_type: success_description},
            success_examples,
            status_catalog,
            self._get_success_status(op),
        )
        responses = response_builder.build_response(response_options)

        # failure response types
        if doc_string.raises:
            exception_types: dict[Optional[type], str] = {
                item.raise_type: item.description for item in doc_string.raises.values()
            }
            exception_examples = [example for example in response_examples if isinstance(example, Exception)]

            schema_transformer: Optional[Callable[[SchemaOrRef], SchemaOrRef]]
            sample_transformer: Optional[Callable[[JsonType], JsonType]]
            if self.options.error_wrapper:
                schema_transformer = wrap_error_schema
                sample_transformer = wrap_error
            else:
                schema_transformer = None
                sample_transformer = None

            content_builder = ContentBuilder(
                self.schema_builder,
                schema_transformer=schema_transformer,
                sample_transformer=sample_transformer,
            )
            response_builder = ResponseBuilder(content_builder)
            response_options = ResponseOptions(
                exception_types,
                exception_examples,
                self.options.error_responses,
                HTTPStatus.INTERNAL_SERVER_ERROR,
            )
            responses.update(response_builder.build_response(response_options))

        return Operation(
            tags=[op.defining_class.__name__],
            summary=doc_string.short_description,
            description=doc_string.long_description,
            operationId=op.func_name,
            parameters=parameters or None,
            requestBody=requestBody,
            responses=responses,
            deprecated=True if op.deprecated else None,
        )

    def generate(self) -> Document:
        paths: dict[str, PathItem] = {}
        endpoint_classes: set[type] = set()
        for op in get_endpoint_operations(self.endpoint):
            endpoint_classes.add(op.defining_class)

            operation = self._build_operation(op)

            if op.http_method is HTTPMethod.GET:
                pathItem = PathItem(get=operation)
            elif op.http_method is HTTPMethod.PUT:
                pathItem = PathItem(put=operation)
            elif op.http_method is HTTPMethod.POST:
                pathItem = PathItem(post=operation)
            elif op.http_method is HTTPMethod.DELETE:
                pathItem = PathItem(delete=operation)
            elif op.http_method is HTTPMethod.PATCH:
                pathItem = PathItem(patch=operation)
            else:
                raise NotImplementedError(f"unknown HTTP method: {op.http_method}")

            route = op.get_route()
            if route in paths:
                paths[route].update(pathItem)
            else:
                paths[route] = pathItem

        operation_tags: list[Tag] = []
        for cls in sorted(endpoint_classes, key=lambda c: c.__name__):
            doc_string = parse_type(cls)
            operation_tags.append(Tag(name=cls.__name__, description=doc_string.short_description))

        major, minor, revision = self.options.version
        return Document(
            openapi=f"{major}.{minor}.{revision}",
            info=self.options.info,
            servers=[self.options.server],
            paths=paths,
            components=Components(schemas=self.schema_builder.schemas),
            tags=operation_tags,
        )


def wrap_error_schema(schema: SchemaOrRef) -> SchemaOrRef:
    "Encapsulates an error schema in an object with a single property `error`."

    if isinstance(schema, SchemaRef):
        schema = schema.to_json()

    return {
        "type": "object",
        "properties": {
            "error": schema,
        },
        "additionalProperties": False,
        "required": [
            "error",
        ],
    }


def wrap_error(error: JsonType) -> JsonType:
    return {"error": error}
