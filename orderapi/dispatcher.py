"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

import inspect
import logging
import uuid
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Optional

from aiohttp import web
from strong_typing.core import JsonType, Schema
from strong_typing.exception import JsonKeyError, JsonTypeError, JsonValueError
from strong_typing.inspection import is_type_optional, unwrap_optional_type
from strong_typing.serialization import json_to_object, object_to_json

from .errors import BadRequestError, InternalServerError, OperationError, UnsupportedMediaTypeError, ValidationError
from .generator import JSON_MEDIA_TYPE, wrap_error
from .operations import EndpointOperation
from .options import Options
from .utility import Specification, get_json_path
from .validation import SchemaValidationError, SchemaValidator

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "Request-ID"
REQUEST_ID_KEY = web.RequestKey("request_id", str)


@dataclass
class RequestContext:
    """
    Information about the request being served, passed to a handler as its first argument.

    :param request: The underlying HTTP request.
    :param request_id: Identifies the request in the log stream, echoed in the `Request-ID` response header.
    :param operation: The endpoint operation the request has been matched to.
    """

    request: web.Request
    request_id: str
    operation: EndpointOperation


def _error_response(error: OperationError, options: Options) -> web.Response:
    body: JsonType = object_to_json(error)
    if options.error_wrapper:
        body = wrap_error(body)
    return web.json_response(body, status=int(options.get_error_status(type(error))))


def make_error_middleware(options: Options) -> Any:
    """
    Creates a middleware that assigns a request identifier and converts errors into HTTP responses.

    Errors affect only the request that raised them; the application remains available for further requests.
    """

    @web.middleware
    async def error_middleware(request: web.Request, handler: Callable[[web.Request], Any]) -> web.StreamResponse:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request[REQUEST_ID_KEY] = request_id
        logger.info("received request: %s %s [%s]", request.method, request.path, request_id)

        try:
            response = await handler(request)
        except web.HTTPException:
            # route not found or method not allowed
            raise
        except OperationError as e:
            logger.warning("rejected request: %s %s [%s]: %s", request.method, request.path, request_id, e)
            response = _error_response(e, options)
        except Exception:
            logger.exception("error serving request: %s %s [%s]", request.method, request.path, request_id)
            error = InternalServerError.create("unexpected error while processing the request")
            response = _error_response(error, options)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "completed request: %s %s with status %d [%s]", request.method, request.path, response.status, request_id
        )
        return response

    return error_middleware


def parse_parameter(name: str, param_type: type, text: str) -> Any:
    "Converts the string value of a path or query parameter to the declared Python type."

    if is_type_optional(param_type):
        param_type = unwrap_optional_type(param_type)

    try:
        if param_type is str:
            return text
        elif param_type is bool:
            if text == "true":
                return True
            elif text == "false":
                return False
            raise ValueError("expected `true` or `false`")
        elif param_type is int or param_type is float:
            return param_type(text)
        else:
            return json_to_object(param_type, text)
    except (JsonKeyError, JsonTypeError, JsonValueError, TypeError, ValueError) as e:
        raise ValidationError.create(f"invalid value for parameter `{name}`: {text!r}", path=f"/{name}") from e


def _get_success_status(responses: Optional[JsonType]) -> int:
    if isinstance(responses, dict):
        for code in sorted(responses.keys()):
            if code.startswith("2"):
                return int(code)
    return HTTPStatus.OK.value


class OperationHandler:
    """
    Decodes requests for a single endpoint operation and passes them to a handler function.

    :param operation: Type information for the endpoint operation.
    :param func: The handler, called as `func(context, *path_params, body, **query_params)`.
    :param request_schema: JSON schema the request body must satisfy, if the operation takes a body.
    :param status: HTTP status code to respond with on success.
    :param validator: Validates request bodies against `request_schema`.
    """

    operation: EndpointOperation
    func: Callable[..., Any]
    request_schema: Optional[Schema]
    status: int
    validator: SchemaValidator

    def __init__(
        self,
        operation: EndpointOperation,
        func: Callable[..., Any],
        request_schema: Optional[Schema],
        status: int,
        validator: SchemaValidator,
    ) -> None:
        self.operation = operation
        self.func = func
        self.request_schema = request_schema
        self.status = status
        self.validator = validator

    async def handle(self, request: web.Request) -> web.StreamResponse:
        op = self.operation
        context = RequestContext(request, request.get(REQUEST_ID_KEY) or str(uuid.uuid4()), op)

        args = [parse_parameter(name, typ, request.match_info[name]) for name, typ in op.path_params]
        if op.request_param is not None:
            args.append(await self._read_body(request, op.request_param[1]))

        kwargs: dict[str, Any] = {}
        for name, typ in op.query_params:
            text = request.query.get(name)
            if text is not None:
                kwargs[name] = parse_parameter(name, typ, text)
            elif is_type_optional(typ):
                kwargs[name] = None
            else:
                raise ValidationError.create(f"missing query parameter `{name}`", path=f"/{name}")

        result = self.func(context, *args, **kwargs)
        if inspect.isawaitable(result):
            result = await result

        if result is None:
            return web.Response(status=self.status)
        return web.json_response(object_to_json(result), status=self.status)

    async def _read_body(self, request: web.Request, body_type: type) -> Any:
        if request.content_type != JSON_MEDIA_TYPE:
            raise UnsupportedMediaTypeError.create(
                f"request body must be {JSON_MEDIA_TYPE}", content_type=request.content_type
            )

        try:
            data = await request.json()
        except (ValueError, RecursionError) as e:
            raise BadRequestError.create(f"request body is not valid JSON: {e}") from e

        if self.request_schema is not None:
            try:
                self.validator.validate(self.request_schema, data)
            except SchemaValidationError as e:
                raise ValidationError.create(e.message, path=e.path) from e

        try:
            return json_to_object(body_type, data)
        except (JsonKeyError, JsonTypeError, JsonValueError, TypeError, ValueError) as e:
            raise ValidationError.create(str(e), path="") from e


class Dispatcher:
    """
    Binds the operations of an OpenAPI specification to the member functions of a server object.

    For each operation declared in the specification, the server object must have a member function of the same
    name, which takes a `RequestContext` followed by the path parameters, the request body (if any) and the query
    parameters (as keyword arguments). Request bodies are checked against the schema in the generated document
    before they are converted to Python objects.
    """

    specification: Specification
    server: object
    options: Options
    validator: SchemaValidator
    handlers: list[OperationHandler]

    def __init__(self, specification: Specification, server: object, options: Optional[Options] = None) -> None:
        self.specification = specification
        self.server = server
        self.options = options or specification.options

        doc = specification.get_json()
        definitions = get_json_path(doc, "components", "schemas")
        self.validator = SchemaValidator(definitions if isinstance(definitions, dict) else None)

        self.handlers = []
        for op in specification.operations:
            func = getattr(server, op.func_name, None)
            if func is None or not callable(func):
                raise TypeError(f"{type(server).__name__} does not implement operation `{op.func_name}`")

            operation_doc = get_json_path(doc, "paths", op.get_route(), op.http_method.value.lower())
            request_schema = get_json_path(operation_doc, "requestBody", "content", JSON_MEDIA_TYPE, "schema")
            status = _get_success_status(get_json_path(operation_doc, "responses"))
            self.handlers.append(
                OperationHandler(
                    op,
                    func,
                    request_schema if isinstance(request_schema, dict) else None,
                    status,
                    self.validator,
                )
            )

    def make_app(self) -> web.Application:
        "Creates a web application that serves the operations."

        app = web.Application(middlewares=[make_error_middleware(self.options)])
        for handler in self.handlers:
            op = handler.operation
            app.router.add_route(op.http_method.value, op.get_route(), handler.handle)
            logger.debug("registered route: %s %s -> %s", op.http_method.value, op.get_route(), op.func_name)
        return app
