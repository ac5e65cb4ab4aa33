"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

import dataclasses
import enum
import inspect
import typing
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Optional

from .metadata import WebMethod


@enum.unique
class HTTPMethod(enum.Enum):
    "HTTP method used to invoke an endpoint operation."

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


_PREFIXES: dict[str, HTTPMethod] = {
    "get": HTTPMethod.GET,
    "put": HTTPMethod.PUT,
    "set": HTTPMethod.PUT,
    "create": HTTPMethod.POST,
    "post": HTTPMethod.POST,
    "do": HTTPMethod.POST,
    "delete": HTTPMethod.DELETE,
    "remove": HTTPMethod.DELETE,
    "update": HTTPMethod.PATCH,
    "patch": HTTPMethod.PATCH,
}

_BODY_METHODS = (HTTPMethod.PUT, HTTPMethod.POST, HTTPMethod.PATCH)

ParameterList = list[tuple[str, type]]


@dataclass
class EndpointOperation:
    """
    Type information and metadata associated with an endpoint operation.

    :param defining_class: The most specific class that defines the endpoint operation.
    :param name: The short name of the endpoint operation, i.e. the resource it acts on.
    :param func_name: The name of the function to invoke when the operation is triggered.
    :param func_ref: The callable to invoke when the operation is triggered.
    :param route: A custom route string assigned to the operation.
    :param status: HTTP status code returned on success, if assigned explicitly.
    :param path_params: Parameters of the operation signature that are passed in the path component of the URL string.
    :param query_params: Parameters of the operation signature that are passed in the query string as `key=value` pairs.
    :param request_param: The parameter that corresponds to the data transmitted in the request body.
    :param response_type: The Python type that corresponds to the data transmitted in the response body, or `None`.
    :param http_method: The HTTP method used to invoke the endpoint such as POST, GET or PUT.
    :param deprecated: True if the operation should no longer be called.
    :param request_examples: Sample requests that the operation might take.
    :param response_examples: Sample responses that the operation might produce.
    """

    defining_class: type
    name: str
    func_name: str
    func_ref: Callable[..., Any]
    route: Optional[str]
    status: Optional[HTTPStatus]
    path_params: ParameterList
    query_params: ParameterList
    request_param: Optional[tuple[str, type]]
    response_type: Optional[type]
    http_method: HTTPMethod
    deprecated: bool = False
    request_examples: Optional[list[Any]] = None
    response_examples: Optional[list[Any]] = None

    def get_route(self) -> str:
        if self.route is not None:
            return self.route

        route_parts = ["", self.name]
        for param_name, _ in self.path_params:
            route_parts.append("{" + param_name + "}")
        return "/".join(route_parts)


def _split_prefix(func_name: str) -> tuple[HTTPMethod, str] | None:
    prefix, sep, name = func_name.partition("_")
    if not sep or not name:
        return None
    http_method = _PREFIXES.get(prefix)
    if http_method is None:
        return None
    return http_method, name


def _get_defining_class(member_fn: Callable[..., Any], derived_cls: type) -> type:
    "Find the class in which a member function is first defined in a class inheritance hierarchy."

    for cls in reversed(inspect.getmro(derived_cls)):
        for _, cls_fn in inspect.getmembers(cls, inspect.isfunction):
            if cls_fn is member_fn:
                return cls

    raise ValueError(f"cannot find class where function {member_fn.__name__} is defined")


def _is_payload_type(typ: type) -> bool:
    return inspect.isclass(typ) and dataclasses.is_dataclass(typ)


def get_endpoint_operations(endpoint: type) -> list[EndpointOperation]:
    """
    Extracts a list of member functions in a class eligible for HTTP interface binding.

    These member functions are expected to have a signature like
    ```
    async def get_object(self, uuid: str, /, version: int) -> Object:
        ...
    ```
    where the prefix `get_` translates to an HTTP GET, `object` corresponds to the name of the endpoint operation,
    `uuid` is a path parameter (it precedes `/`), and `version` is a query parameter. For PUT, POST and PATCH,
    a single dataclass parameter is transmitted in the request body.
    """

    result = []

    for func_name, func_ref in inspect.getmembers(endpoint, inspect.isfunction):
        if func_name.startswith("_"):
            continue

        prefix = _split_prefix(func_name)
        if prefix is None:
            continue
        http_method, operation_name = prefix

        signature = inspect.signature(func_ref)
        hints = typing.get_type_hints(func_ref)

        path_params: ParameterList = []
        query_params: ParameterList = []
        request_param: Optional[tuple[str, type]] = None

        for param_name, parameter in signature.parameters.items():
            if param_name == "self":
                continue

            param_type = hints.get(param_name)
            if param_type is None:
                raise ValueError(f"parameter `{param_name}` of `{func_name}` lacks a type annotation")

            if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                path_params.append((param_name, param_type))
            elif http_method in _BODY_METHODS and _is_payload_type(param_type):
                if request_param is not None:
                    raise ValueError(f"only a single request body parameter is permitted in `{func_name}`")
                request_param = (param_name, param_type)
            else:
                query_params.append((param_name, param_type))

        response_type = hints.get("return")
        if response_type is type(None):
            response_type = None

        webmethod: Optional[WebMethod] = getattr(func_ref, "__webmethod__", None)
        if webmethod is None:
            webmethod = WebMethod()

        result.append(
            EndpointOperation(
                defining_class=_get_defining_class(func_ref, endpoint),
                name=operation_name,
                func_name=func_name,
                func_ref=func_ref,
                route=webmethod.route,
                status=webmethod.status,
                path_params=path_params,
                query_params=query_params,
                request_param=request_param,
                response_type=response_type,
                http_method=http_method,
                deprecated=webmethod.deprecated,
                request_examples=webmethod.request_examples,
                response_examples=webmethod.response_examples,
            )
        )

    if not result:
        raise ValueError(f"no eligible endpoint operations found in {endpoint.__name__}")

    return result
