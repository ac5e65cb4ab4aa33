"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

import asyncio
import inspect
import json
import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

import aiohttp
from strong_typing.serialization import json_to_object, object_to_json

from .operations import EndpointOperation, get_endpoint_operations

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ProxyError(RuntimeError):
    "Raised when an endpoint operation cannot be invoked successfully through a proxy."


class ProxyTransportError(ProxyError):
    """
    Raised when the server cannot be reached, e.g. the connection is refused or times out.

    No HTTP status is available in this case.
    """


class ProxyStatusError(ProxyError):
    """
    Raised when the server responds with a status code other than 2xx.

    :param status: HTTP status code received.
    :param body: Response body as text.
    """

    status: int
    body: str

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"server responded with status {status}: {body}")
        self.status = status
        self.body = body


@dataclass
class ProxyResponse(Generic[T]):
    """
    The outcome of a single HTTP exchange.

    :param status: HTTP status code received.
    :param value: Response payload decoded to the operation return type, or `None` for non-2xx or empty responses.
    :param headers: HTTP response headers.
    :param body: Raw response body as text.
    """

    status: int
    value: Optional[T]
    headers: dict[str, str]
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class EndpointProxy:
    "The HTTP REST proxy class for an endpoint."

    base_url: str
    timeout: Optional[float]

    def __init__(self, base_url: str, *, timeout: Optional[float] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout


def _to_query_value(value: Any) -> str:
    data = object_to_json(value)
    if isinstance(data, bool):
        return "true" if data else "false"
    return str(data)


class OperationProxy:
    "The HTTP REST proxy class for an endpoint operation."

    op: EndpointOperation
    sig: inspect.Signature

    def __init__(self, op: EndpointOperation) -> None:
        self.op = op
        self.sig = inspect.signature(op.func_ref)

    def _build_url(self, base_url: str, arguments: dict[str, Any]) -> str:
        path_args = {
            name: urllib.parse.quote(_to_query_value(arguments[name]), safe="") for name, _ in self.op.path_params
        }
        return base_url + self.op.get_route().format_map(path_args)

    def _build_query(self, arguments: dict[str, Any]) -> dict[str, str]:
        return {
            name: _to_query_value(arguments[name])
            for name, _ in self.op.query_params
            if arguments.get(name) is not None
        }

    async def invoke(self, proxy: EndpointProxy, *args: Any, **kwargs: Any) -> ProxyResponse[Any]:
        "Sends a single request and returns the response. Raises `ProxyTransportError` if no response is received."

        ba = self.sig.bind(proxy, *args, **kwargs)
        ba.apply_defaults()
        url = self._build_url(proxy.base_url, ba.arguments)
        params = self._build_query(ba.arguments)
        if self.op.request_param is not None:
            data = object_to_json(ba.arguments[self.op.request_param[0]])
        else:
            data = None

        method = self.op.http_method.value
        session_args: dict[str, Any] = {}
        if proxy.timeout is not None:
            session_args["timeout"] = aiohttp.ClientTimeout(total=proxy.timeout)
        logger.debug("sending request: %s %s", method, url)
        try:
            async with aiohttp.ClientSession(**session_args) as session:
                async with session.request(method, url, params=params, json=data) as resp:
                    body = await resp.text()
                    status = resp.status
                    headers = dict(resp.headers)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProxyTransportError(f"cannot complete request {method} {url}: {e!r}") from e

        logger.debug("received response: %s %s with status %d", method, url, status)
        if 200 <= status < 300 and self.op.response_type is not None and body:
            value = json_to_object(self.op.response_type, json.loads(body))
        else:
            value = None
        return ProxyResponse(status, value, headers, body)


def _make_function(operation: OperationProxy) -> Callable[..., Any]:
    async def _invoke(self: EndpointProxy, *args: Any, **kwargs: Any) -> Any:
        response = await operation.invoke(self, *args, **kwargs)
        if not response.ok:
            raise ProxyStatusError(response.status, response.body)
        return response.value

    _invoke.__name__ = operation.op.func_name
    _invoke.__doc__ = operation.op.func_ref.__doc__
    return _invoke


def _make_with_response_function(operation: OperationProxy) -> Callable[..., Any]:
    async def _invoke(self: EndpointProxy, *args: Any, **kwargs: Any) -> ProxyResponse[Any]:
        return await operation.invoke(self, *args, **kwargs)

    _invoke.__name__ = f"{operation.op.func_name}_with_response"
    _invoke.__doc__ = "Invokes the operation, returning the response regardless of its status code."
    return _invoke


def make_proxy_class(api: type) -> type:
    """
    Creates a proxy class that implements an endpoint by sending HTTP requests to a server.

    Each operation `name` of the endpoint becomes an `async` member function that returns the decoded response
    value, and raises `ProxyStatusError` when the server responds with a non-2xx status. In addition, a member
    function `name_with_response` returns a `ProxyResponse` with the status code. Both raise `ProxyTransportError`
    if the server cannot be reached. A request is sent exactly once, it is never retried.
    """

    members: dict[str, Any] = {}
    for op in get_endpoint_operations(api):
        operation = OperationProxy(op)
        members[op.func_name] = _make_function(operation)
        members[f"{op.func_name}_with_response"] = _make_with_response_function(operation)

    return type(f"{api.__name__}Proxy", (EndpointProxy,), members)
