"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

import enum
from dataclasses import dataclass
from http import HTTPStatus
from typing import Optional, Protocol

from strong_typing.schema import json_schema_type

from . import __version__
from .decorators import webmethod
from .dispatcher import RequestContext
from .errors import BadRequestError, InternalServerError, UnsupportedMediaTypeError, ValidationError
from .options import Options
from .specification import Info, Server

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8088
DEFAULT_URL = f"http://{DEFAULT_HOST}:{DEFAULT_PORT}"


@json_schema_type
@enum.unique
class OrderItem(enum.Enum):
    "An item that can be ordered."

    TeaTableGreen = "Tea Table Green"
    TeaTableRed = "Tea Table Red"


@json_schema_type
@dataclass
class Order:
    """
    An order for a single item.

    :param item: The item to order.
    :param price: The price agreed for the item.
    """

    item: Optional[OrderItem] = None
    price: Optional[int] = None


class OrderAPI(Protocol):
    """
    Order placement.

    Operations to place orders for items.
    """

    @webmethod(status=HTTPStatus.CREATED, request_example=Order(OrderItem.TeaTableGreen, 14))
    async def put_order(self, id: str, /, order: Order) -> None:
        """
        Places an order with the given identifier.

        :param id: Identifier of the order assigned by the client.
        :param order: The item and price of the order.
        :raises BadRequestError: The request body is not valid JSON.
        :raises ValidationError: The order does not match the declared shape, e.g. the item is unknown.
        :raises UnsupportedMediaTypeError: The request body is not transmitted as JSON.
        :raises InternalServerError: Unexpected error while processing the order.
        """
        ...


class OrderServer(Protocol):
    "The server-side counterpart of `OrderAPI`. Each operation receives the context of the request being served."

    async def put_order(self, context: RequestContext, id: str, order: Order) -> None: ...


def make_options(url: str = DEFAULT_URL) -> Options:
    "Options for generating the OpenAPI document of the order service and for reporting errors."

    return Options(
        server=Server(url=url),
        info=Info(
            title="Order API",
            version=__version__,
            description="Places orders for items identified by a client-assigned identifier.",
        ),
        error_responses={
            BadRequestError: HTTPStatus.BAD_REQUEST,
            ValidationError: HTTPStatus.BAD_REQUEST,
            UnsupportedMediaTypeError: HTTPStatus.UNSUPPORTED_MEDIA_TYPE,
            InternalServerError: HTTPStatus.INTERNAL_SERVER_ERROR,
        },
        error_wrapper=True,
    )
