"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from .order import DEFAULT_URL, Order, OrderAPI, OrderItem
from .proxy import ProxyTransportError, make_proxy_class

logger = logging.getLogger(__name__)

OrderClient = make_proxy_class(OrderAPI)


async def place_order(base_url: str, id: str, order: Order, timeout: Optional[float] = None) -> int:
    """
    Sends a single order to the server and returns the HTTP status code of the response.

    :raises ProxyTransportError: The server cannot be reached.
    """

    client = OrderClient(base_url, timeout=timeout)
    response = await client.put_order_with_response(id, order)
    return response.status


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Places an order with the order service.")
    parser.add_argument("--url", default=DEFAULT_URL, help="base URL of the order service")
    parser.add_argument("--id", default="234578", help="order identifier")
    parser.add_argument(
        "--item",
        default=OrderItem.TeaTableGreen.value,
        choices=[item.value for item in OrderItem],
        help="item to order",
    )
    parser.add_argument("--price", type=int, default=14, help="price of the item")
    parser.add_argument("--timeout", type=float, default=None, help="request timeout in seconds")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    order = Order(item=OrderItem(args.item), price=args.price)
    try:
        status = asyncio.run(place_order(args.url, args.id, order, timeout=args.timeout))
    except ProxyTransportError as e:
        logger.error("%s", e)
        sys.exit(1)

    print(status)


if __name__ == "__main__":
    main()
