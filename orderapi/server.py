"""
Serve and call an OpenAPI order endpoint declared as a Python class definition

Copyright 2022-2025, Levente Hunyadi

:see: https://github.com/hunyadi/pyopenapi
"""

import argparse
import logging
from typing import Optional

from aiohttp import web

from .dispatcher import Dispatcher, RequestContext
from .options import Options
from .order import DEFAULT_HOST, DEFAULT_PORT, Order, OrderAPI, OrderServer, make_options
from .utility import Specification

logger = logging.getLogger(__name__)


class OrderService(OrderServer):
    "Accepts orders. Orders are logged, not stored."

    async def put_order(self, context: RequestContext, id: str, order: Order) -> None:
        logger.info("id: %s, order: %s [%s]", id, order, context.request_id)


def create_app(options: Optional[Options] = None, service: Optional[OrderServer] = None) -> web.Application:
    "Creates a web application that serves the order endpoint with the given service implementation."

    specification = Specification(OrderAPI, options or make_options())
    dispatcher = Dispatcher(specification, service if service is not None else OrderService())
    return dispatcher.make_app()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Serves the order endpoint over HTTP.")
    parser.add_argument("--host", default=DEFAULT_HOST, help="interface to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="TCP port to listen on")
    parser.add_argument("--debug", action="store_true", help="enable verbose logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    options = make_options(f"http://{args.host}:{args.port}")
    web.run_app(create_app(options), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
