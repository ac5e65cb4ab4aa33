import asyncio
import socket
import unittest

from aiohttp import test_utils
from endpoint import LooseOrder, LooseOrderAPI, RecordingOrderService

from orderapi.client import OrderClient, place_order
from orderapi.client import main as client_main
from orderapi.order import Order, OrderItem
from orderapi.proxy import EndpointProxy, ProxyResponse, ProxyStatusError, ProxyTransportError, make_proxy_class
from orderapi.server import create_app


def get_unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestProxy(unittest.IsolatedAsyncioTestCase):
    service: RecordingOrderService
    server: test_utils.TestServer
    base_url: str

    async def asyncSetUp(self) -> None:
        self.service = RecordingOrderService()
        self.server = test_utils.TestServer(create_app(service=self.service))
        await self.server.start_server()
        self.base_url = f"http://{self.server.host}:{self.server.port}"

    async def asyncTearDown(self) -> None:
        await self.server.close()

    async def test_proxy_class(self) -> None:
        proxy = OrderClient(self.base_url)
        self.assertIsInstance(proxy, EndpointProxy)
        self.assertTrue(callable(getattr(proxy, "put_order")))
        self.assertTrue(callable(getattr(proxy, "put_order_with_response")))

    async def test_round_trip(self) -> None:
        orders = [
            Order(item=OrderItem.TeaTableGreen, price=14),
            Order(item=OrderItem.TeaTableRed),
            Order(price=0),
            Order(),
        ]
        proxy = OrderClient(self.base_url)
        for index, order in enumerate(orders):
            self.assertIsNone(await proxy.put_order(str(index), order))

        self.assertEqual([(r.id, r.order) for r in self.service.received], [(str(i), o) for i, o in enumerate(orders)])

    async def test_status(self) -> None:
        proxy = OrderClient(self.base_url)
        response = await proxy.put_order_with_response("234578", Order(item=OrderItem.TeaTableGreen, price=14))
        self.assertIsInstance(response, ProxyResponse)
        self.assertEqual(response.status, 201)
        self.assertTrue(response.ok)
        self.assertIsNone(response.value)

        (received,) = self.service.received
        self.assertEqual(received.id, "234578")
        self.assertEqual(received.order.item, OrderItem.TeaTableGreen)
        self.assertEqual(received.order.price, 14)

    async def test_place_order(self) -> None:
        status = await place_order(self.base_url, "234578", Order(item=OrderItem.TeaTableGreen, price=14))
        self.assertEqual(status, 201)

    async def test_quoted_identifier(self) -> None:
        proxy = OrderClient(self.base_url)
        await proxy.put_order("a b", Order(price=1))
        self.assertEqual(self.service.received[0].id, "a b")

    async def test_rejected(self) -> None:
        Proxy = make_proxy_class(LooseOrderAPI)
        proxy = Proxy(self.base_url)  # type: ignore[call-arg]

        response = await proxy.put_order_with_response("1", LooseOrder("Nonexistent Item"))  # type: ignore[attr-defined]
        self.assertEqual(response.status, 400)
        self.assertFalse(response.ok)

        with self.assertRaises(ProxyStatusError) as cm:
            await proxy.put_order("1", LooseOrder("Nonexistent Item"))  # type: ignore[attr-defined]
        self.assertEqual(cm.exception.status, 400)
        self.assertIn("ValidationError", cm.exception.body)

        self.assertEqual(self.service.received, [])


class TestTransport(unittest.IsolatedAsyncioTestCase):
    async def test_unreachable(self) -> None:
        base_url = f"http://127.0.0.1:{get_unused_port()}"
        proxy = OrderClient(base_url)
        with self.assertRaises(ProxyTransportError):
            await proxy.put_order("1", Order(price=1))
        with self.assertRaises(ProxyTransportError):
            await proxy.put_order_with_response("1", Order(price=1))
        with self.assertRaises(ProxyTransportError):
            await place_order(base_url, "234578", Order(item=OrderItem.TeaTableGreen, price=14), timeout=5)

    async def test_truncated_response(self) -> None:
        async def reply(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(b"HTTP/1.1 201 Created\r\nContent-Length: 100\r\n\r\nabc")
            await writer.drain()
            writer.close()

        server = await asyncio.start_server(reply, "127.0.0.1", 0)
        async with server:
            port = server.sockets[0].getsockname()[1]
            proxy = OrderClient(f"http://127.0.0.1:{port}")
            with self.assertRaises(ProxyTransportError):
                await proxy.put_order_with_response("1", Order(price=1))


class TestClientProgram(unittest.TestCase):
    def test_unreachable(self) -> None:
        with self.assertLogs("orderapi.client", level="ERROR"):
            with self.assertRaises(SystemExit) as cm:
                client_main(["--url", f"http://127.0.0.1:{get_unused_port()}", "--timeout", "5"])
        self.assertEqual(cm.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
