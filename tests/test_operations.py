import unittest
from http import HTTPStatus
from typing import Optional

from endpoint import DoubleBodyAPI, OrderBook, OrderStatus, PriceChange, Status

from orderapi.decorators import webmethod
from orderapi.operations import EndpointOperation, HTTPMethod, get_endpoint_operations
from orderapi.order import Order, OrderAPI


def get_operation(endpoint: type, func_name: str) -> EndpointOperation:
    for op in get_endpoint_operations(endpoint):
        if op.func_name == func_name:
            return op
    raise KeyError(func_name)


class TestOperations(unittest.TestCase):
    def test_put_order(self) -> None:
        (op,) = get_endpoint_operations(OrderAPI)
        self.assertEqual(op.func_name, "put_order")
        self.assertEqual(op.name, "order")
        self.assertIs(op.http_method, HTTPMethod.PUT)
        self.assertEqual(op.get_route(), "/order/{id}")
        self.assertEqual(op.path_params, [("id", str)])
        self.assertEqual(op.query_params, [])
        self.assertEqual(op.request_param, ("order", Order))
        self.assertIsNone(op.response_type)
        self.assertEqual(op.status, HTTPStatus.CREATED)
        self.assertIs(op.defining_class, OrderAPI)

    def test_path_and_query(self) -> None:
        op = get_operation(OrderBook, "get_order")
        self.assertIs(op.http_method, HTTPMethod.GET)
        self.assertEqual(op.get_route(), "/order/{id}")
        self.assertEqual(op.path_params, [("id", str)])
        self.assertEqual(op.query_params, [("verbose", Optional[bool])])
        self.assertIsNone(op.request_param)
        self.assertIs(op.response_type, OrderStatus)

        op = get_operation(OrderBook, "get_count")
        self.assertEqual(op.get_route(), "/count")
        self.assertEqual(op.query_params, [("status", Status)])

    def test_method_prefixes(self) -> None:
        methods = {op.func_name: op.http_method for op in get_endpoint_operations(OrderBook)}
        self.assertEqual(
            methods,
            {
                "get_order": HTTPMethod.GET,
                "remove_order": HTTPMethod.DELETE,
                "update_price": HTTPMethod.PATCH,
                "get_count": HTTPMethod.GET,
            },
        )

    def test_custom_route(self) -> None:
        op = get_operation(OrderBook, "update_price")
        self.assertEqual(op.get_route(), "/order/{id}/price")
        self.assertEqual(op.request_param, ("change", PriceChange))

    def test_single_body(self) -> None:
        with self.assertRaises(ValueError):
            get_endpoint_operations(DoubleBodyAPI)

    def test_exclusive_examples(self) -> None:
        with self.assertRaises(ValueError):
            webmethod(request_example=Order(), request_examples=[Order()])
        with self.assertRaises(ValueError):
            webmethod(response_example=Order(), response_examples=[Order()])


if __name__ == "__main__":
    unittest.main()
