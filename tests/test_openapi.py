import io
import json
import os.path
import tempfile
import unittest
from typing import Any

from endpoint import OrderBook

from orderapi.operations import HTTPMethod
from orderapi.order import OrderAPI, make_options
from orderapi.utility import Specification, get_json_path
from orderapi.validation import SchemaValidator


class TestOpenAPI(unittest.TestCase):
    specification: Specification
    doc: Any

    def setUp(self) -> None:
        super().setUp()
        self.specification = Specification(OrderAPI, make_options("http://example.com/api"))
        self.doc = self.specification.get_json()

    def test_document(self) -> None:
        self.assertEqual(self.doc["openapi"], "3.1.0")
        self.assertEqual(self.doc["info"]["title"], "Order API")
        self.assertEqual(self.doc["servers"], [{"url": "http://example.com/api"}])
        self.assertEqual(list(self.doc["paths"].keys()), ["/order/{id}"])
        self.assertEqual(list(self.doc["paths"]["/order/{id}"].keys()), ["put"])

    def test_operation(self) -> None:
        operation = self.doc["paths"]["/order/{id}"]["put"]
        self.assertEqual(operation["operationId"], "put_order")

        (parameter,) = operation["parameters"]
        self.assertEqual(parameter["name"], "id")
        self.assertEqual(parameter["in"], "path")
        self.assertTrue(parameter["required"])
        self.assertEqual(parameter["schema"]["type"], "string")

        request_body = operation["requestBody"]
        self.assertTrue(request_body["required"])
        self.assertEqual(list(request_body["content"].keys()), ["application/json"])
        self.assertEqual(request_body["content"]["application/json"]["schema"], {"$ref": "#/components/schemas/Order"})

    def test_get_operation(self) -> None:
        op = self.specification.get_operation(HTTPMethod.PUT, "/order/{id}")
        self.assertIsNotNone(op)
        assert op is not None
        self.assertEqual(op.func_name, "put_order")
        self.assertIsNone(self.specification.get_operation(HTTPMethod.GET, "/order/{id}"))

    def test_responses(self) -> None:
        responses = self.doc["paths"]["/order/{id}"]["put"]["responses"]
        self.assertEqual(sorted(responses.keys()), ["201", "400", "415", "500"])
        self.assertNotIn("content", responses["201"])
        for code in ("400", "415", "500"):
            schema = responses[code]["content"]["application/json"]["schema"]
            self.assertEqual(schema["required"], ["error"])

    def test_order_schema(self) -> None:
        definitions = get_json_path(self.doc, "components", "schemas")
        self.assertIsInstance(definitions, dict)
        self.assertIn("Order", definitions)

        validator = SchemaValidator(definitions)
        schema = {"$ref": "#/components/schemas/Order"}
        self.assertTrue(validator.is_valid(schema, {"item": "Tea Table Green", "price": 14}))
        self.assertTrue(validator.is_valid(schema, {"item": "Tea Table Red"}))
        self.assertTrue(validator.is_valid(schema, {"price": -3}))
        self.assertTrue(validator.is_valid(schema, {}))
        self.assertFalse(validator.is_valid(schema, {"item": "Nonexistent Item"}))
        self.assertFalse(validator.is_valid(schema, {"price": "14"}))
        self.assertFalse(validator.is_valid(schema, {"price": 1.5}))
        self.assertFalse(validator.is_valid(schema, []))

    def test_query_parameters(self) -> None:
        doc: Any = Specification(OrderBook, make_options()).get_json()
        parameters = doc["paths"]["/order/{id}"]["get"]["parameters"]
        self.assertEqual([(p["name"], p["in"], p["required"]) for p in parameters], [("id", "path", True), ("verbose", "query", False)])
        self.assertIn("delete", doc["paths"]["/order/{id}"])
        self.assertIn("patch", doc["paths"]["/order/{id}/price"])
        self.assertIn("get", doc["paths"]["/count"])
        self.assertIn("200", doc["paths"]["/order/{id}"]["get"]["responses"])

    def test_json(self) -> None:
        with io.StringIO() as f:
            self.specification.write_json(f, pretty_print=True)
            self.assertEqual(json.loads(f.getvalue()), self.doc)

        self.assertEqual(json.loads(self.specification.get_json_string()), self.doc)

    def test_yaml(self) -> None:
        try:
            import yaml
        except ImportError:
            self.skipTest("package PyYAML is required for `*.yaml` output")

        with tempfile.TemporaryDirectory() as root:
            path = os.path.join(root, "openapi.yaml")
            with open(path, "w", encoding="utf-8") as f:
                yaml.dump(self.specification.get_json(), f, allow_unicode=True)
            with open(path, "r", encoding="utf-8") as f:
                self.assertEqual(yaml.safe_load(f), self.doc)


if __name__ == "__main__":
    unittest.main()
