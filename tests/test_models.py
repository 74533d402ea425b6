# tests/test_models.py
import json

from coffeeshop.database import INVENTORY
from coffeeshop.models import Product, Property, encode_product, encode_products


def test_product_round_trip():
    for product in INVENTORY.values():
        decoded = Product.model_validate(json.loads(encode_product(product)))
        assert decoded == product


def test_inventory_round_trip_through_list_encoding():
    decoded = [Product.model_validate(p) for p in json.loads(encode_products(INVENTORY.values()))]
    assert {p.id: p for p in decoded} == INVENTORY


def test_empty_optional_fields_are_omitted():
    p = Product(id="9", type="Tea", brand="B", name="N")
    assert p.to_json_dict() == {"id": "9", "type": "Tea", "brand": "B", "name": "N"}
    assert Product.model_validate(json.loads(encode_product(p))) == p


def test_required_fields_kept_even_when_empty():
    p = Product(id="9", type="", brand="", name="", price="1.00")
    assert p.to_json_dict() == {"id": "9", "type": "", "brand": "", "name": "", "price": "1.00"}


def test_property_order_and_duplicates_preserved():
    props = [Property(name="note", value="b"), Property(name="note", value="a"), Property(name="x", value="")]
    p = Product(id="9", type="Tea", brand="B", name="N", properties=props)
    assert p.to_json_dict()["properties"] == [
        {"name": "note", "value": "b"},
        {"name": "note", "value": "a"},
        {"name": "x", "value": ""},
    ]


def test_quantity_and_price_stay_strings():
    p = INVENTORY["3"]
    data = json.loads(encode_product(p))
    assert data["quantity"] == "1000"
    assert data["price"] == "10.49"


def test_encode_products_empty():
    assert encode_products([]) == b"[]"
