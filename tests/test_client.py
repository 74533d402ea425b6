# tests/test_client.py
import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

import cli
from coffeeshop.config import ServerConfig
from coffeeshop.database import INVENTORY, MemoryStore, ProductNotFoundError
from coffeeshop.main import create_app
from sdk.shopclient import CoffeeShopClient

app = create_app(MemoryStore(INVENTORY), ServerConfig(latency="0ms"))
c = CoffeeShopClient(base_url="http://testserver", session=TestClient(app))


def test_list_products():
    products = c.list_products()
    assert {p.id: p for p in products} == INVENTORY


def test_get_product():
    assert c.get_product("5") == INVENTORY["5"]


def test_get_missing_product():
    with pytest.raises(ProductNotFoundError):
        c.get_product("999")


def test_timed_get():
    status, elapsed = c.timed_get("/products/1")
    assert status == 200
    assert elapsed >= 0


async def _get_async(product_id):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport) as ac:
        return await c.get_product_async(product_id, ac)


def test_get_product_async():
    assert asyncio.run(_get_async("6")) == INVENTORY["6"]
    with pytest.raises(ProductNotFoundError):
        asyncio.run(_get_async("999"))


def test_cli_list_products(capsys):
    assert cli.main(["list-products"], client=c) == 0
    out = capsys.readouterr().out
    assert "Intermezzo" in out
    assert "Lavazza" in out


def test_cli_get_product(capsys):
    assert cli.main(["get-product", "--product-id", "4"], client=c) == 0
    out = capsys.readouterr().out
    assert "Intenso" in out
    assert "Very strong (9/10)" in out


def test_cli_get_missing_product(capsys):
    assert cli.main(["get-product", "--product-id", "999"], client=c) == 1
    assert "product not found" in capsys.readouterr().out


def test_cli_probe(capsys):
    assert cli.main(["probe", "--path", "/products/2", "--count", "3"], client=c) == 0
    out = capsys.readouterr().out
    assert "200" in out
    assert "median" in out
