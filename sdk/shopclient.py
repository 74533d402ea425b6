# sdk/shopclient.py
import time
from typing import List, Optional, Tuple

import httpx
import requests

from coffeeshop.database import ProductNotFoundError
from coffeeshop.models import Product


class CoffeeShopClient:
    def __init__(self, base_url: str = "http://localhost:8088", timeout: float = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # any requests-compatible session works, e.g. a fastapi TestClient
        self.session = session if session is not None else requests.Session()

    def list_products(self) -> List[Product]:
        r = self.session.get(f"{self.base_url}/products", timeout=self.timeout)
        r.raise_for_status()
        return [Product.model_validate(p) for p in r.json()]

    def get_product(self, product_id: str) -> Product:
        r = self.session.get(f"{self.base_url}/products/{product_id}", timeout=self.timeout)
        if r.status_code == 404 and r.text.strip() == "product not found":
            raise ProductNotFoundError(product_id)
        r.raise_for_status()
        return Product.model_validate(r.json())

    # Latency probe: returns (status code, seconds elapsed)
    def timed_get(self, path: str = "/products") -> Tuple[int, float]:
        started = time.perf_counter()
        r = self.session.get(f"{self.base_url}/{path.lstrip('/')}", timeout=self.timeout)
        return r.status_code, time.perf_counter() - started

    async def get_product_async(self, product_id: str, client: Optional[httpx.AsyncClient] = None) -> Product:
        if client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as ac:
                return await self.get_product_async(product_id, ac)
        r = await client.get(f"{self.base_url}/products/{product_id}")
        if r.status_code == 404 and r.text.strip() == "product not found":
            raise ProductNotFoundError(product_id)
        r.raise_for_status()
        return Product.model_validate(r.json())
