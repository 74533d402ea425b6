# coffeeshop/models.py
import json
from typing import Any, Dict, Iterable, Tuple

from pydantic import BaseModel, ConfigDict


class Property(BaseModel):
    """Free-form descriptor attached to a product, e.g. flavour or intensity."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    brand: str
    name: str
    unit: str = ""
    quantity: str = ""
    price: str = ""
    properties: Tuple[Property, ...] = ()

    def to_json_dict(self) -> Dict[str, Any]:
        # optional fields are left out of the payload when empty
        return self.model_dump(mode="json", exclude_defaults=True)


def encode_products(products: Iterable[Product]) -> bytes:
    payload = [p.to_json_dict() for p in products]
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def encode_product(product: Product) -> bytes:
    payload = product.to_json_dict()
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
