# coffeeshop/database.py
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Union

from .models import Product, Property

# This file holds the product stores and the seed inventory served by the shop.


class ProductNotFoundError(LookupError):
    def __init__(self, product_id: str):
        super().__init__("product not found")
        self.product_id = product_id


class Store(ABC):
    """Read-only access to the products sold by the shop.

    Handlers only depend on this interface, so a database backed store can
    replace the in-memory one without touching the HTTP layer.
    """

    @abstractmethod
    def get_all(self) -> List[Product]:
        """Return every product held by the store, in no particular order."""

    @abstractmethod
    def get_product(self, product_id: str) -> Product:
        """Return the product with exactly this id.

        Raises ProductNotFoundError when the store has no such product.
        """


class MemoryStore(Store):
    """Store backed by an immutable in-memory snapshot.

    The snapshot is built once and never changes, so any number of request
    handlers can read it at the same time without locking. Products are frozen
    models and can be handed out directly.

    Use memory store for testing and development.
    """

    def __init__(self, products: Union[Mapping[str, Product], Iterable[Product]]):
        snapshot: Dict[str, Product] = {}
        if isinstance(products, Mapping):
            for key, product in products.items():
                if key != product.id:
                    raise ValueError(f"product stored under {key!r} has id {product.id!r}")
                snapshot[key] = product
        else:
            for product in products:
                if product.id in snapshot:
                    raise ValueError(f"duplicate product id {product.id!r}")
                snapshot[product.id] = product
        self._products = MappingProxyType(snapshot)

    @property
    def products(self) -> Mapping[str, Product]:
        return self._products

    def get_all(self) -> List[Product]:
        return list(self._products.values())

    def get_product(self, product_id: str) -> Product:
        try:
            return self._products[product_id]
        except KeyError:
            raise ProductNotFoundError(product_id) from None

    def __len__(self) -> int:
        return len(self._products)


def _coffee(product_id, brand, name, quantity, price, properties):
    return Product(
        id=product_id,
        type="Coffee",
        brand=brand,
        name=name,
        unit="gram",
        quantity=quantity,
        price=price,
        properties=tuple(Property(name=n, value=v) for n, v in properties),
    )


# Initial items served by the in-memory store.
INVENTORY: Dict[str, Product] = {
    p.id: p
    for p in (
        _coffee("1", "Segafredo", "Intermezzo", "1000", "7.99", [
            ("flavour", "Acidic Robusta, Nuts, Aromatic Arabica, Caramel, Medium roasted beans"),
            ("property", "1000 grams, Arabica/Robusta"),
            ("intensity", ""),
        ]),
        _coffee("2", "Segafredo", "Caffé Crema Gustoso", "1000", "11.99", [
            ("flavour", "Acidic Robusta, Nuts, Aromatic Arabica, Medium roasted beans"),
            ("property", "1000 grams, Arabica/Robusta"),
            ("intensity", "Medium (6/10)"),
        ]),
        _coffee("3", "Segafredo", "Selezione Espresso", "1000", "10.49", [
            ("flavour", "Dark Chocolate, Acidic Robusta, Dark roasted beans, Aromatic Arabica"),
            ("property", "1000 grams, Arabica/Robusta"),
        ]),
        _coffee("4", "illy", "Intenso", "250", "7.99", [
            ("flavour", "Fruit, Chocolate, Dark roasted beans, Bitterness"),
            ("property", "250 grams, Arabica"),
            ("intensity", "Very strong (9/10)"),
        ]),
        _coffee("5", "illy", "Guatemala", "250", "7.99", [
            ("flavour", "Honey, Caramel, Sweetness"),
            ("property", "250 gram, Arabica"),
            ("intensity", "Medium (6/10)"),
        ]),
        _coffee("6", "Lavazza", "Espresso Barista Perfetto", "1000", "12.99", [
            ("flavour", "Aromatic Arabica, Medium roasted beans"),
            ("property", "250 gram, Arabica"),
            ("intensity", "Medium (6/10)"),
        ]),
    )
}
