# cli.py
import argparse
import statistics
import sys
from typing import List, Optional

import httpx
import requests
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from coffeeshop.database import ProductNotFoundError
from coffeeshop.models import Product
from sdk.shopclient import CoffeeShopClient

console = Console()

API_ERRORS = (ProductNotFoundError, requests.RequestException, httpx.HTTPError)


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Product]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="☕ Products Catalog",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True,
    )
    table.add_column("ID", style="dim", width=4)
    table.add_column("Brand", width=12)
    table.add_column("Name", style="bold", width=28)
    table.add_column("Quantity", justify="right", width=12)
    table.add_column("Price", justify="right", width=8)

    for p in products:
        quantity = f"{p.quantity} {p.unit}".strip()
        table.add_row(p.id, p.brand, p.name, quantity, p.price)
    console.print(table)


def show_product(product: Product):
    lines = [f"[bold]{product.brand} {product.name}[/bold] ({product.type})"]
    if product.quantity:
        lines.append(f"{product.quantity} {product.unit}".strip())
    if product.price:
        lines.append(f"Price: [green]{product.price}[/green]")
    for prop in product.properties:
        lines.append(f"[cyan]{prop.name}[/cyan]: {prop.value or '-'}")
    console.print(Panel.fit("\n".join(lines), title=f"Product {product.id}"))


def show_probe(path: str, samples: List[tuple]):
    table = Table(title=f"⏱ GET {path}", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Status", justify="right")
    table.add_column("Elapsed (ms)", justify="right")
    for i, (status, elapsed) in enumerate(samples, start=1):
        style = "green" if status < 400 else "red"
        table.add_row(str(i), f"[{style}]{status}[/{style}]", f"{elapsed * 1000:.1f}")
    console.print(table)
    timings = [elapsed * 1000 for _, elapsed in samples]
    console.print(
        f"min {min(timings):.1f} ms / median {statistics.median(timings):.1f} ms / max {max(timings):.1f} ms"
    )


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="coffeeshop CLI")
    parser.add_argument("--base-url", default="http://127.0.0.1:8088", help="Server URL")
    parser.add_argument("--timeout", type=float, default=10, help="Request timeout in seconds")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-products", help="List all products")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True, help="ID of the product")

    pr = subparsers.add_parser("probe", help="Time repeated requests to a route")
    pr.add_argument("--path", default="/products", help="Route to request")
    pr.add_argument("--count", type=int, default=5, help="Number of requests")
    return parser


def main(argv: Optional[List[str]] = None, client: Optional[CoffeeShopClient] = None) -> int:
    args = build_parser().parse_args(argv)
    if client is None:
        client = CoffeeShopClient(base_url=args.base_url, timeout=args.timeout)

    try:
        if args.command == "list-products":
            show_products(client.list_products())
        elif args.command == "get-product":
            show_product(client.get_product(args.product_id))
        elif args.command == "probe":
            samples = [client.timed_get(args.path) for _ in range(max(args.count, 1))]
            show_probe(args.path, samples)
    except API_ERRORS as e:
        console.print(show_status(f"Error: {e}", False))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
