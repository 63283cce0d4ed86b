# cli.py
import argparse
import shlex
import sys
from typing import Any, Dict, List, Optional

import requests
from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.tree import Tree

from marketflow.cart import CartStore, JsonFileStorage
from marketflow.category_tree import walk
from marketflow.checkout import build_order, compute_totals, history_breakdown, order_breakdown
from marketflow.config import Settings, get_settings
from marketflow.errors import StoreError
from marketflow.log import setup_logging
from marketflow.models import Category, Order, Product, ShippingAddress
from sdk.client import StoreClient

console = Console()

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})

STATUS_STYLES = {
    "pending": "yellow",
    "processing": "cyan",
    "shipped": "blue",
    "delivered": "green",
    "cancelled": "red",
}


def money(value: float) -> str:
    return f"${value:.2f}"


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="📦 Products Catalog",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=6)
    table.add_column("Title", style="bold", width=28)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Stock", justify="right", width=8)
    table.add_column("Category", width=15)
    table.add_column("Seller", width=12)

    for p in products:
        table.add_row(
            str(p.get("Id", "N/A")),
            p.get("title", "N/A"),
            money(p.get("price", 0)),
            str(p.get("stock", 0)),
            p.get("category", "N/A"),
            p.get("sellerId", "N/A"),
        )
    console.print(table)


def show_cart(cart: CartStore):
    items = cart.items
    if not items:
        console.print(Panel("Your cart is empty 🛍️", title="🛒 Shopping Cart", style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("ID", style="dim", width=6)
    table.add_column("Product", style="bold", width=30)
    table.add_column("Qty", justify="right", width=8)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Subtotal", justify="right", width=12)
    for it in items:
        table.add_row(
            str(it.product_id), it.title, str(it.quantity),
            money(it.price), money(it.price * it.quantity),
        )

    totals = compute_totals(items)
    shipping = "Free" if totals.shipping == 0 else money(totals.shipping)
    footer = (
        f"Subtotal {money(totals.subtotal)} · Shipping {shipping} · "
        f"Tax {money(totals.tax)} · [bold green]Total {money(totals.total)}[/bold green]"
    )
    console.print(Panel(table, title=f"🛒 Shopping Cart ({cart.item_count} items)", border_style="blue"))
    console.print(footer)


def show_category_tree(categories: List[Dict[str, Any]]):
    records = [Category.model_validate(c) for c in categories]
    root = Tree("🏷️ Categories")
    path: List[Tree] = []
    for category, depth in walk(records):
        del path[depth:]
        parent = path[-1] if path else root
        path.append(parent.add(f"{category.name} [dim]#{category.id}[/dim]"))
    console.print(root)


def show_orders(orders: List[Dict[str, Any]]):
    if not orders:
        console.print("[italic yellow]No orders found[/italic yellow]")
        return

    table = Table(
        title="📋 Orders",
        box=box.ROUNDED,
        header_style="bold yellow",
        title_style="bold yellow",
        show_lines=True
    )
    table.add_column("Order ID", style="dim", width=8)
    table.add_column("Placed", width=20)
    table.add_column("Status", width=12)
    table.add_column("Items", justify="right", width=8)
    table.add_column("Shipping", justify="right", width=10)
    table.add_column("Total", justify="right", width=12)
    table.add_column("Reviewable", width=10)

    for o in orders:
        status = o.get("status", "N/A")
        style = STATUS_STYLES.get(status, "white")
        parts = history_breakdown(Order.model_validate(o))
        table.add_row(
            str(o.get("Id")),
            str(o.get("createdAt", ""))[:19].replace("T", " "),
            f"[{style}]{status}[/{style}]",
            str(sum(int(i.get("quantity", 1)) for i in o.get("items", []))),
            money(parts.shipping),
            money(o.get("total", 0)),
            "yes" if o.get("reviewable") else "no",
        )
    console.print(table)


def show_order(order: Dict[str, Any]):
    record = Order.model_validate(order)
    parts = order_breakdown(record)
    address = record.shipping_address
    lines = [
        f"Status: [bold]{record.status.value}[/bold]",
        f"Ship to: {address.name}, {address.address}, {address.city}, {address.state} {address.zip_code}",
        "",
    ]
    lines += [f"  #{i.product_id} x{i.quantity} @ {money(i.price)}" for i in record.items]
    lines += [
        "",
        f"Subtotal {money(parts.subtotal)} · Shipping {money(parts.shipping)} · Tax {money(parts.tax)}",
        f"[bold green]Total {money(parts.total)}[/bold green]",
    ]
    console.print(Panel.fit("\n".join(lines), title=f"🧾 Order {record.id}"))


def show_reviews(reviews: List[Dict[str, Any]], stats: Optional[Dict[str, Any]] = None):
    if stats:
        dist = stats.get("ratingDistribution", {})
        bars = "  ".join(f"{star}★ {dist.get(str(star), dist.get(star, 0))}" for star in range(5, 0, -1))
        console.print(Panel.fit(
            f"[bold]{stats.get('averageRating', 0)}[/bold] average from "
            f"{stats.get('totalReviews', 0)} reviews\n{bars}",
            title="⭐ Rating",
        ))
    if not reviews:
        console.print("[italic yellow]No reviews yet[/italic yellow]")
        return

    table = Table(box=box.ROUNDED, header_style="bold magenta", show_lines=True)
    table.add_column("ID", style="dim", width=6)
    table.add_column("Rating", width=8)
    table.add_column("Buyer", width=18)
    table.add_column("Comment", width=40)
    table.add_column("Helpful", justify="right", width=8)
    for r in reviews:
        table.add_row(
            str(r.get("Id")),
            "★" * int(r.get("rating", 0)),
            r.get("buyerName", ""),
            r.get("comment", ""),
            str(r.get("helpful", 0)),
        )
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper with exception handling
# ---------------------------
def error_detail(e: requests.HTTPError) -> str:
    try:
        return str(e.response.json().get("detail", e))
    except ValueError:
        return str(e)


def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """Call fn with a spinner; report failures and return None instead of raising."""
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)
    except requests.HTTPError as e:
        console.print(show_status(f"Error: {error_detail(e)}", False))
        return None
    except (requests.RequestException, StoreError) as e:
        console.print(show_status(f"Error: {e}", False))
        return None

    if success_msg:
        console.print(show_status(success_msg, True))
    return result


# ---------------------------
# Commands
# ---------------------------
def cmd_products(args, client: StoreClient, cart: CartStore):
    products = try_api(client.list_products, args.category, args.seller)
    if products is not None:
        show_products(products)


def cmd_search(args, client: StoreClient, cart: CartStore):
    products = try_api(client.search_products, args.term)
    if products is not None:
        show_products(products)


def cmd_product(args, client: StoreClient, cart: CartStore):
    product = try_api(client.get_product, args.product_id)
    if product:
        show_products([product])


def cmd_categories(args, client: StoreClient, cart: CartStore):
    categories = try_api(client.list_categories)
    if categories is not None:
        show_category_tree(categories)


def cmd_cart(args, client: StoreClient, cart: CartStore):
    show_cart(cart)


def cmd_add(args, client: StoreClient, cart: CartStore):
    raw = try_api(client.get_product, args.product_id)
    if not raw:
        return
    product = Product.model_validate(raw)
    try:
        cart.add_to_cart(product, args.qty)
    except StoreError as e:
        console.print(show_status(f"Error: {e}", False))
        return
    console.print(show_status(f"Added {args.qty} x {product.title}"))
    show_cart(cart)


def cmd_remove(args, client: StoreClient, cart: CartStore):
    cart.remove_from_cart(args.product_id)
    show_cart(cart)


def cmd_qty(args, client: StoreClient, cart: CartStore):
    cart.update_quantity(args.product_id, args.quantity)
    show_cart(cart)


def cmd_clear(args, client: StoreClient, cart: CartStore):
    cart.clear_cart()
    console.print(show_status("Cart cleared"))


def cmd_checkout(args, client: StoreClient, cart: CartStore):
    address = ShippingAddress(
        name=args.name, email=args.email, phone=args.phone,
        address=args.address, city=args.city, state=args.state, zip_code=args.zip,
    )
    order_in = try_api(build_order, cart.items, address, args.buyer_id)
    if order_in is None:
        return
    order = try_api(client.create_order, order_in.model_dump(mode="json", by_alias=True))
    if not order:
        return
    cart.clear_cart()
    console.print(Panel.fit(
        f"[green]Order placed successfully![/green]\n"
        f"Order ID: [bold]{order['Id']}[/bold]\n"
        f"Total: [bold]{money(order['total'])}[/bold]",
        title="✅ Order Confirmation"
    ))


def cmd_orders(args, client: StoreClient, cart: CartStore):
    orders = try_api(client.list_orders, args.buyer_id, args.status)
    if orders is not None:
        show_orders(orders)


def cmd_order(args, client: StoreClient, cart: CartStore):
    order = try_api(client.get_order, args.order_id)
    if order:
        show_order(order)


def cmd_order_status(args, client: StoreClient, cart: CartStore):
    order = try_api(
        client.update_order_status, args.order_id, args.status,
        success_msg=f"Order {args.order_id} is now {args.status}",
    )
    if order:
        show_orders([order])


def cmd_reviews(args, client: StoreClient, cart: CartStore):
    reviews = try_api(client.product_reviews, args.product_id)
    stats = try_api(client.product_stats, args.product_id)
    if reviews is not None:
        show_reviews(reviews, stats)


def cmd_review(args, client: StoreClient, cart: CartStore):
    review = try_api(client.create_review, {
        "productId": args.product_id,
        "buyerId": args.buyer_id,
        "rating": args.rating,
        "comment": args.comment,
        "buyerName": args.name,
    }, success_msg="Thanks for your review!")
    if review:
        show_reviews([review])


def cmd_helpful(args, client: StoreClient, cart: CartStore):
    review = try_api(client.mark_helpful, args.review_id)
    if review:
        show_reviews([review])


def cmd_seller_add(args, client: StoreClient, cart: CartStore):
    product = try_api(client.create_product, {
        "title": args.title,
        "description": args.description,
        "price": args.price,
        "category": args.category,
        "stock": args.stock,
        "images": args.image,
        "sellerId": args.seller,
    }, success_msg="Product created successfully!")
    if product:
        show_products([product])


def cmd_seller_update(args, client: StoreClient, cart: CartStore):
    changes = {
        "title": args.title,
        "description": args.description,
        "price": args.price,
        "category": args.category,
        "stock": args.stock,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        console.print(show_status("Nothing to update", False))
        return
    product = try_api(
        client.update_product, args.product_id, changes,
        success_msg="Product updated successfully!",
    )
    if product:
        show_products([product])


def cmd_seller_delete(args, client: StoreClient, cart: CartStore):
    try_api(client.delete_product, args.product_id, success_msg="Product deleted successfully!")


def cmd_category_add(args, client: StoreClient, cart: CartStore):
    category = try_api(
        client.create_category, args.name, args.parent,
        success_msg=f"Category {args.name} created",
    )
    if category:
        cmd_categories(args, client, cart)


def cmd_category_delete(args, client: StoreClient, cart: CartStore):
    try_api(client.delete_category, args.category_id, success_msg=f"Category {args.category_id} deleted")



COMMANDS = {
    "products": cmd_products,
    "search": cmd_search,
    "product": cmd_product,
    "categories": cmd_categories,
    "cart": cmd_cart,
    "add": cmd_add,
    "remove": cmd_remove,
    "qty": cmd_qty,
    "clear": cmd_clear,
    "checkout": cmd_checkout,
    "orders": cmd_orders,
    "order": cmd_order,
    "order-status": cmd_order_status,
    "reviews": cmd_reviews,
    "review": cmd_review,
    "helpful": cmd_helpful,
    "seller-add": cmd_seller_add,
    "seller-update": cmd_seller_update,
    "seller-delete": cmd_seller_delete,
    "category-add": cmd_category_add,
    "category-delete": cmd_category_delete,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="marketflow", description="MarketFlow storefront CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---------------------------
    # Catalog commands
    # ---------------------------
    lp = subparsers.add_parser("products", help="List products")
    lp.add_argument("--category", help="Filter products by category")
    lp.add_argument("--seller", help="Filter products by seller ID")

    sp = subparsers.add_parser("search", help="Search title, description and category")
    sp.add_argument("term")

    gp = subparsers.add_parser("product", help="Show one product")
    gp.add_argument("product_id", type=int)

    subparsers.add_parser("categories", help="Show the category tree")

    # ---------------------------
    # Cart commands
    # ---------------------------
    subparsers.add_parser("cart", help="Show the cart")

    add = subparsers.add_parser("add", help="Add a product to the cart")
    add.add_argument("product_id", type=int)
    add.add_argument("--qty", type=int, default=1)

    rm = subparsers.add_parser("remove", help="Remove a product from the cart")
    rm.add_argument("product_id", type=int)

    qty = subparsers.add_parser("qty", help="Set a cart line quantity (0 removes it)")
    qty.add_argument("product_id", type=int)
    qty.add_argument("quantity", type=int)

    subparsers.add_parser("clear", help="Empty the cart")

    # ---------------------------
    # Order commands
    # ---------------------------
    co = subparsers.add_parser("checkout", help="Place an order for the cart")
    co.add_argument("--name", required=True)
    co.add_argument("--email", required=True)
    co.add_argument("--phone")
    co.add_argument("--address", required=True)
    co.add_argument("--city", required=True)
    co.add_argument("--state", required=True)
    co.add_argument("--zip", required=True)
    co.add_argument("--buyer-id", type=int)

    lo = subparsers.add_parser("orders", help="List orders")
    lo.add_argument("--buyer-id", type=int)
    lo.add_argument("--status")

    go = subparsers.add_parser("order", help="Show one order with its price breakdown")
    go.add_argument("order_id", type=int)

    us = subparsers.add_parser("order-status", help="Move an order to a new status")
    us.add_argument("order_id", type=int)
    us.add_argument("status")

    # ---------------------------
    # Review commands
    # ---------------------------
    lr = subparsers.add_parser("reviews", help="Show reviews and rating stats for a product")
    lr.add_argument("product_id", type=int)

    cr = subparsers.add_parser("review", help="Write a review")
    cr.add_argument("product_id", type=int)
    cr.add_argument("--buyer-id", type=int, required=True)
    cr.add_argument("--rating", type=int, required=True)
    cr.add_argument("--comment", required=True)
    cr.add_argument("--name")

    hp = subparsers.add_parser("helpful", help="Mark a review as helpful")
    hp.add_argument("review_id", type=int)

    # ---------------------------
    # Seller commands
    # ---------------------------
    sa = subparsers.add_parser("seller-add", help="List a new product")
    sa.add_argument("title")
    sa.add_argument("--price", type=float, required=True)
    sa.add_argument("--category", required=True)
    sa.add_argument("--stock", type=int, default=0)
    sa.add_argument("--image", action="append", required=True, help="Image URL (repeatable)")
    sa.add_argument("--description", default="")
    sa.add_argument("--seller", default="seller-1")

    su = subparsers.add_parser("seller-update", help="Change fields of a listed product")
    su.add_argument("product_id", type=int)
    su.add_argument("--title")
    su.add_argument("--price", type=float)
    su.add_argument("--category")
    su.add_argument("--stock", type=int)
    su.add_argument("--description")

    sd = subparsers.add_parser("seller-delete", help="Remove a listed product")
    sd.add_argument("product_id", type=int)

    ca = subparsers.add_parser("category-add", help="Create a category")
    ca.add_argument("name")
    ca.add_argument("--parent", type=int, help="Parent category ID")

    cd = subparsers.add_parser("category-delete", help="Delete a category without subcategories")
    cd.add_argument("category_id", type=int)

    subparsers.add_parser("shell", help="Interactive prompt with command completion")
    return parser


def shell(parser: argparse.ArgumentParser, client: StoreClient, cart: CartStore):
    completer = WordCompleter(sorted(COMMANDS) + ["help", "quit", "exit"], ignore_case=True)
    console.print(Panel.fit("[bold blue]MarketFlow shell[/bold blue]  type [cyan]help[/cyan] or [cyan]quit[/cyan]"))
    while True:
        try:
            line = prompt("marketflow> ", completer=completer, style=custom_style).strip()
        except EOFError:
            break
        if not line:
            continue
        if line in ("quit", "exit"):
            break
        if line == "help":
            parser.print_help()
            continue
        try:
            args = parser.parse_args(shlex.split(line))
        except SystemExit:
            continue
        if args.command == "shell":
            continue
        COMMANDS[args.command](args, client, cart)


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None, client: Optional[StoreClient] = None):
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    parser = build_parser()
    args = parser.parse_args(argv)

    client = client or StoreClient(base_url=settings.api_base_url)
    cart = CartStore(JsonFileStorage(settings.cart_path))
    if args.command == "shell":
        shell(parser, client, cart)
    else:
        COMMANDS[args.command](args, client, cart)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
