"""
Command line storefront.

Usage:
    python -m storefront login alice@example.com secret
    python -m storefront products --search milk
    python -m storefront add <product_id> --quantity 2
    python -m storefront cart
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from dotenv import load_dotenv

from storefront.app import StorefrontApp
from storefront.cart.models import Cart
from storefront.errors import StorefrontError
from storefront.logging import setup_logging
from storefront.services.money import format_money
from storefront.ui import Notice, NoticeLevel


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront", description="Grocery storefront client")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Sign in and store the session token")
    login.add_argument("email")
    login.add_argument("password")
    login.add_argument("--admin", action="store_true", help="Use the admin login endpoint")

    sub.add_parser("logout", help="Forget the stored session")
    sub.add_parser("whoami", help="Show the signed-in user")

    products = sub.add_parser("products", help="List products")
    products.add_argument("--search", default=None)
    products.add_argument("--category", default=None)
    products.add_argument("--page", type=int, default=None)
    products.add_argument("--limit", type=int, default=None)
    products.add_argument("--featured", action="store_true")

    sub.add_parser("cart", help="Show the cart")

    add = sub.add_parser("add", help="Add a product to the cart")
    add.add_argument("product_id")
    add.add_argument("--quantity", "-q", type=int, default=1)

    set_cmd = sub.add_parser("set", help="Set the quantity of a cart line (0 removes it)")
    set_cmd.add_argument("product_id")
    set_cmd.add_argument("quantity", type=int)

    remove = sub.add_parser("remove", help="Remove a product from the cart")
    remove.add_argument("product_id")

    sub.add_parser("clear", help="Empty the cart")
    sub.add_parser("offers", help="List running offers")
    return parser


def print_notice(notice: Notice) -> None:
    stream = sys.stderr if notice.level == NoticeLevel.ERROR else sys.stdout
    print(f"[{notice.level.value}] {notice.message}", file=stream)


def print_cart(cart: Cart) -> None:
    if cart.is_empty:
        print("Cart is empty")
        return
    for item in cart.items:
        print(f"{item.product_id}  {item.name}  {item.quantity} x {format_money(item.price)} {item.unit}  = {format_money(item.subtotal)}")
    print(f"Total: {format_money(cart.total)}")


async def run(args: argparse.Namespace, app: StorefrontApp) -> int:
    app.notifier.subscribe(print_notice)
    await app.start()
    command = args.command

    if command == "login":
        login = app.session.admin_login if args.admin else app.session.login
        user = await login(args.email, args.password)
        print(f"Signed in as {user.name} <{user.email}>")
        return 0

    if command == "logout":
        await app.session.logout()
        print("Signed out")
        return 0

    if command == "whoami":
        if not app.session.is_authenticated:
            print("Not signed in")
            return 1
        user = app.session.user
        print(f"{user.name} <{user.email}> ({user.role.value})")
        return 0

    if command == "products":
        page = await app.products.get_products(
            category=args.category,
            search=args.search,
            page=args.page,
            limit=args.limit,
            featured=args.featured or None,
        )
        for product in page.products:
            print(f"{product.id}  {product.name}  {format_money(product.price)} / {product.unit}")
        print(f"Page {page.pagination.current_page}/{page.pagination.total_pages}")
        return 0

    if command == "offers":
        for offer in await app.offers.list_offers():
            print(f"{offer.code}  {offer.title}  {offer.discount_type.value} {offer.value}")
        return 0

    cart = app.cart
    if command == "cart":
        if not app.session.is_authenticated:
            print("Not signed in")
            return 1
        print_cart(cart.cart)
        return 0

    if command == "add":
        product = await app.products.get_product(args.product_id)
        ok = await cart.add_to_cart(product, args.quantity)
    elif command == "set":
        ok = await cart.update_quantity(args.product_id, args.quantity)
    elif command == "remove":
        ok = await cart.remove_from_cart(args.product_id)
    elif command == "clear":
        ok = await cart.clear_cart()
    else:
        raise ValueError(f"Unknown command: {command}")

    if ok:
        print_cart(cart.cart)
    return 0 if ok else 1


async def amain(argv: Optional[List[str]] = None, app: Optional[StorefrontApp] = None) -> int:
    args = build_parser().parse_args(argv)
    app = app or StorefrontApp()
    try:
        return await run(args, app)
    except StorefrontError as e:
        # Most failures were already echoed as a notice
        last = app.notifier.last
        if last is None or last.message != e.message:
            print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        await app.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    # Pick up STOREFRONT_* settings from a local .env
    load_dotenv()
    setup_logging()
    return asyncio.run(amain(argv))
