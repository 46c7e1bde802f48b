"""scripts/show_customer.py

Fetch a customer from a running API and print it with its orders resolved.
Looks the customer up by id when given, otherwise prints every customer.

Usage (PowerShell):
    $env:API_BASE_URL = 'http://localhost:8000'
    python ./scripts/show_customer.py --customer-id 665f1c...

"""
from __future__ import annotations
import os
import argparse
from typing import Optional

import requests
from dotenv import load_dotenv


load_dotenv()


def try_get(url: str, params: dict | None = None, timeout: int = 10) -> Optional[requests.Response]:
    try:
        return requests.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        print(f"Request to {url} failed: {e}")
        return None


def _get_json(url: str, params: dict | None = None):
    r = try_get(url, params=params)
    if r is None:
        return None
    if r.status_code != 200:
        print(f"Received {r.status_code} from {url}: {r.text}")
        return None
    try:
        return r.json()
    except ValueError as e:
        print(f"Failed to parse JSON from {url}: {e}")
        return None


def fetch_customer(api_base: str, customer_id: str, keep_missing: bool = False):
    """Single customer with populated orders, or None."""
    url = f"{api_base.rstrip('/')}/customers/{customer_id}"
    params = {"populate": "true", "keep_missing": str(keep_missing).lower()}
    data = _get_json(url, params)
    if data is not None and not isinstance(data, dict):
        print("Expected a single customer object.")
        return None
    return data


def fetch_customers(api_base: str):
    """Every customer with populated orders, or None on error."""
    url = f"{api_base.rstrip('/')}/customers"
    data = _get_json(url, {"populate": "true"})
    if data is not None and not isinstance(data, list):
        print("Expected a list from the customers endpoint but got a single object.")
        return None
    return data


def format_customer(customer: dict) -> str:
    lines = [f"{customer['name']} ({customer['id']})"]
    orders = customer.get("orders") or []
    if not orders:
        lines.append("  no orders")
    for order in orders:
        if order is None:
            lines.append("  - <missing order>")
        else:
            lines.append(f"  - {order['item']}: {order['price']:g}")
    return "\n".join(lines)


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Print customers with their orders resolved",
    )
    parser.add_argument(
        "--api-base",
        default=os.environ.get("API_BASE_URL", "http://localhost:8000"),
        help="API base URL",
    )
    parser.add_argument("--customer-id", help="Only this customer")
    parser.add_argument(
        "--keep-missing",
        action="store_true",
        help="Show orders that no longer exist as placeholders",
    )
    args = parser.parse_args(argv)

    if args.customer_id:
        customer = fetch_customer(args.api_base, args.customer_id, args.keep_missing)
        if customer is None:
            return 1
        print(format_customer(customer))
        return 0

    customers = fetch_customers(args.api_base)
    if customers is None:
        return 1
    for customer in customers:
        print(format_customer(customer))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
