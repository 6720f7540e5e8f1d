import os
import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import argparse
import concurrent.futures
from collections import Counter

import requests

BASE = os.environ.get("STOREFRONT_BASE", "http://127.0.0.1:8000")


def add_size_task(i, product_id, size, stock):
    payload = {"size": size, "stock_quantity": stock}
    try:
        r = requests.post(f"{BASE}/api/admin/products/{product_id}/sizes", json=payload, timeout=10)
        return (i, "add", r.status_code, r.json().get("error"))
    except Exception as e:
        return (i, "add", "ERR", str(e))


def associate_task(i, product_id, category_id):
    try:
        r = requests.post(
            f"{BASE}/api/admin/products/{product_id}/categories",
            json={"categoryId": category_id},
            timeout=10,
        )
        return (i, "associate", r.status_code, (r.json().get("data") or {}).get("created"))
    except Exception as e:
        return (i, "associate", "ERR", str(e))


def run_size_race(workers, product_id, size, stock):
    """Exactly one worker should get 201; the rest 409 with the duplicate message."""
    print(f"Running size race: workers={workers}, product={product_id}, size={size}")
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(add_size_task, i, product_id, size, stock) for i in range(workers)]
        results = [f.result() for f in futures]
    for r in results:
        print(r)
    print("Status counts:", dict(Counter(r[2] for r in results)))


def run_associate_race(workers, product_id, category_id):
    """Every worker should get 200 and exactly one should report created=True."""
    print(f"Running association race: workers={workers}, product={product_id}, category={category_id}")
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(associate_task, i, product_id, category_id) for i in range(workers)]
        results = [f.result() for f in futures]
    for r in results:
        print(r)
    print("Created flags:", dict(Counter(r[3] for r in results)))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrency test tool (sizes or categories).")
    sub = parser.add_subparsers(dest="mode", required=True)

    s = sub.add_parser("sizes")
    s.add_argument("--product", type=int, default=1)
    s.add_argument("--size", default="XG")
    s.add_argument("--stock", type=int, default=1)
    s.add_argument("--workers", type=int, default=8)

    c = sub.add_parser("categories")
    c.add_argument("--product", type=int, default=1)
    c.add_argument("--category", type=int, default=1)
    c.add_argument("--workers", type=int, default=8)

    args = parser.parse_args()

    if args.mode == "sizes":
        run_size_race(args.workers, args.product, args.size, args.stock)
    elif args.mode == "categories":
        run_associate_race(args.workers, args.product, args.category)
