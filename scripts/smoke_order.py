"""Create (and optionally capture) one order against a running relay."""

import argparse
import asyncio
import json
import time

import httpx


async def create_order(client: httpx.AsyncClient, base_url: str, amount: str, currency: str, payee: str):
    """Call `POST /create-order` and return (status_code, body, latency_ms)."""

    started = time.perf_counter()
    resp = await client.post(
        f"{base_url}/create-order",
        json={"amount": amount, "currency": currency, "payeeEmail": payee},
    )
    latency = (time.perf_counter() - started) * 1000
    return resp.status_code, resp.json(), latency


async def capture_order(client: httpx.AsyncClient, base_url: str, order_id: str):
    started = time.perf_counter()
    resp = await client.post(f"{base_url}/capture-order", json={"orderID": order_id})
    latency = (time.perf_counter() - started) * 1000
    return resp.status_code, resp.text, latency


async def run(args: argparse.Namespace) -> int:
    async with httpx.AsyncClient(timeout=30.0) as client:
        status, body, latency = await create_order(client, args.base_url, args.amount, args.currency, args.payee)
        print(f"create status={status} latency_ms={latency:.2f}")
        print(json.dumps(body, indent=2))
        if status != 200:
            return 1
        if not args.capture_after:
            print(f"approve the order at {body['approveLink']} then rerun with --capture {body['orderID']}")
            return 0
        input(f"approve at {body['approveLink']} and press enter to capture...")
        status, text, latency = await capture_order(client, args.base_url, body["orderID"])
        print(f"capture status={status} latency_ms={latency:.2f}")
        print(text)
        return 0 if status == 200 else 1


async def run_capture(base_url: str, order_id: str) -> int:
    async with httpx.AsyncClient(timeout=30.0) as client:
        status, text, latency = await capture_order(client, base_url, order_id)
    print(f"capture status={status} latency_ms={latency:.2f}")
    print(text)
    return 0 if status == 200 else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--base-url", default="http://localhost:3000")
    parser.add_argument("--amount", default="10.00")
    parser.add_argument("--currency", default="USD")
    parser.add_argument("--payee", default="merchant@example.com")
    parser.add_argument("--capture", metavar="ORDER_ID", help="capture an already approved order and exit")
    parser.add_argument("--capture-after", action="store_true", help="wait for approval, then capture")
    args = parser.parse_args()
    if args.capture:
        raise SystemExit(asyncio.run(run_capture(args.base_url, args.capture)))
    raise SystemExit(asyncio.run(run(args)))
