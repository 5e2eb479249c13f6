"""
Load Simulation Script

Fires a burst of random kebab orders at a running server to exercise
pricing, order-number allocation and image fallback under concurrency.
Run from project root: python scripts/simulate.py

Modes:
    --orders   place orders via /kebab-builder/create
    --images   request images via /kebab-builder/generate-images
    (default)  mix of both
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_REQUESTS = 50

# Sample data for random orders
FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Wilson", "Taylor"]
STREETS = ["Main St", "Broadway", "5th Avenue", "Park Ave", "Madison Ave", "Lexington Ave", "Amsterdam Ave"]
VALID_ZIPS = ["10001", "10002", "10003", "10004", "10005", "10006", "10007", "10008", "10009", "10010"]

SIZES = ["small", "medium", "large", "family"]
TORTILLAS = [20, 21, 22, 23]
PROTEINS = [1, 2, 3, 4]
TOPPINGS = list(range(5, 20))


def generate_random_customer(delivery: bool) -> dict[str, Any]:
    """Generate random customer info."""
    first = random.choice(FIRST_NAMES)
    last = random.choice(LAST_NAMES)
    customer: dict[str, Any] = {
        "name": f"{first} {last}",
        "email": f"{first.lower()}.{last.lower()}@example.com",
        "phone": f"555-{random.randint(100, 999)}-{random.randint(1000, 9999)}",
    }
    if delivery:
        customer["address"] = {
            "street": f"{random.randint(1, 999)} {random.choice(STREETS)}",
            "city": "New York",
            "state": "NY",
            "zipCode": random.choice(VALID_ZIPS),
        }
    return customer


def generate_random_selection() -> dict[str, Any]:
    """One tortilla, one or two proteins and a handful of toppings."""
    ingredients = [random.choice(TORTILLAS)]
    ingredients += random.sample(PROTEINS, random.randint(1, 2))
    ingredients += random.sample(TOPPINGS, random.randint(2, 6))
    return {"size": random.choice(SIZES), "selectedIngredients": ingredients}


def generate_order_payload() -> dict[str, Any]:
    """Generate payload for /kebab-builder/create."""
    delivery = random.random() < 0.5
    return {
        **generate_random_selection(),
        "customerInfo": generate_random_customer(delivery),
        "deliveryType": "delivery" if delivery else "pickup",
        "paymentMethod": random.choice(["cash", "card", "online"]),
        "specialInstructions": random.choice([
            None, "Extra napkins", "Cut in half", "No onions", "Extra spicy"
        ]),
    }


# =============================================================================
# ORDER SIMULATION
# =============================================================================

async def send_order(client: httpx.AsyncClient, request_num: int) -> dict[str, Any]:
    """Place a random order."""
    payload = generate_order_payload()
    start_time = time.time()

    try:
        response = await client.post(
            f"{API_BASE_URL}/kebab-builder/create",
            json=payload,
            timeout=30.0,
        )
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 201:
            order = response.json()["order"]
            return {
                "request_num": request_num,
                "success": True,
                "order_number": order.get("orderNumber"),
                "total": order.get("totalPrice"),
                "time": elapsed,
                "mode": "order",
            }
        return {
            "request_num": request_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
            "mode": "order",
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "request_num": request_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
            "mode": "order",
        }


# =============================================================================
# IMAGE SIMULATION
# =============================================================================

async def send_image_request(client: httpx.AsyncClient, request_num: int) -> dict[str, Any]:
    """Build prompts for a random selection, then request images."""
    start_time = time.time()

    try:
        prompts = await client.post(
            f"{API_BASE_URL}/kebab-builder/prompts",
            json=generate_random_selection(),
            timeout=10.0,
        )
        prompts.raise_for_status()

        response = await client.post(
            f"{API_BASE_URL}/kebab-builder/generate-images",
            json=prompts.json(),
            timeout=60.0,
        )
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 200:
            metadata = response.json().get("metadata", {})
            return {
                "request_num": request_num,
                "success": True,
                "service": metadata.get("service"),
                "time": elapsed,
                "mode": "images",
            }
        return {
            "request_num": request_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
            "mode": "images",
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "request_num": request_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
            "mode": "images",
        }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(mode: str = "both", num_requests: int = TOTAL_REQUESTS) -> dict[str, Any]:
    """
    Run the load simulation.

    Args:
        mode: "orders", "images", or "both"
        num_requests: Number of requests to fire concurrently
    """
    print("=" * 70)
    print("🔥 LOAD SIMULATION - HIGH CONCURRENCY TEST")
    print("=" * 70)
    print(f"📋 Total Requests: {num_requests}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"🔧 Mode: {mode}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        tasks = []
        for i in range(num_requests):
            if mode == "orders" or (mode == "both" and i % 2 == 0):
                tasks.append(send_order(client, i + 1))
            else:
                tasks.append(send_image_request(client, i + 1))
        results = await asyncio.gather(*tasks)

    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    orders = [r for r in successful if r["mode"] == "order"]
    images = [r for r in successful if r["mode"] == "images"]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Successful Requests: {len(successful)}/{num_requests}")
    print(f"❌ Failed Requests: {len(failed)}/{num_requests}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")

    if orders:
        numbers = [r["order_number"] for r in orders]
        revenue = sum(r.get("total") or 0 for r in orders)
        print(f"\n🥙 Orders: {len(orders)} placed, {len(set(numbers))} unique numbers")
        print(f"   💰 Total Revenue: ${revenue:.2f}")

    if images:
        services: dict[str, int] = {}
        for r in images:
            services[r["service"]] = services.get(r["service"], 0) + 1
        print("\n🖼️  Images served by:")
        for service, count in sorted(services.items(), key=lambda kv: -kv[1]):
            print(f"   {service}: {count}")

    if failed:
        print(f"\n⚠️  Failed Request Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Request #{f['request_num']} [{f['mode']}]: {f.get('error', 'Unknown error')}")

    print("=" * 70)

    return {
        "total": num_requests,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def test_single_flows() -> bool:
    """Check the server answers before the burst."""
    print("\n" + "=" * 70)
    print("🧪 TESTING INDIVIDUAL FLOWS")
    print("=" * 70)

    async with httpx.AsyncClient() as client:
        print("\n1️⃣ Health Check...")
        response = await client.get(f"{API_BASE_URL}/health")
        if response.status_code != 200:
            print(f"   ❌ Failed: {response.text}")
            return False
        data = response.json()
        print(f"   ✅ Status: {data.get('status')}")
        print(f"   Image tiers: {' -> '.join(data.get('imageTiers', []))}")

        print("\n2️⃣ Price Calculation...")
        response = await client.post(
            f"{API_BASE_URL}/kebab-builder/calculate",
            json={"size": "medium", "selectedIngredients": [21, 1]},
        )
        if response.status_code == 200:
            print(f"   ✅ Total: ${response.json().get('totalPrice')}")
        else:
            print(f"   ❌ Failed: {response.text}")
            return False

        print("\n3️⃣ Single Order...")
        result = await send_order(client, 0)
        if result["success"]:
            print(f"   ✅ Order {result['order_number']} created (${result['total']})")
        else:
            print(f"   ⚠️ Response: {result['error']}")

    print("\n" + "=" * 70)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Kebab Builder Load Simulation")
    parser.add_argument("--orders", action="store_true", help="Order requests only")
    parser.add_argument("--images", action="store_true", help="Image requests only")
    parser.add_argument("--count", type=int, default=TOTAL_REQUESTS, help="Number of requests")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    parser.add_argument("--skip-tests", action="store_true", help="Skip individual tests")
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")

    if args.orders:
        mode = "orders"
    elif args.images:
        mode = "images"
    else:
        mode = "both"

    if not args.skip_tests:
        if not asyncio.run(test_single_flows()):
            print("\n❌ Pre-flight tests failed. Fix issues before running simulation.")
            sys.exit(1)
        print("\n✅ Pre-flight tests passed!")

    asyncio.run(run_simulation(mode=mode, num_requests=args.count))
