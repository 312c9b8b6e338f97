"""
Load Simulation Script

Fires concurrent orders and assistant questions at a running API to check
that order writes stay atomic and the assistant degrades gracefully.
Run from project root: python scripts/simulate.py

A share of the generated orders is deliberately invalid (a quantity of 0 or 10,
or a 7-digit phone number); those must come back as 400 and never be stored.
"""

import asyncio
import sys
import random
import time
import argparse
from datetime import datetime
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:3001"
TOTAL_ORDERS = 50
INVALID_RATIO = 0.2

# Sample data for random orders
FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Wilson", "Taylor"]
QUESTIONS = [
    "What's vegetarian?",
    "Do you have anything spicy?",
    "What desserts do you have?",
    "Is there any seafood on the menu?",
    "Add a burger to my cart",
    "What's in my cart?",
]


def generate_random_customer() -> dict[str, str]:
    """Generate random customer info."""
    return {
        "firstName": random.choice(FIRST_NAMES),
        "lastName": random.choice(LAST_NAMES),
        "phone": f"(555) {random.randint(100, 999)}-{random.randint(1000, 9999)}",
        "creditCard": "4242 4242 4242 4242",
    }


def generate_random_items(menu: list[dict], bad_quantity: bool = False) -> list[dict]:
    """Pick 1-4 menu items; ``bad_quantity`` puts one quantity out of range."""
    items = []
    for dish in random.sample(menu, k=min(len(menu), random.randint(1, 4))):
        items.append({
            "name": dish["name"],
            "price": dish["price"],
            "quantity": random.randint(1, 9),
        })
    if bad_quantity:
        items[0]["quantity"] = random.choice([0, 10])
    return items


def generate_order_payload(menu: list[dict], invalid: bool = False) -> dict[str, Any]:
    """Generate payload for /api/orders; an invalid one breaks either a quantity or the phone."""
    defect = random.choice(["quantity", "phone"]) if invalid else None
    items = generate_random_items(menu, bad_quantity=defect == "quantity")
    total = round(sum(round(i["price"] * i["quantity"], 2) for i in items), 2)
    customer = generate_random_customer()
    if defect == "phone":
        customer["phone"] = f"555-{random.randint(1000, 9999)}"
    return {**customer, "items": items, "totalPrice": total}


async def send_order(
    client: httpx.AsyncClient,
    order_num: int,
    menu: list[dict],
) -> dict[str, Any]:
    """Send one order; an invalid one counts as a success when it is rejected."""
    invalid = random.random() < INVALID_RATIO
    payload = generate_order_payload(menu, invalid=invalid)
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/api/orders", json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if invalid:
            return {
                "order_num": order_num,
                "success": response.status_code == 400,
                "rejected": True,
                "error": None if response.status_code == 400 else f"expected 400, got {response.status_code}",
                "time": elapsed,
            }

        if response.status_code == 201:
            data = response.json()
            return {
                "order_num": order_num,
                "success": True,
                "order_id": data.get("id"),
                "total": data.get("total_price"),
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def send_question(client: httpx.AsyncClient, question: str) -> dict[str, Any]:
    """Ask the assistant one question."""
    start_time = time.time()
    try:
        response = await client.post(
            f"{API_BASE_URL}/api/assistant/chat",
            json={"message": question, "history": []},
            timeout=60.0,
        )
        elapsed = round(time.time() - start_time, 3)
        data = response.json()
        return {
            "question": question,
            "success": response.status_code == 200,
            "answer": data.get("response", "")[:80],
            "tools": [t.get("tool") for t in data.get("toolsUsed", [])],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        return {"question": question, "success": False, "answer": str(e)[:80], "tools": [], "time": 0.0}


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_orders: int = TOTAL_ORDERS, ask: bool = True) -> dict[str, Any]:
    """
    Run the load simulation.

    Args:
        num_orders: Number of orders to fire concurrently
        ask: Also send assistant questions alongside the orders
    """
    print("=" * 70)
    print("🔥 LOAD SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        menu = (await client.get(f"{API_BASE_URL}/api/menu", params={"type": "static"})).json()
        before = len((await client.get(f"{API_BASE_URL}/api/orders")).json())

        order_tasks = [send_order(client, i + 1, menu) for i in range(num_orders)]
        question_tasks = [send_question(client, q) for q in QUESTIONS] if ask else []
        results = await asyncio.gather(*order_tasks, *question_tasks)

        after = len((await client.get(f"{API_BASE_URL}/api/orders")).json())

    total_time = round(time.time() - start_time, 2)

    orders = results[:num_orders]
    answers = results[num_orders:]
    successful = [r for r in orders if r["success"]]
    failed = [r for r in orders if not r["success"]]
    stored = [r for r in successful if not r.get("rejected")]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Behaved as expected: {len(successful)}/{num_orders}")
    print(f"   Stored: {len(stored)}  Rejected invalid: {len(successful) - len(stored)}")
    print(f"❌ Unexpected: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if after - before != len(stored):
        print(f"\n⚠️  Order count changed by {after - before}, expected {len(stored)}")
    else:
        print(f"\n🧮 Order count consistent (+{len(stored)})")

    if stored:
        avg_time = round(sum(r["time"] for r in stored) / len(stored), 3)
        total_revenue = sum(r.get("total") or 0 for r in stored)
        print(f"\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in stored)}s")
        print(f"   Slowest: {max(r['time'] for r in stored)}s")
        print(f"   💰 Total Revenue: ${total_revenue:.2f}")

    if answers:
        print(f"\n🤖 Assistant:")
        for a in answers:
            print(f"   [{a['time']}s] {a['question']} → {a['answer']} {a['tools']}")

    if failed:
        print(f"\n⚠️  Unexpected Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def test_single_flows() -> bool:
    """Test individual flows before the simulation."""
    print("\n" + "=" * 70)
    print("🧪 TESTING INDIVIDUAL FLOWS")
    print("=" * 70)

    async with httpx.AsyncClient() as client:
        print("\n1️⃣ Health Check...")
        response = await client.get(f"{API_BASE_URL}/api/health")
        if response.status_code == 200:
            data = response.json()
            print(f"   ✅ Status: {data.get('status')}")
            print(f"   Database: {data.get('database')}")
        else:
            print(f"   ❌ Failed: {response.text}")
            return False

        print("\n2️⃣ Assistant Status...")
        response = await client.get(f"{API_BASE_URL}/api/assistant/status")
        print(f"   {response.json()}")

        print("\n3️⃣ Static Menu...")
        response = await client.get(f"{API_BASE_URL}/api/menu", params={"type": "static"})
        menu = response.json()
        print(f"   ✅ {len(menu)} items")

        print("\n4️⃣ Single Order...")
        response = await client.post(f"{API_BASE_URL}/api/orders", json=generate_order_payload(menu))
        if response.status_code == 201:
            data = response.json()
            print(f"   ✅ Order #{data.get('id')} created")
            print(f"   Total: ${data.get('total_price')}")
        else:
            print(f"   ⚠️ Response: {response.text[:100]}")

    print("\n" + "=" * 70)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--no-assistant", action="store_true", help="Skip assistant questions")
    parser.add_argument("--skip-tests", action="store_true", help="Skip individual tests")
    parser.add_argument("--base-url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.base_url.rstrip("/")

    if not args.skip_tests:
        success = asyncio.run(test_single_flows())
        if not success:
            print("\n❌ Pre-flight tests failed. Fix issues before running simulation.")
            sys.exit(1)
        print("\n✅ Pre-flight tests passed!")

    asyncio.run(run_simulation(num_orders=args.orders, ask=not args.no_assistant))
