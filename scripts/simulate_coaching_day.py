# scripts/simulate_coaching_day.py
import random
import sys
import time

import requests

BASE_URL = "http://localhost:8000"


def generate_items(variable_ids):
    """Three 1..5 answers per schema, skewed so a few schemas come out elevated."""
    hot = set(random.sample(variable_ids, 3))
    items = {}
    for vid in variable_ids:
        for r in range(1, 4):
            low, high = (3, 5) if vid in hot else (1, 4)
            items[f"{vid}.R{r}"] = random.randint(low, high)
    return items


def run_simulation(n=30):
    print(f"Starting coaching-day simulation ({n} coachees)...")

    variable_ids = [s["variable_id"] for s in requests.get(f"{BASE_URL}/schemas").json()]

    for i in range(n):
        payload = {
            "client_ref": f"sim_coachee_{i}_{random.randint(1000, 9999)}",
            "source": "API",
            "items": generate_items(variable_ids),
            "view_mode": random.choice(["strict", "exploratory"]),
        }

        try:
            res = requests.post(f"{BASE_URL}/assessments/", json=payload)
        except requests.RequestException as e:
            print(f"Connection Error: {e}")
            break

        if res.status_code == 201:
            profile = res.json()["profile"]
            visible = [s["schema_id"] for s in profile["schemas"]]
            coping = profile["coping"] or {}
            print(
                f"[{i + 1}/{n}] {profile['view_mode']:<11} | "
                f"{len(visible)} visible | dominant {coping.get('dominant_label', '-')}"
            )
        else:
            print(f"[{i + 1}/{n}] Error: {res.status_code} {res.text}")

        time.sleep(0.05)

    print("\nSimulation complete.")


if __name__ == "__main__":
    try:
        requests.get(f"{BASE_URL}/")
    except requests.RequestException:
        print("Server not running!")
        sys.exit(1)

    run_simulation()
