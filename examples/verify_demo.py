#!/usr/bin/env python3
"""Walk through the GateCHA protocol against a running gateway.

This script shows how to:
1. Request a challenge with an API key
2. Solve it locally
3. Submit the solution, then replay it to see it rejected

Usage:
    python examples/verify_demo.py gk_<key id> [http://localhost:8080]
"""

import sys

import httpx

from gatecha.utils.pow_client import build_payload, solve_challenge


def main(key_id: str, base_url: str) -> int:
    with httpx.Client(base_url=base_url, timeout=10.0) as client:
        response = client.get("/api/v1/challenge", params={"apiKey": key_id})
        if response.status_code != 200:
            print(f"Challenge request failed: {response.status_code} {response.text}")
            return 1
        challenge = response.json()
        print(f"Challenge: {challenge['challenge']} (maxnumber={challenge['maxnumber']})")

        solution = solve_challenge(challenge)
        if solution is None:
            print("No solution found")
            return 1
        print(f"Solved: number={solution.number} in {solution.took_ms} ms")

        payload = build_payload(challenge, solution.number, solution.took_ms)
        headers = {"Authorization": f"Bearer {key_id}"}
        for attempt in ("first", "replayed"):
            result = client.post("/api/v1/verify", json={"payload": payload}, headers=headers)
            print(f"Verify ({attempt}): {result.json()}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(main(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else "http://localhost:8080"))
