"""Client-side solver for gateway challenges.

Brute-forces the secret number of a challenge and packs the solution into
the base64 payload expected by ``POST /api/v1/verify``. Useful for server
to server integrations, demos and tests; browsers use an ALTCHA widget.
"""

from __future__ import annotations

import base64
import json
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from gatecha.core.altcha import hash_hex


@dataclass(frozen=True)
class Solution:
    """A found secret number and how long the search took."""

    number: int
    took_ms: int


def solve_challenge(
    challenge: Mapping[str, Any],
    start: int = 0,
    max_number: int | None = None,
) -> Solution | None:
    """Search ``[start, maxnumber]`` for the number that reproduces the challenge digest.

    Args:
        challenge: Challenge envelope as returned by ``GET /api/v1/challenge``
        start: First number to try
        max_number: Upper bound override; defaults to the envelope's ``maxnumber``

    Returns:
        The solution, or None if the range was exhausted

    Raises:
        ValueError: If the challenge uses an unsupported algorithm
    """
    algorithm = str(challenge["algorithm"])
    salt = str(challenge["salt"])
    target = str(challenge["challenge"])
    upper = int(max_number if max_number is not None else challenge["maxnumber"])

    started = time.monotonic()
    for number in range(start, upper + 1):
        if hash_hex(algorithm, salt + str(number)) == target:
            return Solution(number=number, took_ms=int((time.monotonic() - started) * 1000))
    return None


def build_payload(challenge: Mapping[str, Any], number: int, took_ms: int | None = None) -> str:
    """Encode a solution as the base64 JSON payload accepted by the verify endpoint."""
    data: dict[str, Any] = {
        "algorithm": challenge["algorithm"],
        "challenge": challenge["challenge"],
        "number": number,
        "salt": challenge["salt"],
        "signature": challenge["signature"],
    }
    if took_ms is not None:
        data["took"] = took_ms
    return base64.b64encode(json.dumps(data).encode()).decode()


def solve_to_payload(challenge: Mapping[str, Any]) -> str:
    """Solve ``challenge`` and return its verify payload.

    Raises:
        ValueError: If no number in range reproduces the challenge
    """
    solution = solve_challenge(challenge)
    if solution is None:
        raise ValueError("No solution found within maxnumber")
    return build_payload(challenge, solution.number, solution.took_ms)
