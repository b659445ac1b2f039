#!/usr/bin/env python3
"""
Command line client for the Pokemon gateway.

Usage:
    python scripts/search_pokemon.py pikachu              # Aggregated search
    python scripts/search_pokemon.py pikachu --raw        # Print the full JSON
    python scripts/search_pokemon.py --status             # Backend health
"""
from __future__ import annotations

import argparse
import json
import sys

import httpx


def search(gateway_url: str, name: str, raw: bool) -> int:
    """Run an aggregated search and print a per-backend summary."""
    try:
        response = httpx.get(
            f"{gateway_url}/poke/search",
            params={"pokemon_name": name},
            timeout=10.0
        )
    except httpx.RequestError as e:
        print(f"\n❌ Error: {e}")
        print("   Is the gateway running? (fastapi dev pokegateway/main.py)")
        return 1

    print(f"\n📥 Response ({response.status_code}):")
    data = response.json()
    if raw or response.status_code != 200:
        print(json.dumps(data, indent=2))
        return 0 if response.status_code == 200 else 1

    for service, outcome in data["status"].items():
        icon = "✅" if outcome == "success" else "⚠️ "
        print(f"   {icon} {service}: {outcome}")
        error = data["data"].get(f"{service}_error")
        if error:
            print(f"      {error}")
    return 0


def status(gateway_url: str) -> int:
    """Print the aggregate health report."""
    try:
        response = httpx.get(f"{gateway_url}/status", timeout=10.0)
    except httpx.RequestError as e:
        print(f"\n❌ Error: {e}")
        return 1

    data = response.json()
    print(f"\n🩺 Overall: {data['overall_status']} ({data['check_duration_ms']}ms)")
    for service, health in data["microservices"].items():
        detail = health.get("error") or health.get("url")
        print(f"   {service}: {health['status']} - {detail}")
    return 0 if response.status_code == 200 else 1


def main():
    parser = argparse.ArgumentParser(description="Query the Pokemon gateway")
    parser.add_argument("name", nargs="?", help="Pokemon name to search for")
    parser.add_argument("--status", action="store_true", help="Show backend health instead")
    parser.add_argument("--raw", action="store_true", help="Print the raw JSON response")
    parser.add_argument("--gateway-url", default="http://localhost:8000", help="Gateway URL")

    args = parser.parse_args()

    if args.status:
        sys.exit(status(args.gateway_url))
    if not args.name:
        parser.error("a Pokemon name is required unless --status is given")
    sys.exit(search(args.gateway_url, args.name, args.raw))


if __name__ == "__main__":
    main()
