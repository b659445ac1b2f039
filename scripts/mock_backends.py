#!/usr/bin/env python3
"""
Mock backend server for trying the gateway locally.

This server plays all three backends the gateway talks to:
- /api/pokemon/{name} - basic Pokemon data (poke_api)
- /api/stats/{name}   - base stats (stats_api)
- /api/images/{name}  - sprite URLs (images_api)
- /health             - health check

Run with: python scripts/mock_backends.py
Listens on: http://localhost:9001

Point every backend at it:
    POKE_API_URL=http://localhost:9001
    STATS_API_URL=http://localhost:9001
    IMAGES_API_URL=http://localhost:9001
"""
from __future__ import annotations

import argparse
import asyncio
import time
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request
import uvicorn

app = FastAPI(title="Mock Pokemon Backends", description="Test server for the Pokemon gateway")

SPRITE_URL = "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/{id}.png"

POKEMON = {
    "bulbasaur": {"id": 1, "types": ["grass", "poison"], "height": 7, "weight": 69,
                  "stats": {"hp": 45, "attack": 49, "defense": 49, "speed": 45}},
    "charizard": {"id": 6, "types": ["fire", "flying"], "height": 17, "weight": 905,
                  "stats": {"hp": 78, "attack": 84, "defense": 78, "speed": 100}},
    "squirtle": {"id": 7, "types": ["water"], "height": 5, "weight": 90,
                 "stats": {"hp": 44, "attack": 48, "defense": 65, "speed": 43}},
    "pikachu": {"id": 25, "types": ["electric"], "height": 4, "weight": 60,
                "stats": {"hp": 35, "attack": 55, "defense": 40, "speed": 90}},
    "mewtwo": {"id": 150, "types": ["psychic"], "height": 20, "weight": 1220,
               "stats": {"hp": 106, "attack": 110, "defense": 90, "speed": 130}},
}

# Seconds of artificial latency, set from the command line
DELAY = 0.0


def lookup(name: str) -> dict:
    pokemon = POKEMON.get(name.lower())
    if pokemon is None:
        raise HTTPException(status_code=404, detail=f"Pokemon {name} not found")
    return pokemon


@app.middleware("http")
async def add_response_time(request: Request, call_next):
    start = time.perf_counter()
    if DELAY:
        await asyncio.sleep(DELAY)
    response = await call_next(request)
    response.headers["X-Response-Time"] = f"{(time.perf_counter() - start) * 1000:.2f}ms"
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] {request.method} {request.url.path} -> {response.status_code}")
    return response


@app.get("/api/pokemon/{name}")
async def pokemon(name: str):
    """Basic Pokemon data."""
    data = lookup(name)
    return {
        "id": data["id"],
        "name": name.lower(),
        "height": data["height"],
        "weight": data["weight"],
        "types": [{"name": t, "slot": i + 1} for i, t in enumerate(data["types"])],
    }


@app.get("/api/stats/{name}")
async def stats(name: str):
    """Base stats with their total."""
    data = lookup(name)
    return {**data["stats"], "total": sum(data["stats"].values())}


@app.get("/api/images/{name}")
async def images(name: str):
    """Sprite URL for a Pokemon."""
    data = lookup(name)
    return {"name": name.lower(), "sprite": SPRITE_URL.format(id=data["id"])}


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "healthy", "server": "mock-backends"}


def main():
    global DELAY
    parser = argparse.ArgumentParser(description="Mock Pokemon backends")
    parser.add_argument("--port", type=int, default=9001, help="Port to listen on")
    parser.add_argument("--delay-ms", type=int, default=0, help="Artificial latency per request")
    args = parser.parse_args()
    DELAY = args.delay_ms / 1000

    print("\n🎮 Mock Pokemon Backends")
    print("=" * 50)
    print(f"Listening on http://localhost:{args.port}")
    print("Endpoints:")
    print("  GET /api/pokemon/{name} - Pokemon data")
    print("  GET /api/stats/{name}   - Base stats")
    print("  GET /api/images/{name}  - Sprites")
    print("  GET /health             - Health check")
    print("=" * 50 + "\n")

    uvicorn.run(app, host="127.0.0.1", port=args.port, log_level="warning")


if __name__ == "__main__":
    main()
