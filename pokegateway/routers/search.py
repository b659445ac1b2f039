"""
Search router - fans a Pokemon lookup out to every backend and merges the results.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from pokegateway.logging import get_logger
from pokegateway.state import AppState, get_app_state

logger = get_logger(__name__)

router = APIRouter(tags=["search"])


@router.get(
    "/poke/search",
    responses={
        200: {
            "description": "Merged result. Per-backend failures are reported inside the body, never as an error status.",
            "content": {
                "application/json": {
                    "example": {
                        "name": "pikachu",
                        "status": {"poke_api": "success", "stats_api": "success", "images_api": "error"},
                        "data": {
                            "id": 25,
                            "name": "pikachu",
                            "stats": {"attack": 55},
                            "images_api_error": "timeout of 5000ms exceeded"
                        }
                    }
                }
            }
        },
        400: {"description": "Missing pokemon_name parameter"},
        500: {"description": "Unexpected failure while aggregating"}
    }
)
async def search(
    pokemon_name: Optional[str] = None,
    state: AppState = Depends(get_app_state),
):
    """
    Search for a Pokemon across the data, stats and images backends.

    **Flow:**
    1. Query all three backends concurrently
    2. Wait for every call to settle
    3. Merge successes into `data`, record failures as `<backend>_error`
    """
    if not pokemon_name or not pokemon_name.strip():
        logger.warning("Missing pokemon_name parameter")
        raise HTTPException(status_code=400, detail="pokemon_name parameter is required")

    pokemon_name = pokemon_name.strip()
    logger.info(f"Searching for pokemon: {pokemon_name}")

    try:
        result = await state.aggregator.search(pokemon_name)
    except Exception as e:
        logger.opt(exception=e).error(f"Search failed for {pokemon_name}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": str(e)}
        )

    return result.to_dict()
