"""Search a running travel search API and log the results.

Configuration via constants below (no CLI args). Run:
    uv run python scripts/search.py

Environment:
    API_BASE_URL     (default http://localhost:3000/api/v1)
    API_TIMEOUT_SEC  (default 10)
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import List

# Ensure the repository root is on path
CURRENT_DIR = Path(__file__).resolve().parent
ROOT_DIR = CURRENT_DIR.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from travel_search.client.api import ApiClient, ApiClientError  # noqa: E402
from travel_search.search.schemas import ExperienceOut, SearchQuery  # noqa: E402


# ---------------------------------------------------------------------------
# Configuration Constants
# ---------------------------------------------------------------------------
QUERY_TEXT: str = "wine kerala"
LIMIT: int = 5
CATEGORY: str | None = None
SUGGEST_TEXT: str = "ke"
LOG_LEVEL: str = "INFO"


def format_experience(item: ExperienceOut) -> str:
    price = f"{item.price:.2f}" if item.price is not None else "?"
    star = "*" if item.featured else " "
    return f"{star} id={item.id}; {item.title} ({item.destination}, {item.category}); price={price}"


async def search(query: str, limit: int = LIMIT) -> List[ExperienceOut]:
    """Run one search and one autocomplete call; log an aggregated block."""
    logger = logging.getLogger(__name__)

    async with ApiClient() as client:
        health = await client.health_check()
        logger.info("API %s is %s (%s)", client.base_url, health.status, health.environment)

        response = await client.search(SearchQuery(q=query, limit=limit, category=CATEGORY))
        suggestions = await client.autocomplete(SUGGEST_TEXT)

    page = response.data.pagination
    lines: List[str] = [
        f"Returned {len(response.data.results)} of {page.total} results. \nQuery: {query!r} \n"
    ]
    for idx, item in enumerate(response.data.results, start=1):
        lines.append(f"{idx}. {format_experience(item)}")
    lines.append(f"hasNext={page.has_next} hasPrev={page.has_prev}")
    lines.append(f"Suggestions for {SUGGEST_TEXT!r}: {', '.join(suggestions.data.suggestions) or '-'}")
    logger.info("\n".join(lines))
    return list(response.data.results)


def main() -> int:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    try:
        asyncio.run(search(QUERY_TEXT, LIMIT))
        return 0
    except ApiClientError as e:
        logging.error("Search failed: %s", e.message)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
