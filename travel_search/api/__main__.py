"""Run the API with uvicorn: ``python -m travel_search.api``."""

import uvicorn

from travel_search.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "travel_search.api.app:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.app_env == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
