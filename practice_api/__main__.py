"""Run the API with uvicorn using the configured host and port."""

import uvicorn

from practice_api.core.config import settings


def main() -> None:
    uvicorn.run(
        "practice_api.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
