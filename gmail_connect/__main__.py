"""Run the signup server with ``python -m gmail_connect``."""

import uvicorn

from gmail_connect.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "gmail_connect.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
