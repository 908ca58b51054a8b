"""Run the service: ``python -m content_validation``."""

import uvicorn

from content_validation.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "content_validation.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL,
    )


if __name__ == "__main__":
    main()
