"""Run the server: python -m kkcafe"""

import uvicorn

from kkcafe.config import settings


def main() -> None:
    uvicorn.run(
        "kkcafe.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
