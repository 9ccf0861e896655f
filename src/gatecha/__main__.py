"""Run the gateway with ``python -m gatecha``."""

import uvicorn

from gatecha.core.settings import settings


def main() -> None:
    uvicorn.run(
        "gatecha.main:app",
        host=settings.listen_host,
        port=settings.listen_port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
