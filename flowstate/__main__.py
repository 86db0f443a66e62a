# flowstate/__main__.py

import uvicorn

from flowstate.config import load_settings
from flowstate.logging_setup import setup_logging


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "flowstate.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
