# luckyspin/main.py
import logging

import uvicorn

from luckyspin.api import create_app
from luckyspin.config import Settings


def setup_logging(is_dev: bool) -> None:
    """
    Clean production logging:
    - app logs: INFO (or DEBUG in dev)
    - SQLAlchemy / driver logs: WARNING+ (no query/pool spam)
    """
    app_level = logging.DEBUG if is_dev else logging.INFO

    logging.basicConfig(
        level=app_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    for name in (
        "sqlalchemy",
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "sqlalchemy.orm",
        "asyncpg",
        "aiosqlite",
        "aiogram",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)


def run() -> None:
    settings = Settings.load()
    setup_logging(settings.is_dev)
    log = logging.getLogger("luckyspin")
    log.info("Starting on %s:%s (env=%s)", settings.host, settings.port, settings.environment)

    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
