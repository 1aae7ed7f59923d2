import logging

import uvicorn

from robofleet.config import config


def main() -> None:
    # Configure logging for the entire application
    logging.basicConfig(
        level=config.logging.level,
        format="%(levelname)s:     %(name)s - %(message)s",
    )

    # Set log level for our app modules
    logging.getLogger("robofleet").setLevel(config.logging.level)

    logging.getLogger(__name__).info(
        "robofleet API running on %s:%d", config.server.host, config.server.port
    )

    uvicorn.run(
        "robofleet.web.server:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
