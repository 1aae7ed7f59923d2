import logging

from .bus import EventBus
from .config import config

__version__ = "1.0.0"

# Configure logging for the robofleet package
logging.basicConfig(
    level=config.logging.level,
    format="%(levelname)s:     %(name)s - %(message)s",
)

logging.getLogger("robofleet").setLevel(config.logging.level)

event_bus = EventBus()
