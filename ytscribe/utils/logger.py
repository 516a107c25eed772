import sys
import logging

from ytscribe.config import config

logging_str = "[%(asctime)s] {%(pathname)s:%(lineno)d} %(levelname)s - %(message)s"
logging_path = config.LOGS_DIR / f"{config.APP_NAME}.log"
config.LOGS_DIR.mkdir(parents=True, exist_ok=True)

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format=logging_str,
    handlers=[
        logging.FileHandler(logging_path, encoding="utf-8"),
        logging.StreamHandler(sys.stdout)
    ]
)

logging = logging.getLogger(config.APP_NAME)
