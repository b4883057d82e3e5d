import logging
import logging.config

from dailystuff.config import AppConfig

def setup_logging(config: AppConfig) -> logging.Logger:
    if config.logging.to_file:
        config.logging.log_dir.mkdir(exist_ok=True, parents=True)
    logging.config.dictConfig(config.get_logging_config())
    return logging.getLogger("dailystuff")
