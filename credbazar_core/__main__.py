"""Run the collector: ``python -m credbazar_core``."""

import uvicorn

from credbazar_core.api import create_app
from credbazar_core.config import CollectorConfig
from credbazar_core.logging_config import setup_logging


def main() -> None:
    config = CollectorConfig.from_env()
    setup_logging(config.service_name, level=config.log_level, json_output=config.log_json)
    app = create_app(config)
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_config=None)


if __name__ == "__main__":
    main()
