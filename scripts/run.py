#!/usr/bin/env python3
"""Beacon agent - Main entry point."""

import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Setup paths
BASE_DIR = Path(__file__).parent.parent
SRC_DIR = BASE_DIR / "src"
sys.path.insert(0, str(SRC_DIR))

# .env values take precedence so a checkout can point at its own bridge
load_dotenv(BASE_DIR / ".env", override=True)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def setup_logging(log_dir: Path, level: str = "INFO", fmt: str | None = None, json_mode: bool = False) -> None:
    """Configure application logging.

    Args:
        log_dir: Directory for log files.
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        fmt: Format string for plain-text output.
        json_mode: If True, output structured JSON logs.
    """
    log_dir.mkdir(exist_ok=True)
    log_file = log_dir / "beacon.log"

    handlers = [
        logging.StreamHandler(),
        logging.FileHandler(log_file, mode="a", encoding="utf-8"),
    ]

    if json_mode:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt or "%(asctime)s | %(name)s | %(levelname)s | %(message)s")

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=handlers,
    )

    logging.getLogger("beacon").info(f"Logging to: {log_file}")


async def main() -> None:
    """Main entry point for the Beacon agent."""
    from beacon.application import AgentApplication
    from beacon.config import AgentConfig

    config_path = BASE_DIR / "config.yaml"
    try:
        config = AgentConfig.load(config_path)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(
        log_dir=BASE_DIR / "logs",
        level=config.logging.level,
        fmt=config.logging.format,
        json_mode=config.logging.json_mode,
    )

    logger = logging.getLogger("beacon")
    logger.info("Beacon agent starting...")

    app = AgentApplication(config, BASE_DIR)

    try:
        await app.initialize()
        await app.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        await app.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
