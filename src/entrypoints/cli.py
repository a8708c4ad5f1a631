from __future__ import annotations

import argparse
import logging
import sys

from src.schemas.messages import Message
from src.telemetry.logging import setup_logging
from src.utils.errors import ConfigurationError
from src.utils.settings import load_config
from src.utils.setup import setup
from src.workflows.coding_task import run_conversion

logger = logging.getLogger(__name__)


def print_message(message: Message) -> None:
    print(f"\n[{message.speaker}]\n{message.content}", flush=True)


def main() -> None:
    parser = argparse.ArgumentParser(description="Convert the PL/SQL fixture procedure with a group of agents.")
    parser.add_argument("--env", default="base", help="Config environment (base, dev, ...).")
    parser.add_argument("--config-dir", default="configs", help="Directory holding base.yaml and overrides.")
    args = parser.parse_args()

    try:
        config = load_config(args.env, args.config_dir)
        setup_logging(config.logging.level, config.logging.file)
        setup()
        result = run_conversion(config, on_message=print_message)
    except ConfigurationError as exc:
        logger.error("Cannot start conversation: %s", exc)
        sys.exit(2)
    except KeyboardInterrupt:
        sys.exit(130)

    print(f"\n--- conversation ended after {result.rounds} rounds: {result.termination_reason} ---")


if __name__ == "__main__":
    main()
