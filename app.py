"""Mechanism workbench launcher."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from interaction.config import EngineConfig, load_config
from interaction.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Assemble parts and drive apply/release interactions.")
    parser.add_argument("--config", type=Path, default=None, help="JSON file with engine tunables")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    parser.add_argument("--seed", type=int, default=None, help="Seed for part placement jitter")
    return parser


def resolve_config(args: argparse.Namespace) -> EngineConfig:
    config = load_config(args.config) if args.config else EngineConfig()
    if args.seed is not None:
        config.seed = args.seed
    return config


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)
    config = resolve_config(args)

    from apps.workbench import main as run_workbench

    run_workbench(config)


if __name__ == "__main__":
    main()
