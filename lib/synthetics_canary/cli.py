"""
Synthetics Canary command line interface

Runs one lifecycle verb against a canary declared in a JSON file. Recorded
state is kept under --state-dir, one file per canary instance.

Usage:
    synthetics-canary deploy --name web-check --config canary.json
    synthetics-canary start --name web-check
    synthetics-canary results --name web-check
    synthetics-canary remove --name web-check
"""

import argparse
import json
import logging
import os
import re
import sys
from pathlib import Path

from synthetics_canary.component import CanaryComponent
from synthetics_canary.exceptions import CanaryError
from synthetics_canary.state_store import JsonStateStore

VERBS = ("deploy", "remove", "start", "stop", "results", "logs")


class Colors:
    """ANSI color codes for terminal output."""
    OKBLUE = '\033[94m'
    OKGREEN = '\033[92m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'


def log_info(msg):
    print(f"{Colors.OKBLUE}ℹ {msg}{Colors.ENDC}", file=sys.stderr)


def log_success(msg):
    print(f"{Colors.OKGREEN}✓ {msg}{Colors.ENDC}", file=sys.stderr)


def log_error(msg):
    print(f"{Colors.FAIL}✗ {msg}{Colors.ENDC}", file=sys.stderr)


def validate_instance_name(name):
    """
    Validate the component instance name.

    Used as the state file name and as the prefix of generated canary
    names, which Synthetics limits to lowercase letters, digits, hyphens
    and underscores.

    Raises:
        ValueError: If the name is invalid
    """
    if not re.match(r'^[a-z0-9][a-z0-9_-]{0,20}$', name):
        raise ValueError(
            f"Invalid name '{name}': use 1-21 lowercase letters, digits, '-' or '_', "
            "starting with a letter or digit"
        )


def load_config(path):
    """
    Load desired configuration from a JSON file.

    Raises:
        ValueError: If the file is not a JSON object
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {path} must be a JSON object")

    # Relative source paths are resolved against the configuration file
    src = data.get("src")
    if src and not os.path.isabs(src):
        data["src"] = str((Path(path).parent / src).resolve())
    return data


def build_parser():
    parser = argparse.ArgumentParser(
        prog="synthetics-canary",
        description="Manage an AWS CloudWatch Synthetics Canary",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  synthetics-canary deploy --name web-check --config canary.json
  synthetics-canary logs --name web-check
        """
    )

    parser.add_argument(
        "verb",
        choices=VERBS,
        help="Lifecycle operation to run"
    )

    parser.add_argument(
        "--name",
        required=True,
        help="Component instance name (state file name, prefix for generated canary names)"
    )

    parser.add_argument(
        "--config",
        help="JSON file with the desired canary configuration (required for deploy)"
    )

    parser.add_argument(
        "--state-dir",
        default=".canary",
        help="Directory holding recorded state (default: .canary)"
    )

    return parser


def main(argv=None):
    """Main execution function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        validate_instance_name(args.name)
        if args.verb == "deploy" and not args.config:
            raise ValueError("--config is required for deploy")
        inputs = load_config(args.config) if args.config else None
    except (OSError, ValueError) as e:
        log_error(str(e))
        return 1

    store = JsonStateStore(Path(args.state_dir) / f"{args.name}.json")

    try:
        component = CanaryComponent(args.name, store)
        log_info(f"Running {args.verb} for {args.name}...")
        if args.verb == "deploy":
            outputs = component.deploy(inputs)
        else:
            outputs = getattr(component, args.verb)()
    except (CanaryError, ValueError) as e:
        log_error(str(e))
        return 1

    print(json.dumps(outputs, indent=2, default=str))
    log_success(f"{args.verb} complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
