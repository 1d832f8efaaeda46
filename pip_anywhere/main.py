#!/usr/bin/env python3
"""PiP Anywhere command line entry point

Opens a controlled browser, then turns key presses into triggers.

Usage:
    pip-anywhere --url https://example.com/watch
    pip-anywhere --browser chrome --config ./pip.yaml

At the prompt:
    <enter> / p   toolbar trigger
    s             keyboard-shortcut trigger (command "trigger-pip")
    q             quit
"""

import sys
import logging
from typing import Optional, Sequence


def configure_logging(level: str = "INFO") -> None:
    """Logs go to the terminal."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        prog="pip-anywhere",
        description="Put the main video of the active tab into picture-in-picture",
    )
    parser.add_argument("--url", help="Page to open in the controlled browser")
    parser.add_argument(
        "--browser", choices=["chromium", "chrome", "edge", "firefox"],
        help="Browser to launch (defaults to config)",
    )
    parser.add_argument("--headless", action="store_true", default=None, help="Run headless")
    parser.add_argument("--config", help="Path to pip.yaml")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    return parser


def run_prompt(registry, stdin=None) -> int:
    """Read trigger commands until 'q' or EOF. Returns number of triggers fired."""
    from pip_anywhere.core.dispatcher import TRIGGER_COMMAND

    stdin = stdin or sys.stdin
    trigger = registry.get("browsers.trigger_pip")
    fired = 0

    print("Press <enter> to trigger PiP, 's' for the shortcut, 'q' to quit.")
    for line in stdin:
        command = line.strip().lower()
        if command == "q":
            break
        if command in ("", "p"):
            args = {"source": "toolbar"}
        elif command == "s":
            # same route as a browser keyboard shortcut
            args = {"command": TRIGGER_COMMAND}
        else:
            print(f"Unknown command: {command!r}")
            continue

        result = trigger.execute(args)
        fired += 1
        if result.get("success"):
            print("✓ Picture-in-Picture started")
        else:
            print(f"✗ PiP failed: {result.get('reason')} {result.get('error', '')}".rstrip())
    return fired


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    from pip_anywhere.core.pip_config import PipConfig

    config = PipConfig.use_file(args.config) if args.config else PipConfig.get()
    settings = config.override(headless=args.headless)
    configure_logging(args.log_level or settings.log_level)

    from pip_anywhere.core.controller import PipController
    from pip_anywhere.tools.registry import load_all_tools

    registry = load_all_tools()
    controller = PipController.get()

    try:
        open_args = {"url": args.url} if args.url else {}
        if args.browser:
            open_args["browser"] = args.browser
        opened = registry.get("browsers.session.open").execute(open_args)
        if opened.get("status") != "success":
            logging.error(f"Could not open browser: {opened.get('error')}")
            return 1

        run_prompt(registry)
        return 0
    except KeyboardInterrupt:
        print("\n👋 Stopped")
        return 0
    finally:
        controller.shutdown()


if __name__ == "__main__":
    sys.exit(main())
