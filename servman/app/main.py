# servman/app/main.py
"""Headless CLI: issue one server-manager command and print its outcome."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Optional, Sequence

from ..adapters.storage_local import StorageLocal
from ..domain.commands import Command
from ..domain.outcome import Failure, Outcome, Success
from ..utils import logging as logging_utils
from ..viewmodels.settings_vm import SettingsVM
from .consumer_context import ConsumerQueue
from .controller import AppController
from .subscription_registry import SubscriptionRegistry

_log = logging.getLogger(__name__)


def run_command(
    command: Command,
    settings_vm: SettingsVM,
    *,
    wait_s: Optional[float] = None,
) -> Outcome:
    """Issue ``command`` and drain deliveries on this thread until it settles.

    Args:
        command: Command to issue.
        settings_vm: Connection settings and timeout policy.
        wait_s: Optional bound on the total wait; the command is cancelled
            and a ``Failure`` returned when it elapses.
    """
    controller = AppController(settings_vm, max_workers=1)
    consumer = ConsumerQueue()
    registry = SubscriptionRegistry(consumer, name="cli")
    delivered: List[Outcome] = []
    try:
        if not controller.ensure_ready() or controller.dispatcher is None:
            return Failure("Server manager URL or API key not configured.")
        registry.add(controller.dispatcher.issue(command), delivered.append)
        deadline = None if wait_s is None else time.monotonic() + wait_s
        while not delivered:
            if deadline is not None and time.monotonic() >= deadline:
                return Failure(f"Gave up waiting for {command.value} after {wait_s:g} s")
            consumer.wait_and_drain(timeout=0.1)
        return delivered[0]
    finally:
        registry.cancel_all()
        controller.shutdown()


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI args for one-shot command runs."""
    parser = argparse.ArgumentParser(description="Control the remote server manager.")
    parser.add_argument("command", choices=[c.value for c in Command])
    parser.add_argument("--settings", help="Directory holding user_settings.json")
    parser.add_argument("--base-url")
    parser.add_argument("--api-key")
    parser.add_argument("--wait", type=float, default=None, help="Overall wait bound in seconds")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument(
        "--save",
        action="store_true",
        help="Write the effective settings back to --settings before running",
    )
    args = parser.parse_args(argv)
    if args.save and not args.settings:
        parser.error("--save requires --settings")
    return args


def build_settings(args: argparse.Namespace) -> SettingsVM:
    settings_vm = SettingsVM()
    if args.settings:
        payload = StorageLocal(root_dir=args.settings).load_user_settings()
        if payload:
            settings_vm.apply_dict(payload)
    settings_vm.apply_env()
    if args.base_url:
        settings_vm.base_url = args.base_url
    if args.api_key:
        settings_vm.api_key = args.api_key.strip()
    if args.debug:
        settings_vm.set_debug_logging(True)
    if args.save:
        settings_vm.on_save = StorageLocal(root_dir=args.settings).save_user_settings
    return settings_vm


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entrypoint; exit code 0 on success, 1 on failure, 2 on bad settings."""
    args = _parse_args(argv)
    logging_utils.configure_root(logging.DEBUG if args.debug else logging.INFO)
    try:
        settings_vm = build_settings(args)
    except ValueError as exc:
        print(f"Invalid settings: {exc}", file=sys.stderr)
        return 2
    logging_utils.apply_debug_preference(settings_vm.debug_logging)
    if not settings_vm.api_key:
        print("API key missing (use --api-key or SERVMAN_API_KEY)", file=sys.stderr)
        return 2
    if args.save:
        try:
            settings_vm.cmd_save()
        except (ValueError, OSError) as exc:
            print(f"Could not save settings: {exc}", file=sys.stderr)
            return 2
        _log.info("Saved settings to %s", args.settings)

    outcome = run_command(Command(args.command), settings_vm, wait_s=args.wait)
    print(outcome.text)
    return 0 if isinstance(outcome, Success) else 1


if __name__ == "__main__":
    sys.exit(main())
