#!/usr/bin/env python3
"""Argon One Controller Daemon

Keeps a Raspberry Pi in an Argon One case cool and honours its power button.

Features:
- CPU temperature sampled every 5 seconds (vcgencmd or sysfs).
- Fan driven to full speed over I2C once the CPU passes 50°C.
- Power button: a 2-3s press reboots, a press of 4s or more powers off.
- Fail fast: any worker error stops the whole controller so the service
  manager can restart it.
- install | remove | start | stop | status manage the systemd unit.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .button import GpioButtonPin, ShutdownButtonWatcher
from .commands import RebootCommand, ShutdownCommand, open_fan_bus
from .config import ConfigManager, find_config_file
from .controller import FanController, TemperaturePoller
from .events import Worker, new_reading_channel
from .pulse import PRESS_POLICIES, PressAction
from .sensors import make_temperature_source
from .service import ServiceError, ServiceManager
from .supervisor import Supervisor

SERVICE_COMMANDS = ("install", "remove", "start", "stop", "status")

log = logging.getLogger("argonone")


def setup_logging(log_file_path: Optional[str], log_level_str: str = "INFO") -> None:
    """Configure logging system for console and, optionally, file output."""
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    # Errors go to stderr, everything else to stdout.
    stdout = logging.StreamHandler(sys.stdout)
    stdout.addFilter(lambda record: record.levelno < logging.ERROR)
    stderr = logging.StreamHandler(sys.stderr)
    stderr.setLevel(logging.ERROR)

    handlers: List[logging.Handler] = [stdout, stderr]
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s [%(levelname)s] %(module)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=handlers,
        force=True,
    )
    log.debug("Logging initialized at level %s", log_level_str.upper())


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="argononectl",
        description="Argon One Pi controller: watches shutdown button and temperature.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=SERVICE_COMMANDS,
        help="Manage the system service. Without a command the control loop runs in the foreground."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML configuration file. If not provided, searches in standard locations."
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (overrides the configuration file)."
    )
    return parser.parse_args(argv)


def build_workers(config: ConfigManager, pin, bus) -> List[Worker]:
    """Wire the temperature poller, fan controller and button watcher together."""
    readings = new_reading_channel()
    actions = {
        PressAction.REBOOT: RebootCommand(),
        PressAction.SHUTDOWN: ShutdownCommand(),
    }
    return [
        TemperaturePoller(make_temperature_source(config), readings,
                          logger=logging.getLogger("argonone.temperature")),
        FanController.for_bus(readings, bus, config.fan_address,
                              logger=logging.getLogger("argonone.fan")),
        ShutdownButtonWatcher(pin, actions, PRESS_POLICIES[config.press_policy],
                              logger=logging.getLogger("argonone.button")),
    ]


def manage_service(command: str) -> int:
    """Run one of the service subcommands and report its status."""
    manager = ServiceManager()
    try:
        status = getattr(manager, command)()
    except ServiceError as exc:
        log.error("%s\nError: %s", command, exc)
        return 1
    log.info(status)
    return 0


def run_controller(config: ConfigManager) -> int:
    """Open the hardware and run the workers until stopped."""
    try:
        pin = GpioButtonPin(config.button_pin)
    except (ImportError, RuntimeError, OSError) as exc:
        log.error("failed opening gpio\nError: %s", exc)
        return 1

    try:
        bus = open_fan_bus(config.i2c_bus)
    except OSError as exc:
        log.error("failed opening smbus\nError: %s", exc)
        pin.close()
        return 1

    try:
        supervisor = Supervisor(build_workers(config, pin, bus),
                                logger=logging.getLogger("argonone.supervisor"))
        outcome = supervisor.run()
    finally:
        bus.close()
        pin.close()

    if outcome.error is not None:
        log.error("%s\nError: %s", outcome.status, outcome.error)
    else:
        log.info(outcome.status)
    return outcome.exit_code


def main(argv: Optional[List[str]] = None) -> None:
    """Main application entry point."""
    args = parse_args(argv)

    config_file_path = find_config_file(args.config)
    try:
        config = ConfigManager(config_file_path)
    except (FileNotFoundError, ValueError) as exc:
        sys.exit(f"[ERR] {exc}")

    log_level = args.log_level or config.log_level

    if args.command:
        # Console only: the log file belongs to the running daemon.
        setup_logging(None, log_level)
        sys.exit(manage_service(args.command))

    if os.geteuid() != 0:
        # GPIO, I2C and the power commands all need root.
        sys.exit("[ERR] This program must be run as root to access GPIO and I2C.")

    try:
        setup_logging(config.log_file, log_level)
    except OSError as exc:
        sys.exit(f"[ERR] Unable to open log file: {exc}")
    if config_file_path:
        log.info("Using configuration from: %s", config_file_path)

    log.info("Starting Argon One controller")
    sys.exit(run_controller(config))


if __name__ == "__main__":
    main()
