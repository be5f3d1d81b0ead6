#!/usr/bin/env python3
"""
systemd service management for the controller daemon.

Implements the install | remove | start | stop | status subcommands by
writing a unit file and delegating to systemctl.
"""

import os
import shutil
import subprocess
import sys
from typing import Callable, Optional

NAME = "argononectl"
DESCRIPTION = "Watches shutdown button and temperature"
DEPENDENCIES = ("multi-user.target",)

UNIT_TEMPLATE = """\
[Unit]
Description={description}
Requires={dependencies}
After={dependencies}

[Service]
Type=simple
ExecStart={exec_start}
Restart=always
RestartSec=5

[Install]
WantedBy=multi-user.target
"""


class ServiceError(RuntimeError):
    """A service management operation failed."""


def default_executable() -> str:
    """Command line systemd should run: the console script, else this interpreter."""
    script = shutil.which(NAME)
    if script:
        return script
    return f"{sys.executable} -m argonone"


class ServiceManager:
    """Manages the systemd unit of the controller."""

    def __init__(self, name: str = NAME, unit_dir: str = "/etc/systemd/system",
                 executable: Optional[str] = None,
                 runner: Callable[..., subprocess.CompletedProcess] = subprocess.run):
        self.name = name
        self.unit_dir = unit_dir
        self.executable = executable or default_executable()
        self.runner = runner

    @property
    def unit_path(self) -> str:
        return os.path.join(self.unit_dir, f"{self.name}.service")

    def is_installed(self) -> bool:
        return os.path.exists(self.unit_path)

    def unit_text(self) -> str:
        return UNIT_TEMPLATE.format(description=DESCRIPTION,
                                    dependencies=" ".join(DEPENDENCIES),
                                    exec_start=self.executable)

    def install(self) -> str:
        """Write the unit file and enable it."""
        if self.is_installed():
            raise ServiceError(f"{self.name} is already installed")
        try:
            with open(self.unit_path, "w") as f:
                f.write(self.unit_text())
        except OSError as exc:
            raise ServiceError(f"Unable to write {self.unit_path}: {exc}") from exc
        self._systemctl("daemon-reload")
        self._systemctl("enable", f"{self.name}.service")
        return f"Install {DESCRIPTION}: completed"

    def remove(self) -> str:
        """Disable the unit and delete its file."""
        if not self.is_installed():
            raise ServiceError(f"{self.name} is not installed")
        self._systemctl("disable", f"{self.name}.service")
        try:
            os.remove(self.unit_path)
        except OSError as exc:
            raise ServiceError(f"Unable to remove {self.unit_path}: {exc}") from exc
        self._systemctl("daemon-reload")
        return f"Removing {DESCRIPTION}: completed"

    def start(self) -> str:
        self._require_installed()
        self._systemctl("start", f"{self.name}.service")
        return f"Starting {DESCRIPTION}: completed"

    def stop(self) -> str:
        self._require_installed()
        self._systemctl("stop", f"{self.name}.service")
        return f"Stopping {DESCRIPTION}: completed"

    def status(self) -> str:
        """Return the unit's activity state as reported by systemctl."""
        self._require_installed()
        # is-active exits non-zero for inactive units, which is not an error here.
        result = self._systemctl("is-active", f"{self.name}.service", check=False)
        state = (result.stdout or "").strip() or "unknown"
        return f"{DESCRIPTION} is {state}"

    def _require_installed(self) -> None:
        if not self.is_installed():
            raise ServiceError(f"{self.name} is not installed")

    def _systemctl(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        argv = ["systemctl", *args]
        try:
            return self.runner(argv, check=check, capture_output=True, text=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise ServiceError(f"{' '.join(argv)} failed: {exc}") from exc
