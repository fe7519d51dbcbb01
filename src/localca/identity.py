"""System identity collaborator.

Wraps the two environmental inputs the issuance core depends on: the
current user's full name (used for default subject fields) and the OS
convention for the CA storage directory. Tests inject StaticIdentity.
"""
from __future__ import annotations

import getpass
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from . import config
from .errors import ConfigError

try:
    import pwd
except ImportError:  # pragma: no cover - windows
    pwd = None


class SystemIdentity:
    """Identity and directory conventions read from the running OS."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None, platform: Optional[str] = None):
        self._environ = environ if environ is not None else os.environ
        self._platform = platform or sys.platform

    def full_name(self) -> str:
        if pwd is not None:
            try:
                gecos = pwd.getpwuid(os.getuid()).pw_gecos
            except KeyError:
                gecos = ""
            name = gecos.split(",", 1)[0].strip()
            if name:
                return name
        try:
            return getpass.getuser()
        except (OSError, KeyError):
            return ""

    def is_superuser(self) -> bool:
        return hasattr(os, "geteuid") and os.geteuid() == 0

    def default_organization(self) -> str:
        return f"{self.full_name()} CA"

    def caroot(self) -> Path:
        env = self._environ.get("CAROOT", "")
        if env:
            return Path(env)
        if self._platform.startswith("win"):
            base = self._environ.get("LocalAppData", "")
            if not base:
                raise ConfigError("failed to find the default CA location, set one as the CAROOT env var")
            return Path(base) / config.APP_DIR_NAME
        if self._environ.get("XDG_DATA_HOME"):
            return Path(self._environ["XDG_DATA_HOME"]) / config.APP_DIR_NAME
        home = self._environ.get("HOME", "")
        if not home:
            raise ConfigError("failed to find the default CA location, set one as the CAROOT env var")
        if self._platform == "darwin":
            return Path(home) / "Library" / "Application Support" / config.APP_DIR_NAME
        return Path(home) / ".local" / "share" / config.APP_DIR_NAME


@dataclass
class StaticIdentity(SystemIdentity):
    name: str = "Test User"
    root_dir: Optional[Path] = None
    superuser: bool = False
    environ_map: dict = field(default_factory=dict)

    def __post_init__(self):
        super().__init__(environ=self.environ_map, platform="linux")

    def full_name(self) -> str:
        return self.name

    def is_superuser(self) -> bool:
        return self.superuser

    def caroot(self) -> Path:
        if self.root_dir is not None:
            return Path(self.root_dir)
        return super().caroot()
