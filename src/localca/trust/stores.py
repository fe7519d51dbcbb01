"""Trust-store collaborator interface.

Installers for concrete platforms live outside this package; they subclass
TrustStore and run their commands through privileged_command().
"""
from __future__ import annotations

import abc
import shutil
from typing import Callable, List, Optional, Sequence

from .. import config
from ..identity import SystemIdentity
from ..pki.store import CAMaterial
from ..utils.logging import get_logger

log = get_logger()

SUDO_PREFIX = ["sudo", "--prompt=Sudo password:", "--"]


class TrustStore(abc.ABC):
    name: str = ""

    @abc.abstractmethod
    def check(self, material: CAMaterial) -> bool:
        """True when the root in ``material`` is already trusted by this store."""

    @abc.abstractmethod
    def install(self, material: CAMaterial) -> None:
        ...

    @abc.abstractmethod
    def uninstall(self, material: CAMaterial) -> None:
        ...


def store_enabled(name: str) -> bool:
    selected = config.trust_stores()
    return not selected or name in selected


class WarningLatch:
    """Fire-once flag. Moves from unset to set and never back."""

    def __init__(self):
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def fire(self) -> bool:
        if self._fired:
            return False
        self._fired = True
        return True


def privileged_command(
    argv: Sequence[str],
    latch: WarningLatch,
    identity: Optional[SystemIdentity] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> List[str]:
    identity = identity or SystemIdentity()
    if identity.is_superuser():
        return list(argv)
    if which("sudo") is None:
        if latch.fire():
            log.warning(
                "Warning: \"sudo\" is not available, and localca is not running as root. "
                "The (un)install operation might fail."
            )
        return list(argv)
    return SUDO_PREFIX + list(argv)
