"""Hardening subjects: the common interface and the registry-backed kinds."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, Sequence, runtime_checkable

from .registry import RegistryError, RootKey
from .state import harden_dword, harden_sz
from .system import Host

logger = logging.getLogger(__name__)

_DWORD_MASK = 0xFFFFFFFF


@runtime_checkable
class HardenSubject(Protocol):
    """Something that can be hardened, restored and checked."""

    name: str
    long_name: str
    description: str
    harden_by_default: bool

    def harden(self, host: Host, harden: bool) -> None:
        """Harden the subject if *harden* is true, restore it otherwise."""

    def is_hardened(self, host: Host) -> bool:
        """Tell whether the subject is completely hardened."""


@dataclass
class MultiHardenSubject:
    """A subject made of several subjects that are handled together."""

    members: Sequence[HardenSubject]
    name: str = ""
    long_name: str = ""
    description: str = ""
    harden_by_default: bool = False

    def harden(self, host: Host, harden: bool) -> None:
        """Harden or restore every member in order, stopping at the first error."""
        for member in self.members:
            member.harden(host, harden)

    def is_hardened(self, host: Host) -> bool:
        """Tell whether every member is hardened; every member is checked."""
        results = [member.is_hardened(host) for member in self.members]
        return all(results)


@dataclass
class RegistryDword:
    """A single registry DWORD value that has a hardened setting."""

    root: RootKey
    path: str
    value_name: str
    hardened_value: int
    name: str = ""
    long_name: str = ""
    description: str = ""
    harden_by_default: bool = False

    def harden(self, host: Host, harden: bool) -> None:
        """Set the hardened value; restoring is done from the saved state elsewhere."""
        if not harden:
            return
        harden_dword(host, self.root, self.path, self.value_name, self.hardened_value)

    def is_hardened(self, host: Host) -> bool:
        """Tell whether the value is present and equal to the hardened value."""
        try:
            current = host.registry.get_int(self.root, self.path, self.value_name)
        except RegistryError:
            logger.debug("IsHardened?: (not) %s\\%s (not found)", self.path, self.value_name)
            return False
        if current & _DWORD_MASK == self.hardened_value:
            logger.debug("IsHardened?: (OK) %s\\%s = %d", self.path, self.value_name, current)
            return True
        logger.debug(
            "IsHardened?: (not) %s\\%s = %d (hardened value = %d)",
            self.path, self.value_name, current, self.hardened_value,
        )
        return False


@dataclass
class RegistrySz:
    """A single registry string value that has a hardened setting."""

    root: RootKey
    path: str
    value_name: str
    hardened_value: str
    name: str = ""
    long_name: str = ""
    description: str = ""
    harden_by_default: bool = False

    def harden(self, host: Host, harden: bool) -> None:
        """Set the hardened value; restoring is done from the saved state elsewhere."""
        if not harden:
            return
        harden_sz(host, self.root, self.path, self.value_name, self.hardened_value)

    def is_hardened(self, host: Host) -> bool:
        """Tell whether the value is present and equal to the hardened value."""
        try:
            current = host.registry.get_str(self.root, self.path, self.value_name)
        except RegistryError:
            logger.debug("IsHardened?: (not) %s\\%s (not found)", self.path, self.value_name)
            return False
        if current == self.hardened_value:
            logger.debug("IsHardened?: (OK) %s\\%s = %s", self.path, self.value_name, current)
            return True
        logger.debug(
            "IsHardened?: (not) %s\\%s = %s (hardened value = %s)",
            self.path, self.value_name, current, self.hardened_value,
        )
        return False


@dataclass
class RegistryMultiValue:
    """Several DWORD and string values that together make one hardening."""

    dwords: Sequence[RegistryDword] = field(default_factory=list)
    strings: Sequence[RegistrySz] = field(default_factory=list)
    name: str = ""
    long_name: str = ""
    description: str = ""
    harden_by_default: bool = False

    def harden(self, host: Host, harden: bool) -> None:
        """Harden or restore the DWORD values, then the string values."""
        for value in (*self.dwords, *self.strings):
            try:
                value.harden(host, harden)
            except Exception as exc:
                logger.info("Could not harden %s due to error: %s", value.name, exc)
                raise

    def is_hardened(self, host: Host) -> bool:
        """Tell whether every value is hardened; every value is checked."""
        results = [value.is_hardened(host) for value in (*self.dwords, *self.strings)]
        return all(results)