"""Blocking executables through the Explorer DisallowRun policy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence

from .registry import (
    ERROR_RESTORE_DISALLOW_RUN_FAILED,
    EXPLORER_DISALLOW_RUN_KEY,
    EXPLORER_POLICIES_KEY,
    RegistryError,
    RootKey,
)
from .subjects import MultiHardenSubject
from .system import Host

logger = logging.getLogger(__name__)

POWERSHELL_EXE = "powershell.exe"
POWERSHELL_ISE_EXE = "powershell_ise.exe"

_ROOT = RootKey.CURRENT_USER
_MAX_ENTRIES = 100
_POLICY_VALUE = "DisallowRun"


@dataclass
class DisallowRunMembers:
    """Executables that are entered into, and removed from, the DisallowRun list."""

    executables: Sequence[str]
    label: str = ""
    name: str = ""
    long_name: str = ""
    description: str = ""
    harden_by_default: bool = False

    def _entries(self, host: Host) -> Iterator[tuple[str, str]]:
        """Numbered DisallowRun entries 1..99; a missing entry reads as empty."""
        for index in range(1, _MAX_ENTRIES):
            entry = str(index)
            try:
                yield entry, host.registry.get_str(_ROOT, EXPLORER_DISALLOW_RUN_KEY, entry)
            except RegistryError:
                yield entry, ""

    def _has_entry(self, host: Host, entry: str) -> bool:
        try:
            host.registry.get_str(_ROOT, EXPLORER_DISALLOW_RUN_KEY, entry)
        except RegistryError:
            return False
        return True

    def harden(self, host: Host, harden: bool) -> None:
        """Add the executables to DisallowRun, or remove them when restoring."""
        if harden:
            self._harden(host)
        else:
            self._restore(host)

    def _harden(self, host: Host) -> None:
        registry = host.registry
        try:
            registry.create_key(_ROOT, EXPLORER_DISALLOW_RUN_KEY)
        except RegistryError as exc:
            raise RegistryError(
                f"CreateKey to disable {self.label.lower()} failed"
            ) from exc

        start = next(
            (
                index
                for index in range(1, _MAX_ENTRIES)
                if not self._has_entry(host, str(index))
            ),
            _MAX_ENTRIES - 1,
        )
        for offset, executable in enumerate(self.executables):
            try:
                registry.set_sz(
                    _ROOT, EXPLORER_DISALLOW_RUN_KEY, str(start + offset), executable
                )
            except RegistryError as exc:
                raise RegistryError(
                    f"Could not disable {executable} due to error {exc}"
                ) from exc

        if not registry.key_exists(_ROOT, EXPLORER_POLICIES_KEY):
            message = f"Could not disable {self.label} due to error: key not found"
            logger.info("%s", message)
            raise RegistryError(message)
        try:
            registry.set_dword(_ROOT, EXPLORER_POLICIES_KEY, _POLICY_VALUE, 1)
        except RegistryError as exc:
            logger.info("%s", exc)
            raise RegistryError(
                f"Could not disable {self.label} due to error {exc}"
            ) from exc

    def _restore(self, host: Host) -> None:
        registry = host.registry
        if not registry.key_exists(_ROOT, EXPLORER_DISALLOW_RUN_KEY):
            raise RegistryError(f"OpenKey to enable {self.label} failed")

        # Entries equal to ours are removed even if something else created them.
        for entry, value in self._entries(host):
            if value in self.executables:
                try:
                    registry.delete_value(_ROOT, EXPLORER_DISALLOW_RUN_KEY, entry)
                except RegistryError as exc:
                    raise RegistryError(
                        f"Could not restore {value} by deleting corresponding "
                        f"registry value due to error: {exc}"
                    ) from exc
                logger.debug(
                    "Restored %s by deleting corresponding registry value", value
                )

        left = self._renumber(host)
        if left:
            return

        try:
            registry.delete_key(_ROOT, EXPLORER_DISALLOW_RUN_KEY)
            registry.delete_value(_ROOT, EXPLORER_POLICIES_KEY, _POLICY_VALUE)
        except RegistryError as exc:
            logger.info("%s", exc)
            raise RegistryError(ERROR_RESTORE_DISALLOW_RUN_FAILED) from exc

    def _renumber(self, host: Host) -> int:
        """Renumber the remaining entries from 1; return how many are left."""
        registry = host.registry
        try:
            names = registry.value_names(_ROOT, EXPLORER_DISALLOW_RUN_KEY)
        except RegistryError as exc:
            logger.info("%s", exc)
            return 0

        kept: dict[int, str] = {}
        for position, name in enumerate(names, start=1):
            try:
                content = registry.get_str(_ROOT, EXPLORER_DISALLOW_RUN_KEY, name)
            except RegistryError:
                break
            logger.debug("%s=%s", name, content)
            kept[position] = content
            try:
                registry.delete_value(_ROOT, EXPLORER_DISALLOW_RUN_KEY, name)
            except RegistryError as exc:
                logger.info("%s", exc)
                raise RegistryError(ERROR_RESTORE_DISALLOW_RUN_FAILED) from exc

        for position, content in kept.items():
            try:
                registry.set_sz(_ROOT, EXPLORER_DISALLOW_RUN_KEY, str(position), content)
            except RegistryError as exc:
                logger.info("%s", exc)
                raise RegistryError(ERROR_RESTORE_DISALLOW_RUN_FAILED) from exc
        return len(kept)

    def is_hardened(self, host: Host) -> bool:
        """Tell whether every executable is in the DisallowRun list."""
        if not host.registry.key_exists(_ROOT, EXPLORER_DISALLOW_RUN_KEY):
            logger.debug("IsHardened(): Could not open DisallowRun registry key")
            return False
        found = {value for _, value in self._entries(host)}
        return all(executable in found for executable in self.executables)


POWERSHELL = MultiHardenSubject(
    members=[
        DisallowRunMembers(
            executables=(POWERSHELL_ISE_EXE, POWERSHELL_EXE),
            label="PowerShell",
            name="PowerShell_DisallowRunMembers",
            long_name="PowerShell_DisallowRunMembers",
            description="PowerShell_DisallowRunMembers",
            harden_by_default=True,
        )
    ],
    name="Powershell",
    long_name="Disable Powershell",
    description=(
        "Disables Powershell and Powershell ISE to protect\n"
        "you from some malwares to execute Powershell scripts.\n"
        "You won't be able to start Powershell anymore."
    ),
    harden_by_default=True,
)