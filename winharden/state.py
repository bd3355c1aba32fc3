"""Saving, restoring and marking the registry state that hardening changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .registry import HARDENTOOLS_KEY_PATH, RegistryError, RootKey, root_key_from_name
from .system import Host

logger = logging.getLogger(__name__)

_STATUS_VALUE = "Harden"
_NON_REGISTRY_PREFIX = "SavedStateNonReg_"
_DWORD_MASK = 0xFFFFFFFF


class SavedKind(Enum):
    """The kinds of saved-state entries kept under the tool's own registry key."""

    LEGACY_DWORD = "SavedState_"
    DWORD = "SavedStateNew_"
    NOT_EXISTING = "SavedStateNotExisting_"
    SZ = "SavedStateNewSZ_"

    @property
    def prefix(self) -> str:
        return self.value

    @property
    def separator(self) -> str:
        """What separates the key path from the value name in the entry name."""
        return "_" if self is SavedKind.LEGACY_DWORD else "____"


@dataclass(frozen=True)
class SavedEntry:
    """A parsed saved-state entry: which value it belongs to and how it was saved."""

    kind: SavedKind
    root: RootKey
    path: str
    value_name: str


def _entry_name(kind: SavedKind, root: RootKey, path: str, value_name: str) -> str:
    return f"{kind.prefix}{root.name}\\{path}{kind.separator}{value_name}"


def parse_saved_entry(name: str) -> SavedEntry | None:
    """Parse a saved-state value name; None if *name* is not one.

    Raises RegistryError if the entry names an unknown root key.
    """
    for kind in SavedKind:
        if name.startswith(kind.prefix):
            break
    else:
        return None
    rest = name[len(kind.prefix):]
    root_name, _, rest = rest.partition("\\")
    path, found, value_name = rest.rpartition(kind.separator)
    if not found:
        return None
    root = root_key_from_name(root_name)
    return SavedEntry(kind, root, path, value_name)


def _open_tool_key(host: Host) -> None:
    host.registry.create_key(RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH)


def _save_not_existing(host: Host, root: RootKey, path: str, value_name: str) -> None:
    logger.debug(
        "Saving %s\\%s_%s as not existing before hardening", root.name, path, value_name
    )
    try:
        host.registry.set_dword(
            RootKey.CURRENT_USER,
            HARDENTOOLS_KEY_PATH,
            _entry_name(SavedKind.NOT_EXISTING, root, path, value_name),
            0,
        )
    except RegistryError as exc:
        logger.info("Could not save state due to error: %s", exc)
        raise


def save_original_dword(host: Host, root: RootKey, path: str, value_name: str) -> None:
    """Remember the current DWORD value (or its absence) before it is hardened."""
    _open_tool_key(host)
    try:
        original = host.registry.get_int(root, path, value_name)
    except RegistryError:
        _save_not_existing(host, root, path, value_name)
        return
    entry = _entry_name(SavedKind.DWORD, root, path, value_name)
    logger.debug("Saving value for: %s", entry)
    try:
        host.registry.set_dword(
            RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH, entry, original & _DWORD_MASK
        )
    except RegistryError as exc:
        logger.info("Could not save state due to error: %s", exc)


def save_original_sz(host: Host, root: RootKey, path: str, value_name: str) -> None:
    """Remember the current string value (or its absence) before it is hardened."""
    _open_tool_key(host)
    try:
        original = host.registry.get_str(root, path, value_name)
    except RegistryError:
        _save_not_existing(host, root, path, value_name)
        return
    entry = _entry_name(SavedKind.SZ, root, path, value_name)
    logger.debug("Saving value for: %s", entry)
    try:
        host.registry.set_sz(RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH, entry, original)
    except RegistryError as exc:
        logger.info("Could not save state due to error: %s", exc)


def retrieve_original_dword(host: Host, root: RootKey, path: str, value_name: str) -> int:
    """Return a DWORD saved in the legacy format; raises RegistryError if absent."""
    _open_tool_key(host)
    value = host.registry.get_int(
        RootKey.CURRENT_USER,
        HARDENTOOLS_KEY_PATH,
        _entry_name(SavedKind.LEGACY_DWORD, root, path, value_name),
    )
    return value & _DWORD_MASK


def _prepare_key(host: Host, root: RootKey, path: str) -> None:
    try:
        host.registry.create_key(root, path)
    except RegistryError as exc:
        raise RegistryError(
            f"Couldn't create / open registry key for write access: {root.name}\\{path}"
        ) from exc


def harden_dword(
    host: Host, root: RootKey, path: str, value_name: str, hardened_value: int
) -> None:
    """Save the original DWORD value, then set the hardened one."""
    _prepare_key(host, root, path)
    save_original_dword(host, root, path, value_name)
    try:
        host.registry.set_dword(root, path, value_name, hardened_value)
    except RegistryError as exc:
        raise RegistryError(
            f"Couldn't set registry value: {root.name} \\ {path} \\ {value_name}"
        ) from exc


def harden_sz(
    host: Host, root: RootKey, path: str, value_name: str, hardened_value: str
) -> None:
    """Save the original string value, then set the hardened one."""
    _prepare_key(host, root, path)
    save_original_sz(host, root, path, value_name)
    try:
        host.registry.set_sz(root, path, value_name, hardened_value)
    except RegistryError as exc:
        raise RegistryError(
            f"Couldn't set registry value: {root.name} \\ {path} \\ {value_name}"
        ) from exc


def _restore_entry(host: Host, entry: SavedEntry, saved: int | str) -> None:
    registry = host.registry
    if not registry.key_exists(entry.root, entry.path):
        logger.info("Could not open registry key %s", entry.path)
        return
    try:
        if entry.kind is SavedKind.NOT_EXISTING:
            registry.delete_value(entry.root, entry.path, entry.value_name)
        elif entry.kind is SavedKind.SZ:
            logger.debug(
                "restoreSavedRegistryKeys: Restoring registry value %s\\%s = %s",
                entry.path, entry.value_name, saved,
            )
            registry.set_sz(entry.root, entry.path, entry.value_name, str(saved))
        else:
            log = logger.info if entry.kind is SavedKind.LEGACY_DWORD else logger.debug
            log(
                "restoreSavedRegistryKeys: Restoring registry value %s\\%s = %d",
                entry.path, entry.value_name, saved,
            )
            registry.set_dword(
                entry.root, entry.path, entry.value_name, int(saved) & _DWORD_MASK
            )
    except RegistryError as exc:
        if entry.kind is SavedKind.NOT_EXISTING:
            logger.debug(
                "Could not restore registry value (by deleting) %s\\%s due to error: %s",
                entry.path, entry.value_name, exc,
            )
        else:
            logger.info(
                "Could not restore registry value %s\\%s = %s due to error: %s",
                entry.path, entry.value_name, saved, exc,
            )


def restore_saved_registry_keys(host: Host) -> None:
    """Put every saved registry value back; raises RegistryError without saved state."""
    registry = host.registry
    tool = (RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH)
    if not registry.key_exists(*tool):
        raise RegistryError(f"registry key not found: CURRENT_USER\\{HARDENTOOLS_KEY_PATH}")
    names = registry.value_names(*tool)

    parsed: list[tuple[SavedEntry, str]] = []
    for name in names:
        try:
            entry = parse_saved_entry(name)
        except RegistryError as exc:
            logger.info("%s", exc)
            continue
        if entry is not None:
            parsed.append((entry, name))

    # Integer entries first, then string entries.
    for entry, name in parsed:
        if entry.kind is SavedKind.SZ:
            continue
        try:
            saved: int | str = registry.get_int(*tool, name)
        except RegistryError:
            continue
        logger.debug(
            "to be restored: %s\\%s\\%s = %s",
            entry.root.name, entry.path, entry.value_name, saved,
        )
        _restore_entry(host, entry, saved)

    for entry, name in parsed:
        if entry.kind is not SavedKind.SZ:
            continue
        try:
            saved = registry.get_str(*tool, name)
        except RegistryError:
            continue
        logger.debug(
            "to be restored: %s\\%s\\%s = %s",
            entry.root.name, entry.path, entry.value_name, saved,
        )
        _restore_entry(host, entry, saved)


def save_harden_state(host: Host, feature: str, state: str) -> None:
    """Remember a state for a feature that is not kept in the registry."""
    _open_tool_key(host)
    logger.debug("Saving value for feature: %s with %s", feature, state)
    try:
        host.registry.set_sz(
            RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH, _NON_REGISTRY_PREFIX + feature, state
        )
    except RegistryError as exc:
        logger.info("Could not save state due to error: %s", exc)


def get_saved_harden_state(host: Host, feature: str) -> str:
    """Return the saved state of *feature*; raises RegistryError if none is saved."""
    try:
        state = host.registry.get_str(
            RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH, _NON_REGISTRY_PREFIX + feature
        )
    except RegistryError as exc:
        logger.debug(
            "Could not retrieve saved state for feature %s due to error: %s", feature, exc
        )
        raise
    logger.debug("Retreived saved state for feature %s:%s", feature, state)
    return state


def delete_saved_harden_state(host: Host, feature: str) -> None:
    """Forget the saved state of *feature*; raises RegistryError if there is none."""
    try:
        host.registry.delete_value(
            RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH, _NON_REGISTRY_PREFIX + feature
        )
    except RegistryError as exc:
        logger.info(
            "Could not delete saved state for feature %s due to error %s", feature, exc
        )
        raise


def check_status(host: Host) -> bool:
    """Tell whether the system is marked as hardened."""
    try:
        value = host.registry.get_int(
            RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH, _STATUS_VALUE
        )
    except RegistryError:
        return False
    return value == 1


def mark_status(host: Host, hardened: bool) -> None:
    """Mark the system as hardened, or remove all saved state after a restore."""
    registry = host.registry
    if hardened:
        try:
            registry.create_key(RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH)
        except RegistryError as exc:
            logger.info("%s", exc)
            raise
        try:
            registry.set_dword(RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH, _STATUS_VALUE, 1)
        except RegistryError as exc:
            logger.info("%s", exc)
            logger.info(
                "Error: Could not set hardentools registry keys - restore will not work!"
            )
            raise
        return
    try:
        registry.delete_key(RootKey.CURRENT_USER, HARDENTOOLS_KEY_PATH)
    except RegistryError as exc:
        logger.info("%s", exc)
        logger.info(
            "Remove hardentools registry keys failed with error: Could not remove"
        )