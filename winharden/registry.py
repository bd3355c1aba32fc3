"""Registry access: a Windows backend and an in-memory backend with the same interface."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from itertools import accumulate
from typing import Iterator

HARDENTOOLS_KEY_PATH = "SOFTWARE\\Security Without Borders\\"
LOG_PATH = "hardentools.log"
DEFAULT_LOG_LEVEL = "Info"
EXPLORER_POLICIES_KEY = "Software\\Microsoft\\Windows\\CurrentVersion\\Policies\\Explorer"
EXPLORER_DISALLOW_RUN_KEY = (
    "Software\\Microsoft\\Windows\\CurrentVersion\\Policies\\Explorer\\DisallowRun"
)
ERROR_RESTORE_DISALLOW_RUN_FAILED = "Fully restoring DisableRun settings failed"

_DWORD_MAX = 0xFFFFFFFF


class RegistryError(Exception):
    """Raised when a registry key or value cannot be read or written."""


class RootKey(Enum):
    """The predefined registry root keys."""

    CLASSES_ROOT = "CLASSES_ROOT"
    CURRENT_USER = "CURRENT_USER"
    LOCAL_MACHINE = "LOCAL_MACHINE"
    USERS = "USERS"
    CURRENT_CONFIG = "CURRENT_CONFIG"
    PERFORMANCE_DATA = "PERFORMANCE_DATA"


def root_key_from_name(name: str) -> RootKey:
    """Return the root key called *name* (e.g. ``CURRENT_USER``)."""
    try:
        return RootKey[name]
    except KeyError:
        raise RegistryError(
            "Invalid rootKeyName provided to restore registry function"
        ) from None


def _check_dword(value: int) -> int:
    if not 0 <= value <= _DWORD_MAX:
        raise ValueError(f"DWORD value out of range: {value}")
    return value


@dataclass
class _Value:
    name: str
    kind: str
    data: int | str


_DWORD = "dword"
_SZ = "sz"


class MemoryRegistry:
    """A registry kept in memory; paths and value names are case-insensitive."""

    def __init__(self) -> None:
        self._keys: dict[tuple[RootKey, str], dict[str, _Value]] = {}

    @staticmethod
    def _normalize(path: str) -> str:
        return "\\".join(part for part in path.split("\\") if part).casefold()

    def _key(self, root: RootKey, path: str) -> dict[str, _Value]:
        norm = self._normalize(path)
        if not norm:
            return self._keys.setdefault((root, ""), {})
        try:
            return self._keys[(root, norm)]
        except KeyError:
            raise RegistryError(f"registry key not found: {root.name}\\{path}") from None

    def _value(self, root: RootKey, path: str, name: str) -> _Value:
        try:
            return self._key(root, path)[name.casefold()]
        except KeyError:
            raise RegistryError(
                f"registry value not found: {root.name}\\{path}\\{name}"
            ) from None

    def key_exists(self, root: RootKey, path: str) -> bool:
        norm = self._normalize(path)
        return not norm or (root, norm) in self._keys

    def create_key(self, root: RootKey, path: str) -> None:
        parts = [part for part in self._normalize(path).split("\\") if part]
        for prefix in accumulate(parts, lambda head, tail: f"{head}\\{tail}"):
            self._keys.setdefault((root, prefix), {})

    def delete_key(self, root: RootKey, path: str) -> None:
        norm = self._normalize(path)
        if not norm or (root, norm) not in self._keys:
            raise RegistryError(f"registry key not found: {root.name}\\{path}")
        prefix = norm + "\\"
        if any(r is root and p.startswith(prefix) for r, p in self._keys):
            raise RegistryError(f"registry key has subkeys: {root.name}\\{path}")
        del self._keys[(root, norm)]

    def value_names(self, root: RootKey, path: str) -> list[str]:
        return [value.name for value in self._key(root, path).values()]

    def get_int(self, root: RootKey, path: str, name: str) -> int:
        value = self._value(root, path, name)
        if value.kind != _DWORD:
            raise RegistryError(f"registry value is not an integer: {name}")
        return int(value.data)

    def get_str(self, root: RootKey, path: str, name: str) -> str:
        value = self._value(root, path, name)
        if value.kind != _SZ:
            raise RegistryError(f"registry value is not a string: {name}")
        return str(value.data)

    def set_dword(self, root: RootKey, path: str, name: str, value: int) -> None:
        _check_dword(value)
        self._key(root, path)[name.casefold()] = _Value(name, _DWORD, value)

    def set_sz(self, root: RootKey, path: str, name: str, value: str) -> None:
        self._key(root, path)[name.casefold()] = _Value(name, _SZ, value)

    def delete_value(self, root: RootKey, path: str, name: str) -> None:
        self._value(root, path, name)
        del self._key(root, path)[name.casefold()]


@contextmanager
def _translated(root: RootKey, path: str, name: str = "") -> Iterator[None]:
    try:
        yield
    except OSError as exc:
        target = f"{root.name}\\{path}" + (f"\\{name}" if name else "")
        raise RegistryError(f"{target}: {exc}") from exc


class WindowsRegistry:
    """The live Windows registry."""

    def __init__(self) -> None:
        try:
            import winreg
        except ImportError as exc:
            raise RegistryError(
                "the Windows registry is not available on this platform"
            ) from exc
        self._winreg = winreg

    def _hkey(self, root: RootKey):
        return getattr(self._winreg, f"HKEY_{root.name}")

    def _open(self, root: RootKey, path: str, access: int):
        return self._winreg.OpenKey(self._hkey(root), path, 0, access)

    def key_exists(self, root: RootKey, path: str) -> bool:
        try:
            with self._open(root, path, self._winreg.KEY_READ):
                return True
        except OSError:
            return False

    def create_key(self, root: RootKey, path: str) -> None:
        with _translated(root, path):
            self._winreg.CreateKeyEx(
                self._hkey(root), path, 0, self._winreg.KEY_WRITE
            ).Close()

    def delete_key(self, root: RootKey, path: str) -> None:
        with _translated(root, path):
            self._winreg.DeleteKey(self._hkey(root), path)

    def value_names(self, root: RootKey, path: str) -> list[str]:
        with _translated(root, path), self._open(root, path, self._winreg.KEY_READ) as key:
            count = self._winreg.QueryInfoKey(key)[1]
            return [self._winreg.EnumValue(key, index)[0] for index in range(count)]

    def _query(self, root: RootKey, path: str, name: str):
        with _translated(root, path, name), self._open(
            root, path, self._winreg.KEY_QUERY_VALUE
        ) as key:
            return self._winreg.QueryValueEx(key, name)

    def get_int(self, root: RootKey, path: str, name: str) -> int:
        data, kind = self._query(root, path, name)
        if kind not in (self._winreg.REG_DWORD, self._winreg.REG_QWORD):
            raise RegistryError(f"registry value is not an integer: {name}")
        return int(data)

    def get_str(self, root: RootKey, path: str, name: str) -> str:
        data, kind = self._query(root, path, name)
        if kind not in (self._winreg.REG_SZ, self._winreg.REG_EXPAND_SZ):
            raise RegistryError(f"registry value is not a string: {name}")
        return str(data)

    def _set(self, root: RootKey, path: str, name: str, kind: int, value) -> None:
        with _translated(root, path, name), self._open(
            root, path, self._winreg.KEY_SET_VALUE
        ) as key:
            self._winreg.SetValueEx(key, name, 0, kind, value)

    def set_dword(self, root: RootKey, path: str, name: str, value: int) -> None:
        self._set(root, path, name, self._winreg.REG_DWORD, _check_dword(value))

    def set_sz(self, root: RootKey, path: str, name: str, value: str) -> None:
        self._set(root, path, name, self._winreg.REG_SZ, value)

    def delete_value(self, root: RootKey, path: str, name: str) -> None:
        with _translated(root, path, name), self._open(
            root, path, self._winreg.KEY_SET_VALUE
        ) as key:
            self._winreg.DeleteValue(key, name)