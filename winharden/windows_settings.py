"""Windows Explorer, AutoRun and Script Host hardening subjects."""

from __future__ import annotations

from .registry import RootKey
from .subjects import RegistryDword, RegistryMultiValue

_EXPLORER_POLICIES = "Software\\Microsoft\\Windows\\CurrentVersion\\Policies\\Explorer"
_AUTOPLAY_HANDLERS = "Software\\Microsoft\\Windows\\CurrentVersion\\Explorer\\AutoplayHandlers"
_EXPLORER_ADVANCED = "Software\\Microsoft\\Windows\\CurrentVersion\\Explorer\\Advanced"

AUTORUN = RegistryMultiValue(
    dwords=[
        RegistryDword(
            root=RootKey.CURRENT_USER,
            path=_EXPLORER_POLICIES,
            value_name="NoDriveTypeAutoRun",
            hardened_value=0xB5,
            name="Autorun_NoDriveTypeAutoRun",
        ),
        RegistryDword(
            root=RootKey.CURRENT_USER,
            path=_EXPLORER_POLICIES,
            value_name="NoAutorun",
            hardened_value=1,
            name="Autorun_NoAutorun",
        ),
        RegistryDword(
            root=RootKey.CURRENT_USER,
            path=_AUTOPLAY_HANDLERS,
            value_name="DisableAutoplay",
            hardened_value=1,
            name="Autorun_Autoplay",
        ),
    ],
    name="Autorun",
    long_name="AutoRun and AutoPlay",
    description=(
        "Disables automatic start of executables from\n"
        "removable media (e.g. USB storage or DVDs)"
    ),
    harden_by_default=True,
)

SHOW_FILE_EXT = RegistryMultiValue(
    dwords=[
        RegistryDword(
            root=RootKey.CURRENT_USER,
            path=_EXPLORER_ADVANCED,
            value_name="HideFileExt",
            hardened_value=0,
            name="ShowFileExt_FileExt",
        ),
        RegistryDword(
            root=RootKey.CURRENT_USER,
            path=_EXPLORER_ADVANCED,
            value_name="Hidden",
            hardened_value=1,
            name="ShowFileExt_Hidden",
        ),
        RegistryDword(
            root=RootKey.CURRENT_USER,
            path=_EXPLORER_ADVANCED,
            value_name="ShowSuperHidden",
            hardened_value=1,
            name="ShowFileExt_SuperHidden",
        ),
    ],
    name="Show File Ext",
    long_name="Show File Extensions",
    description="Windows explorer will show file extensions\n(e.g. .doc, .exe) for all files.",
    harden_by_default=True,
)

WSH = RegistryDword(
    root=RootKey.CURRENT_USER,
    path="SOFTWARE\\Microsoft\\Windows Script Host\\Settings",
    value_name="Enabled",
    hardened_value=0,
    name="WSH",
    long_name="Windows Script Host",
    description="Windows Script Host will be deactivated.\nYou can't e.g. execute VBS scripts anymore.",
    harden_by_default=True,
)