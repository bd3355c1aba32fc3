"""Acrobat Reader hardening subjects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .registry import RootKey
from .subjects import MultiHardenSubject, RegistryDword
from .system import Host

STANDARD_ADOBE_VERSIONS = (
    "DC",  # Acrobat Reader DC
    "2020",  # Acrobat Reader 2020
    "XI",  # Acrobat Reader XI (outdated)
)

_READER_PATH = "SOFTWARE\\Adobe\\Acrobat Reader\\{version}\\"


@dataclass
class AdobeRegexDword:
    """One DWORD value set for every Acrobat Reader version.

    ``path_template`` holds a ``{version}`` placeholder.
    """

    root: RootKey
    path_template: str
    value_name: str
    hardened_value: int
    versions: Sequence[str] = STANDARD_ADOBE_VERSIONS
    name: str = ""
    long_name: str = ""
    description: str = ""
    harden_by_default: bool = False

    def expand(self) -> list[RegistryDword]:
        """The single registry values this subject covers, one per version."""
        return [
            RegistryDword(
                root=self.root,
                path=self.path_template.format(version=version),
                value_name=self.value_name,
                hardened_value=self.hardened_value,
                name=self.name,
                long_name=self.long_name,
                description=self.description,
            )
            for version in self.versions
        ]

    def harden(self, host: Host, harden: bool) -> None:
        """Harden or restore every value, stopping at the first error."""
        for value in self.expand():
            value.harden(host, harden)

    def is_hardened(self, host: Host) -> bool:
        """Tell whether every value is hardened; every value is checked."""
        results = [value.is_hardened(host) for value in self.expand()]
        return all(results)


ADOBE_PDF_JS = AdobeRegexDword(
    root=RootKey.CURRENT_USER,
    path_template=_READER_PATH + "JSPrefs",
    value_name="bEnableJS",
    hardened_value=0,  # disable AcroJS
    name="Adobe JavaScript",
    long_name="Acrobat Reader JavaScript",
    description=(
        "Disables JavaScript in Acrobat Reader. PDF documents\n"
        "that use JavaScript code might not work as expected."
    ),
    harden_by_default=True,
)

ADOBE_PDF_OBJECTS = MultiHardenSubject(
    members=[
        AdobeRegexDword(
            root=RootKey.CURRENT_USER,
            path_template=_READER_PATH + "Originals",
            value_name="bAllowOpenFile",
            hardened_value=0,
            name="AdobePDFObjects_bAllowOpenFile",
        ),
        AdobeRegexDword(
            root=RootKey.CURRENT_USER,
            path_template=_READER_PATH + "Originals",
            value_name="bSecureOpenFile",
            hardened_value=1,
            name="AdobePDFObjects_bSecureOpenFile",
        ),
    ],
    name="Adobe Objects",
    long_name="Acrobat Reader Embedded Objects",
    description=(
        "Disables Acrobat Reader embedded objects. PDF documents\n"
        "that contain embedded files might not work as expected."
    ),
    harden_by_default=True,
)

ADOBE_PDF_PROTECTED_MODE = AdobeRegexDword(
    root=RootKey.CURRENT_USER,
    path_template=_READER_PATH + "Privileged",
    value_name="bProtectedMode",
    hardened_value=1,
    name="Adobe Protected Mode",
    long_name="Acrobat Reader Protected Mode",
    description=(
        "Enables Acrobat Reader Protected Mode. This is already\n"
        "enabled by default in current Acrobat Reader versions."
    ),
    harden_by_default=True,
)

ADOBE_PDF_PROTECTED_VIEW = AdobeRegexDword(
    root=RootKey.CURRENT_USER,
    path_template=_READER_PATH + "TrustManager",
    value_name="iProtectedView",
    hardened_value=1,
    name="Adobe Protected View",
    long_name="Acrobat Reader Protected View",
    description=(
        "Enables Acrobat Reader Protected View for all files from\n"
        "untrusted sources. In the Protected View mode,\n"
        "most features are disabled. You can view the PDF,\n"
        "but not do much else. In the Protected View, a yellow\n"
        "bar displays on top of the Reader  window. Click\n"
        "Enable All Features to exit the Protected View."
    ),
    harden_by_default=True,
)

ADOBE_PDF_ENHANCED_SECURITY = MultiHardenSubject(
    members=[
        AdobeRegexDword(
            root=RootKey.CURRENT_USER,
            path_template=_READER_PATH + "TrustManager",
            value_name="bEnhancedSecurityInBrowser",
            hardened_value=1,
            name="AdobePDFEnhancedSecurity_bEnhancedSecurityInBrowser",
        ),
        AdobeRegexDword(
            root=RootKey.CURRENT_USER,
            path_template=_READER_PATH + "TrustManager",
            value_name="bEnhancedSecurityStandalone",
            hardened_value=1,
            name="AdobePDFEnhancedSecurity_bEnhancedSecurityStandalone",
        ),
    ],
    name="Adobe Enhanced Security",
    long_name="Acrobat Reader Enhanced Security",
    description=(
        "Enables Acrobat Reader Enhanced Security. This is already\n"
        "enabled by default in current Acrobat Reader versions."
    ),
    harden_by_default=True,
)