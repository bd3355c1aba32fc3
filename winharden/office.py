"""Microsoft Office and OneNote hardening subjects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .registry import RootKey
from .subjects import MultiHardenSubject, RegistryDword
from .system import Host

STANDARD_OFFICE_VERSIONS = (
    "12.0",  # Office 2007
    "14.0",  # Office 2010
    "15.0",  # Office 2013
    "16.0",  # Office 2016, 2019 and Office 365 (local client)
)

STANDARD_OFFICE_APPS = ("Excel", "PowerPoint", "Word")

_OFFICE_2010_AND_LATER = ("14.0", "15.0", "16.0")

PATH_OPTIONS = "SOFTWARE\\Microsoft\\Office\\{version}\\{app}\\Options"
PATH_WORD_MAIL = "SOFTWARE\\Microsoft\\Office\\{version}\\{app}\\Options\\WordMail"
PATH_SECURITY = "Software\\Microsoft\\Office\\{version}\\{app}\\Security"
PATH_WORD_2007 = "Software\\Microsoft\\Office\\12.0\\Word\\Options\\vpref"
_PATH_SECURITY_UPPER = "SOFTWARE\\Microsoft\\Office\\{version}\\{app}\\Security"


@dataclass
class OfficeRegexDword:
    """One DWORD value set for every combination of Office version and application.

    ``path_template`` holds ``{version}`` and ``{app}`` placeholders.
    """

    root: RootKey
    path_template: str
    value_name: str
    hardened_value: int
    apps: Sequence[str]
    versions: Sequence[str]
    name: str = ""
    long_name: str = ""
    description: str = ""
    harden_by_default: bool = False

    def expand(self) -> list[RegistryDword]:
        """The single registry values this subject covers, version by version."""
        return [
            RegistryDword(
                root=self.root,
                path=self.path_template.format(version=version, app=app),
                value_name=self.value_name,
                hardened_value=self.hardened_value,
                name=self.name,
                long_name=self.long_name,
                description=self.description,
            )
            for version in self.versions
            for app in self.apps
        ]

    def harden(self, host: Host, harden: bool) -> None:
        """Harden or restore every value, stopping at the first error."""
        for value in self.expand():
            value.harden(host, harden)

    def is_hardened(self, host: Host) -> bool:
        """Tell whether every value is hardened; every value is checked."""
        results = [value.is_hardened(host) for value in self.expand()]
        return all(results)


OFFICE_OLE = OfficeRegexDword(
    root=RootKey.CURRENT_USER,
    path_template=_PATH_SECURITY_UPPER,
    value_name="PackagerPrompt",
    hardened_value=2,  # no prompt, object does not execute
    apps=STANDARD_OFFICE_APPS,
    versions=STANDARD_OFFICE_VERSIONS,
    name="Office OLE",
    long_name="Office Packager Objects (OLE)",
    description=(
        "Disables OLE object execution within MS Office.\n"
        "Files that use OLE objects might not work as expected."
    ),
    harden_by_default=True,
)

OFFICE_MACROS = OfficeRegexDword(
    root=RootKey.CURRENT_USER,
    path_template=_PATH_SECURITY_UPPER,
    value_name="VBAWarnings",
    hardened_value=4,  # disable all
    apps=STANDARD_OFFICE_APPS,
    versions=STANDARD_OFFICE_VERSIONS,
    name="Office Macros",
    long_name="Office Macros",
    description="Disables macros in MS Office. Files\nthat use macros might not work as expected.",
    harden_by_default=True,
)

OFFICE_ACTIVEX = RegistryDword(
    root=RootKey.CURRENT_USER,
    path="SOFTWARE\\Microsoft\\Office\\Common\\Security",
    value_name="DisableAllActiveX",
    hardened_value=1,
    name="Office ActiveX",
    long_name="Office ActiveX",
    description=(
        "Disables ActiveX macros in MS Office. Files\n"
        "that use ActiveX macros might not work as expected."
    ),
    harden_by_default=True,
)

OFFICE_DDE = MultiHardenSubject(
    members=[
        OfficeRegexDword(
            root=RootKey.CURRENT_USER,
            path_template=PATH_SECURITY,
            value_name="AllowDDE",
            hardened_value=0,
            apps=("Word",),
            versions=_OFFICE_2010_AND_LATER,
            name="OfficeDDE_AllowDDE_Word",
        ),
        OfficeRegexDword(
            root=RootKey.CURRENT_USER,
            path_template=PATH_SECURITY,
            value_name="WorkbookLinkWarnings",
            hardened_value=2,
            apps=("Excel",),
            versions=STANDARD_OFFICE_VERSIONS,
            name="OfficeDDE_WorkbookLinksExcel",
        ),
        OfficeRegexDword(
            root=RootKey.CURRENT_USER,
            path_template=PATH_OPTIONS,
            value_name="DontUpdateLinks",
            hardened_value=1,
            apps=("Word", "Excel"),
            versions=_OFFICE_2010_AND_LATER,
            name="OfficeDDE_DontUpdateLinksWordExcel",
        ),
        OfficeRegexDword(
            root=RootKey.CURRENT_USER,
            path_template=PATH_WORD_MAIL,
            value_name="DontUpdateLinks",
            hardened_value=1,
            apps=("Word",),
            versions=_OFFICE_2010_AND_LATER,
            name="OfficeDDE_DontUpdateLinksWordMail",
        ),
        RegistryDword(
            root=RootKey.CURRENT_USER,
            path=PATH_WORD_2007,
            value_name="fNoCalclinksOnopen_90_1",
            hardened_value=1,
            name="OfficeDDE_Word2007",
        ),
    ],
    name="Office DDE",
    long_name="Office DDE Mitigations",
    description=(
        "Disables Dynamic Data Exchange (DDE) in MS Office Word and\n"
        "Excel. Files that use DDE might not work as expected.\n"
        "Disabling this feature could prevent Excel spreadsheets\n"
        "from updating dynamically if disabled in the registry.\n"
        "Data that is fetched from other files or systems will\n"
        "not be update automatically. The user must start then\n"
        "update manually."
    ),
    harden_by_default=True,
)

ONENOTE_BLOCK_EXTENSIONS = OfficeRegexDword(
    root=RootKey.CURRENT_USER,
    path_template=PATH_OPTIONS,
    value_name="DisableEmbeddedFiles",
    hardened_value=1,
    apps=("onenote",),
    versions=STANDARD_OFFICE_VERSIONS,
    name="OneNote Attachments",
    long_name="Block OneNote Attachments",
    description="Disables opening of attachments in OneNote",
    harden_by_default=True,
)