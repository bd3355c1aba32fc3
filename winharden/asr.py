"""Windows Defender Attack Surface Reduction (ASR) rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import zip_longest

from .registry import RegistryError, RootKey
from .system import CommandError, Host

logger = logging.getLogger(__name__)

POWERSHELL = "PowerShell.exe"
WINDOWS_VERSION_KEY = "SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion"
MINIMUM_BUILD = "15254"

RULE_IDS = (
    "BE9BA2D9-53EA-4CDC-84E5-9B1EEEE46550",  # executable content from email
    "D4F940AB-401B-4EFC-AADC-AD5F3C50688A",  # Office child processes
    "3B576869-A4EC-4529-8536-B80A7769E899",  # Office executable content
    "75668C1F-73B5-4CF0-BB93-3ECF5CB7CC84",  # Office code injection
    "D3E037E1-3EB8-44C8-A917-57927947596D",  # JS/VBS launching downloads
    "5BEB7EFE-FD9A-4556-801D-275E5FFC04CC",  # obfuscated scripts
    "92E97FA1-2EDF-4476-BDD6-9DD0B4DDDC7B",  # Win32 API calls from macros
    "B2B3F03D-6A65-4F7B-A9C7-1C7EF74A9BA4",  # unsigned processes from USB
    "C1DB55AB-C21A-4637-BB3F-A12568109D35",  # ransomware protection
    "D1E49AAC-8F56-4280-B9BA-993A6D77406C",  # PSExec and WMI process creation
    "26190899-1602-49e8-8b27-eb1d0a1ce869",  # Office communication child processes
    "7674ba52-37eb-4a4f-a9a1-f0f9a1619a2c",  # Adobe Reader child processes
    "e6db77e5-3df2-4cf1-b95a-636979351e5b",  # WMI event subscription persistence
    "9e6c4e1f-7d60-472f-ba1a-a39ef669e4b2",  # LSASS credential stealing
)

_DESCRIPTION = """Windows Attack Surface Reduction (ASR) rules are activated 
that prevents certain action commonly used by malware to be executed.
Complete list is: 
- Block executable content from email client and webmail.
- Block Office applications from creating child processes.
- Block Office applications from creating executable content.
- Block Office applications from injecting code into other processes.
- Block JavaScript or VBScript from launching downloaded executable content.
- Block execution of potentially obfuscated scripts.
- Block Win32 API calls from Office macro.
- Block untrusted and unsigned processes that run from USB.
- Use advanced protection against ransomware.
- Block process creations originating from PSExec and WMI commands.
- Block Office communication application from creating child processes.
- Block Adobe Reader from creating child processes.
- Block persistence through WMI event subscription.
- Block credential stealing from the Windows local security authority subsystem."""


def _powershell(host: Host, command: str) -> str:
    return host.run(POWERSHELL, "-noprofile", "-Command", command)


def add_mp_preference(host: Host, rule_id: str, enabled: bool) -> None:
    """Enable or disable one ASR rule with Add-MpPreference."""
    action = "Enabled" if enabled else "Disabled"
    command = (
        f"Add-MpPreference -AttackSurfaceReductionRules_Ids {rule_id} "
        f"-AttackSurfaceReductionRules_Actions {action}"
    )
    logger.debug('WindowsASR: Executing Powershell.exe with command "%s"', command)
    try:
        out = _powershell(host, command)
    except CommandError as exc:
        logger.info(
            "ERROR: WindowsASR: Verify if Windows Defender is running. "
            'Executing Powershell.exe with command "%s" failed.',
            command,
        )
        logger.info("ERROR: WindowsASR: Powershell Output was: %s", exc.output)
        raise RuntimeError(
            f"Executing powershell cmdlet Add-MpPreference failed ({rule_id} = {action})"
        ) from exc
    logger.debug("WindowsASR: Powershell output was:\n%s", out)


def check_windows_version(host: Host) -> bool:
    """Tell whether the system is Windows 10 build 1709 or newer."""
    registry = host.registry
    root = RootKey.LOCAL_MACHINE
    try:
        major = registry.get_int(root, WINDOWS_VERSION_KEY, "CurrentMajorVersionNumber")
        if major < 10:
            return False
        minor = registry.get_int(root, WINDOWS_VERSION_KEY, "CurrentMinorVersionNumber")
        if minor < 0:
            return False
        build = registry.get_str(root, WINDOWS_VERSION_KEY, "CurrentBuild")
    except RegistryError:
        return False
    # The build number is compared as a string, as Windows reports it.
    return build >= MINIMUM_BUILD


def warn_if_defender_not_active(host: Host) -> None:
    """Tell the user when Defender settings keep ASR rules from working."""
    checks = (
        (
            "(Get-MpPreference).MAPSReporting",
            "2",
            "Windows Defender Cloud Protection  is not enabled. "
            "Return Value = '{out}' instead of '2'",
            "Windows Defender Cloud Protection  is not enabled.\nSome ASR rules won't work.",
        ),
        (
            "(Get-MpPreference).DisableRealtimeMonitoring",
            "False",
            "Windows Defender Realtime Protection is not enabled. "
            "Return Value = '{out}' instead of 'True'",
            "Windows Defender Realtime Protection is not enabled.\nASR rules won't work.",
        ),
    )
    for command, expected, log_text, message in checks:
        try:
            out = _powershell(host, command)
        except CommandError:
            logger.info(
                "Could not verify if Windows Defender Cloud Protection is enabled "
                "due to error accessing registry"
            )
            return
        out = out.replace("\r\n", "")
        if out != expected:
            logger.info(log_text.format(out=out))
            host.notify(message)


@dataclass
class WindowsASR:
    """Hardening subject that switches on the ASR rules in RULE_IDS."""

    name: str = "Windows ASR rules"
    long_name: str = "Windows ASR rules"
    description: str = _DESCRIPTION
    harden_by_default: bool = True

    def harden(self, host: Host, harden: bool) -> None:
        """Enable (harden) or disable (restore) all ASR rules."""
        if not check_windows_version(host):
            if harden:
                logger.info(
                    "Windows ASR not activated, since it needs at least Windows 10 - 1709"
                )
            return
        if harden:
            warn_if_defender_not_active(host)
        for rule_id in RULE_IDS:
            add_mp_preference(host, rule_id, harden)

    def is_hardened(self, host: Host) -> bool:
        """Tell whether every rule is present and enabled."""
        if not check_windows_version(host):
            return False
        outputs = []
        for command in (
            "$prefs = Get-MpPreference; $prefs.AttackSurfaceReductionRules_Ids",
            "$prefs = Get-MpPreference; $prefs.AttackSurfaceReductionRules_Actions",
        ):
            try:
                outputs.append(_powershell(host, command))
            except CommandError as exc:
                logger.info(
                    "ERROR: WindowsASR: Verify if Windows Defender is running. "
                    'Executing Powershell.exe with command "%s" failed.',
                    command,
                )
                logger.info("ERROR: WindowsASR: Powershell Output was: %s", exc.output)
                return False

        current = list(
            zip_longest(outputs[0].split("\r\n"), outputs[1].split("\r\n"), fillvalue="")
        )
        for index, (rule_id, action) in enumerate(current):
            if rule_id:
                logger.debug("ruleID %d = %s with action = %s", index, rule_id, action)

        for wanted in RULE_IDS:
            found = False
            for rule_id, action in current:
                if rule_id.lower() == wanted.lower():
                    if action != "1":
                        return False
                    found = True
            if not found:
                return False
        return True