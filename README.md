# winharden

winharden is a library that turns off Windows features that attackers often
abuse. It can also put them back the way they were. It is meant for people at
risk who will give up some convenience for more security. It is not meant for
corporate networks.

## What it can harden

Each hardening is a *subject*. A subject has `name`, `long_name`,
`description` and `harden_by_default`, and two methods:
`harden(host, harden)` and `is_hardened(host)`.

- `winharden.windows_settings`: `WSH` (Windows Script Host), `AUTORUN`
  (AutoRun and AutoPlay) and `SHOW_FILE_EXT` (show file extensions and hidden
  files in Explorer)
- `winharden.office`: `OFFICE_OLE`, `OFFICE_MACROS`, `OFFICE_ACTIVEX`,
  `OFFICE_DDE` and `ONENOTE_BLOCK_EXTENSIONS`
- `winharden.adobe`: `ADOBE_PDF_JS`, `ADOBE_PDF_OBJECTS`,
  `ADOBE_PDF_PROTECTED_MODE`, `ADOBE_PDF_PROTECTED_VIEW` and
  `ADOBE_PDF_ENHANCED_SECURITY`
- `winharden.disallow_run`: `POWERSHELL` adds `powershell_ise.exe` and
  `powershell.exe` to the Explorer DisallowRun policy
- `winharden.asr`: `WindowsASR` switches on Windows Defender Attack Surface
  Reduction rules through PowerShell. It needs Windows 10 build 1709 or newer.

You can build your own subjects from the classes in `winharden.subjects`
(`RegistryDword`, `RegistrySz`, `RegistryMultiValue`, `MultiHardenSubject`),
`winharden.office.OfficeRegexDword` and `winharden.adobe.AdobeRegexDword`.

## Hosts

Every registry and command operation goes through a `winharden.system.Host`.
A host holds:

- a registry: `WindowsRegistry` for the live system, or `MemoryRegistry` for
  tests and dry runs
- a runner for external programs (by default `run_command`)
- an optional notifier for messages to the user

`default_host()` returns a host on the live Windows registry. On any other
platform it raises `RegistryError`.

## Saving and restoring

Before a registry value is hardened, winharden saves its old value under
`HKEY_CURRENT_USER\SOFTWARE\Security Without Borders\`. If the value did not
exist, it saves that fact instead.

Restoring a registry-value subject does nothing by itself. The old values come
back through `winharden.state.restore_saved_registry_keys(host)`. That call
deletes any value that did not exist before hardening. The DisallowRun and ASR
subjects do their restoring in `harden(host, False)`.

`check_status(host)` tells whether the system is marked as hardened.
`mark_status(host, True)` sets that mark. `mark_status(host, False)` removes the
tool's key with all saved state.

```python
from winharden.registry import MemoryRegistry
from winharden.state import check_status, mark_status, restore_saved_registry_keys
from winharden.system import Host
from winharden.windows_settings import WSH

host = Host(registry=MemoryRegistry())

WSH.harden(host, True)
mark_status(host, True)
assert WSH.is_hardened(host) and check_status(host)

restore_saved_registry_keys(host)
mark_status(host, False)
assert not WSH.is_hardened(host) and not check_status(host)
```

## What it does not do

- winharden installs no command and has no graphical interface. You call it
  from Python.
- It has no ready-made list of subjects for users with and without
  administrator rights. You choose which subjects to apply.
- `system.is_elevated()` reports whether the process has administrative
  rights. winharden never asks for those rights or restarts itself with them.

Restart Windows after hardening or restoring so that every change takes
effect.

## Installation and tests

The package needs only the standard library. To change a real system it has
to run on Windows.

```
pip install .[test]
pytest
```