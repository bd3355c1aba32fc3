import pytest

from winharden.disallow_run import (
    POWERSHELL,
    POWERSHELL_EXE,
    POWERSHELL_ISE_EXE,
    DisallowRunMembers,
)
from winharden.registry import (
    EXPLORER_DISALLOW_RUN_KEY,
    EXPLORER_POLICIES_KEY,
    MemoryRegistry,
    RegistryError,
    RootKey,
)
from winharden.system import CommandError, Host

CU = RootKey.CURRENT_USER


def _no_commands(program, *args):
    raise CommandError(program, args)


@pytest.fixture
def host():
    return Host(registry=MemoryRegistry(), runner=_no_commands)


@pytest.fixture
def members():
    return DisallowRunMembers(
        executables=(POWERSHELL_ISE_EXE, POWERSHELL_EXE), label="PowerShell"
    )


def test_harden_on_empty_registry(host, members):
    members.harden(host, True)
    reg = host.registry
    assert reg.get_str(CU, EXPLORER_DISALLOW_RUN_KEY, "1") == POWERSHELL_ISE_EXE
    assert reg.get_str(CU, EXPLORER_DISALLOW_RUN_KEY, "2") == POWERSHELL_EXE
    assert reg.get_int(CU, EXPLORER_POLICIES_KEY, "DisallowRun") == 1
    assert members.is_hardened(host) is True


def test_harden_appends_after_existing_entries(host, members):
    reg = host.registry
    reg.create_key(CU, EXPLORER_DISALLOW_RUN_KEY)
    reg.set_sz(CU, EXPLORER_DISALLOW_RUN_KEY, "1", "cmd.exe")
    members.harden(host, True)
    assert reg.get_str(CU, EXPLORER_DISALLOW_RUN_KEY, "1") == "cmd.exe"
    assert reg.get_str(CU, EXPLORER_DISALLOW_RUN_KEY, "2") == POWERSHELL_ISE_EXE
    assert reg.get_str(CU, EXPLORER_DISALLOW_RUN_KEY, "3") == POWERSHELL_EXE


def test_restore_removes_key_and_policy_value(host, members):
    members.harden(host, True)
    members.harden(host, False)
    reg = host.registry
    assert reg.key_exists(CU, EXPLORER_DISALLOW_RUN_KEY) is False
    with pytest.raises(RegistryError):
        reg.get_int(CU, EXPLORER_POLICIES_KEY, "DisallowRun")
    assert members.is_hardened(host) is False


def test_restore_keeps_and_renumbers_other_entries(host, members):
    reg = host.registry
    reg.create_key(CU, EXPLORER_DISALLOW_RUN_KEY)
    reg.set_sz(CU, EXPLORER_DISALLOW_RUN_KEY, "1", "cmd.exe")
    members.harden(host, True)
    reg.set_sz(CU, EXPLORER_DISALLOW_RUN_KEY, "5", "mshta.exe")
    members.harden(host, False)
    assert reg.key_exists(CU, EXPLORER_DISALLOW_RUN_KEY) is True
    assert sorted(reg.value_names(CU, EXPLORER_DISALLOW_RUN_KEY)) == ["1", "2"]
    assert reg.get_str(CU, EXPLORER_DISALLOW_RUN_KEY, "1") == "cmd.exe"
    assert reg.get_str(CU, EXPLORER_DISALLOW_RUN_KEY, "2") == "mshta.exe"
    assert reg.get_int(CU, EXPLORER_POLICIES_KEY, "DisallowRun") == 1


def test_restore_without_key_raises(host, members):
    with pytest.raises(RegistryError):
        members.harden(host, False)


def test_is_hardened_needs_every_executable(host, members):
    reg = host.registry
    reg.create_key(CU, EXPLORER_DISALLOW_RUN_KEY)
    reg.set_sz(CU, EXPLORER_DISALLOW_RUN_KEY, "1", POWERSHELL_EXE)
    assert members.is_hardened(host) is False
    reg.set_sz(CU, EXPLORER_DISALLOW_RUN_KEY, "2", POWERSHELL_ISE_EXE)
    assert members.is_hardened(host) is True


def test_is_hardened_false_without_key(host, members):
    assert members.is_hardened(host) is False


def test_powershell_subject_round_trip(host):
    assert POWERSHELL.name == "Powershell"
    assert POWERSHELL.harden_by_default is True
    POWERSHELL.harden(host, True)
    assert POWERSHELL.is_hardened(host) is True
    POWERSHELL.harden(host, False)
    assert POWERSHELL.is_hardened(host) is False