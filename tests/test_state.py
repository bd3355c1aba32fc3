import pytest

from winharden.registry import HARDENTOOLS_KEY_PATH, MemoryRegistry, RegistryError, RootKey
from winharden.state import (
    SavedKind,
    check_status,
    delete_saved_harden_state,
    get_saved_harden_state,
    harden_dword,
    harden_sz,
    mark_status,
    parse_saved_entry,
    restore_saved_registry_keys,
    retrieve_original_dword,
    save_harden_state,
    save_original_dword,
    save_original_sz,
)
from winharden.system import Host

CU = RootKey.CURRENT_USER
LM = RootKey.LOCAL_MACHINE
WSH_PATH = "SOFTWARE\\Microsoft\\Windows Script Host\\Settings"


@pytest.fixture
def host():
    return Host(registry=MemoryRegistry())


def test_parse_new_dword_entry():
    entry = parse_saved_entry(
        "SavedStateNew_CURRENT_USER\\SOFTWARE\\Microsoft\\Windows Script Host\\Settings____Enabled"
    )
    assert entry.kind is SavedKind.DWORD
    assert entry.root is CU
    assert entry.path == WSH_PATH
    assert entry.value_name == "Enabled"


def test_parse_legacy_entry_splits_on_last_underscore():
    entry = parse_saved_entry("SavedState_LOCAL_MACHINE\\SYSTEM\\Lsa_RunAsPPL")
    assert entry.kind is SavedKind.LEGACY_DWORD
    assert entry.root is LM
    assert entry.path == "SYSTEM\\Lsa"
    assert entry.value_name == "RunAsPPL"


def test_parse_sz_and_not_existing_entries():
    sz = parse_saved_entry("SavedStateNewSZ_LOCAL_MACHINE\\A\\B____Value")
    missing = parse_saved_entry("SavedStateNotExisting_CURRENT_USER\\A____Final")
    assert (sz.kind, sz.path, sz.value_name) == (SavedKind.SZ, "A\\B", "Value")
    assert (missing.kind, missing.path, missing.value_name) == (
        SavedKind.NOT_EXISTING,
        "A",
        "Final",
    )


def test_parse_unrelated_names():
    assert parse_saved_entry("Harden") is None
    assert parse_saved_entry("SavedStateNonReg_recall") is None


def test_parse_invalid_root_raises():
    with pytest.raises(RegistryError):
        parse_saved_entry("SavedStateNew_NOWHERE\\A____B")


def test_harden_dword_sets_value_and_restore_puts_original_back(host):
    host.registry.create_key(CU, WSH_PATH)
    host.registry.set_dword(CU, WSH_PATH, "Enabled", 1)
    harden_dword(host, CU, WSH_PATH, "Enabled", 0)
    assert host.registry.get_int(CU, WSH_PATH, "Enabled") == 0
    restore_saved_registry_keys(host)
    assert host.registry.get_int(CU, WSH_PATH, "Enabled") == 1


def test_harden_dword_of_missing_value_is_deleted_on_restore(host):
    harden_dword(host, LM, "SYSTEM\\Lsa", "RunAsPPL", 1)
    assert host.registry.get_int(LM, "SYSTEM\\Lsa", "RunAsPPL") == 1
    restore_saved_registry_keys(host)
    assert "RunAsPPL" not in host.registry.value_names(LM, "SYSTEM\\Lsa")


def test_harden_sz_round_trip(host):
    path = "SOFTWARE\\Policies\\LibreOffice\\X"
    host.registry.create_key(LM, path)
    host.registry.set_sz(LM, path, "Value", "2")
    harden_sz(host, LM, path, "Value", "3")
    assert host.registry.get_str(LM, path, "Value") == "3"
    restore_saved_registry_keys(host)
    assert host.registry.get_str(LM, path, "Value") == "2"


def test_save_original_dword_records_absence(host):
    save_original_dword(host, CU, "Nowhere", "Thing")
    names = host.registry.value_names(CU, HARDENTOOLS_KEY_PATH)
    assert names == ["SavedStateNotExisting_CURRENT_USER\\Nowhere____Thing"]
    assert host.registry.get_int(CU, HARDENTOOLS_KEY_PATH, names[0]) == 0


def test_save_original_sz_records_string(host):
    host.registry.create_key(CU, "K")
    host.registry.set_sz(CU, "K", "V", "orig")
    save_original_sz(host, CU, "K", "V")
    assert host.registry.get_str(
        CU, HARDENTOOLS_KEY_PATH, "SavedStateNewSZ_CURRENT_USER\\K____V"
    ) == "orig"


def test_retrieve_original_dword_reads_legacy_entry(host):
    host.registry.create_key(CU, HARDENTOOLS_KEY_PATH)
    host.registry.set_dword(CU, HARDENTOOLS_KEY_PATH, "SavedState_CURRENT_USER\\K_V", 7)
    assert retrieve_original_dword(host, CU, "K", "V") == 7


def test_retrieve_original_dword_missing_raises(host):
    with pytest.raises(RegistryError):
        retrieve_original_dword(host, CU, "K", "V")


def test_restore_legacy_entry(host):
    host.registry.create_key(CU, "K")
    host.registry.set_dword(CU, "K", "V", 9)
    host.registry.create_key(CU, HARDENTOOLS_KEY_PATH)
    host.registry.set_dword(CU, HARDENTOOLS_KEY_PATH, "SavedState_CURRENT_USER\\K_V", 4)
    restore_saved_registry_keys(host)
    assert host.registry.get_int(CU, "K", "V") == 4


def test_restore_skips_missing_keys_and_continues(host):
    host.registry.create_key(CU, "Present")
    host.registry.set_dword(CU, "Present", "V", 9)
    host.registry.create_key(CU, HARDENTOOLS_KEY_PATH)
    host.registry.set_dword(
        CU, HARDENTOOLS_KEY_PATH, "SavedStateNew_CURRENT_USER\\Gone____V", 1
    )
    host.registry.set_dword(
        CU, HARDENTOOLS_KEY_PATH, "SavedStateNew_CURRENT_USER\\Present____V", 2
    )
    restore_saved_registry_keys(host)
    assert host.registry.get_int(CU, "Present", "V") == 2
    assert not host.registry.key_exists(CU, "Gone")


def test_restore_without_saved_state_raises(host):
    with pytest.raises(RegistryError):
        restore_saved_registry_keys(host)


def test_harden_state_round_trip(host):
    save_harden_state(host, "recall", "enabled")
    assert get_saved_harden_state(host, "recall") == "enabled"
    delete_saved_harden_state(host, "recall")
    with pytest.raises(RegistryError):
        get_saved_harden_state(host, "recall")


def test_delete_missing_harden_state_raises(host):
    save_harden_state(host, "other", "disabled")
    with pytest.raises(RegistryError):
        delete_saved_harden_state(host, "recall")


def test_status_marking(host):
    assert check_status(host) is False
    mark_status(host, True)
    assert check_status(host) is True
    assert host.registry.get_int(CU, HARDENTOOLS_KEY_PATH, "Harden") == 1
    mark_status(host, False)
    assert check_status(host) is False
    assert not host.registry.key_exists(CU, HARDENTOOLS_KEY_PATH)


def test_mark_restored_without_key_leaves_status_false(host):
    mark_status(host, False)
    assert check_status(host) is False


def test_check_status_other_value_is_not_hardened(host):
    host.registry.create_key(CU, HARDENTOOLS_KEY_PATH)
    host.registry.set_dword(CU, HARDENTOOLS_KEY_PATH, "Harden", 0)
    assert check_status(host) is False