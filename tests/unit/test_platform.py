from pathlib import Path

from deskshot.core.platform import Platform, detect_platform, has_bridged_host_mount


def test_linux_without_bridge_is_native_linux():
    assert detect_platform(system="Linux", exists=lambda p: False) is Platform.native_linux


def test_linux_with_bridged_drive_is_linux_under_windows():
    seen = []

    def exists(p):
        seen.append(p)
        return True

    assert detect_platform(system="Linux", mount="/mnt/c", exists=exists) is Platform.linux_under_windows
    assert seen == ["/mnt/c"]


def test_other_families_map_directly_without_probing():
    def explode(p):
        raise AssertionError("mount probe must only run on Linux")

    assert detect_platform(system="Windows", exists=explode) is Platform.native_windows
    assert detect_platform(system="Darwin", exists=explode) is Platform.native_macos


def test_unknown_family_is_unsupported():
    assert detect_platform(system="FreeBSD", exists=lambda p: False) is Platform.unsupported


def test_mount_probe_never_raises(tmp_path: Path):
    def broken(p):
        raise PermissionError("denied")

    assert has_bridged_host_mount("/mnt/c", exists=broken) is False
    assert has_bridged_host_mount(tmp_path) is True
    assert has_bridged_host_mount(tmp_path / "missing") is False


def test_windows_family_flag():
    assert Platform.native_windows.is_windows_family
    assert Platform.linux_under_windows.is_windows_family
    assert not Platform.native_linux.is_windows_family
    assert not Platform.native_macos.is_windows_family
