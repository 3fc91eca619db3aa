"""Tests for hook validation."""

import pytest

from guestagent.core.hooks.validator import is_valid_hook, validate_hook
from guestagent.lib.fs import DirEntry
from guestagent.lib.typed_errors import ErrorCode, IsSymlink, NotAFile, NotExecutable


def entry(name="hook", is_dir=False, is_symlink=False, mode=0o755) -> DirEntry:
    return DirEntry(name=name, is_dir=is_dir, is_symlink=is_symlink, mode=mode)


class TestValidateHook:
    def test_executable_file_accepted(self):
        validate_hook(entry())

    @pytest.mark.parametrize("mode", [0o100, 0o010, 0o001, 0o500, 0o711])
    def test_any_execute_bit_is_enough(self, mode):
        ok, reason = is_valid_hook(entry(mode=mode))
        assert ok is True
        assert reason is None

    def test_directory_rejected(self):
        with pytest.raises(NotAFile) as exc:
            validate_hook(entry(name="sub", is_dir=True))
        assert exc.value.code == ErrorCode.NOT_A_FILE
        assert exc.value.hook_name == "sub"
        assert str(exc.value) == "is a directory"

    def test_symlink_rejected(self):
        with pytest.raises(IsSymlink):
            validate_hook(entry(is_symlink=True, mode=0o777))

    @pytest.mark.parametrize("mode", [0o000, 0o644, 0o666, 0o4644])
    def test_non_executable_rejected(self, mode):
        with pytest.raises(NotExecutable):
            validate_hook(entry(mode=mode))

    def test_directory_checked_before_exec_bits(self):
        ok, reason = is_valid_hook(entry(is_dir=True, mode=0o644))
        assert ok is False
        assert isinstance(reason, NotAFile)

    def test_symlink_checked_before_exec_bits(self):
        ok, reason = is_valid_hook(entry(is_symlink=True, mode=0o644))
        assert ok is False
        assert isinstance(reason, IsSymlink)

    def test_same_input_same_verdict(self):
        e = entry(mode=0o644)
        first = is_valid_hook(e)
        second = is_valid_hook(e)
        assert first[0] == second[0]
        assert type(first[1]) is type(second[1])

    def test_rejection_to_dict(self):
        _, reason = is_valid_hook(entry(name="x", mode=0o600))
        assert reason.to_dict() == {
            "code": "not_executable",
            "message": "is not executable",
            "hook_name": "x",
        }
