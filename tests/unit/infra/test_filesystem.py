"""Tests for file ownership queries."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from cypat.domain.common.errors import ResourceUnavailableError
from cypat.infra.system.filesystem import (
    file_owned_by_group,
    file_owned_by_user,
    get_file_group,
    get_file_owner,
    get_file_owner_gid,
    get_file_owner_uid,
)

pytestmark = pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX ownership")


@pytest.fixture
def owned_file(tmp_path: Path) -> Path:
    path = tmp_path / "shadow.bak"
    path.write_text("secret")
    return path


class TestOwnership:
    def test_ids_match_creator(self, owned_file: Path):
        assert get_file_owner_uid(owned_file) == os.getuid()
        assert get_file_owner_gid(owned_file) == os.stat(owned_file).st_gid

    def test_owner_name(self, owned_file: Path):
        import pwd

        try:
            expected = pwd.getpwuid(os.getuid()).pw_name
        except KeyError:
            expected = str(os.getuid())
        assert get_file_owner(owned_file) == expected
        assert file_owned_by_user(expected, owned_file)
        assert not file_owned_by_user("cypat-no-such-user", owned_file)

    def test_group_name(self, owned_file: Path):
        group = get_file_group(owned_file)
        assert file_owned_by_group(group, owned_file)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ResourceUnavailableError) as exc_info:
            get_file_owner(tmp_path / "gone")
        assert exc_info.value.resource.endswith("gone")
