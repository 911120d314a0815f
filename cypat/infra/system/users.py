"""OS identity queries: users, groups, membership, admin rights.

On POSIX systems lookups go through the ``pwd``/``grp`` modules (so NSS
sources such as LDAP are honoured). On Windows they shell out to ``net``.
The ``/etc/passwd`` and ``/etc/group`` parsers are exposed separately for
checks that need to inspect the files themselves (e.g. a stray UID 0).
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from cypat.domain.common.errors import ResourceUnavailableError, UserNotFoundError
from cypat.domain.system.ports import CommandRunner
from cypat.infra.system.commands import SubprocessRunner

logger = logging.getLogger(__name__)

ADMIN_GROUPS = ("sudo", "wheel", "admin")
WINDOWS_ADMIN_GROUP = "Administrators"


# ---------------------------------------------------------------------------
# /etc/passwd and /etc/group records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PasswdEntry:
    """One line of /etc/passwd."""

    username: str
    password_in_shadow: bool
    uid: int
    gid: int
    gecos: str
    home_dir: str
    shell: str

    @classmethod
    def parse(cls, line: str) -> PasswdEntry:
        fields = line.rstrip("\r\n").split(":")
        if len(fields) != 7:
            raise ValueError(f"Malformed passwd line: {line!r}")
        return cls(
            username=fields[0],
            password_in_shadow=fields[1] == "x",
            uid=int(fields[2]),
            gid=int(fields[3]),
            gecos=fields[4],
            home_dir=fields[5],
            shell=fields[6],
        )


@dataclass(frozen=True)
class GroupEntry:
    """One line of /etc/group."""

    groupname: str
    gid: int
    members: tuple[str, ...] = ()

    @classmethod
    def parse(cls, line: str) -> GroupEntry:
        fields = line.rstrip("\r\n").split(":")
        if len(fields) != 4:
            raise ValueError(f"Malformed group line: {line!r}")
        members = tuple(m for m in fields[3].split(",") if m)
        return cls(groupname=fields[0], gid=int(fields[2]), members=members)


def _read_records(path: str | Path, parse) -> list:
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise ResourceUnavailableError(str(path), str(exc)) from exc

    records = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip() or line.startswith("#"):
            continue
        try:
            records.append(parse(line))
        except ValueError:
            logger.warning("Skipping malformed line %d in %s", lineno, path)
    return records


def read_passwd(path: str | Path = "/etc/passwd") -> list[PasswdEntry]:
    return _read_records(path, PasswdEntry.parse)


def read_group(path: str | Path = "/etc/group") -> list[GroupEntry]:
    return _read_records(path, GroupEntry.parse)


def find_passwd_entry(name: str, path: str | Path = "/etc/passwd") -> PasswdEntry | None:
    for entry in read_passwd(path):
        if entry.username == name:
            return entry
    return None


def find_group_entry(name: str, path: str | Path = "/etc/group") -> GroupEntry | None:
    for entry in read_group(path):
        if entry.groupname == name:
            return entry
    return None


# ---------------------------------------------------------------------------
# Live queries
# ---------------------------------------------------------------------------


def _parse_net_members(output: str) -> list[str]:
    """Member names from ``net localgroup <group>`` output."""
    members: list[str] = []
    in_members = False
    for line in output.splitlines():
        stripped = line.strip()
        if stripped.startswith("---"):
            in_members = True
            continue
        if not in_members or not stripped:
            continue
        if stripped.lower().startswith("the command completed"):
            break
        members.append(stripped)
    return members


class UserQuery:
    """User and group lookups for the current platform."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        *,
        platform: str | None = None,
    ) -> None:
        self._runner = runner
        self._platform = platform or sys.platform

    @property
    def _windows(self) -> bool:
        return self._platform.startswith("win")

    def _run(self, argv: list[str]):
        if self._runner is None:
            self._runner = SubprocessRunner()
        return self._runner.run(argv)

    def user_exists(self, name: str) -> bool:
        if self._windows:
            result = self._run(["net", "user", name])
            return result is not None and result.ok

        import pwd

        try:
            pwd.getpwnam(name)
        except KeyError:
            return False
        return True

    def group_exists(self, name: str) -> bool:
        if self._windows:
            result = self._run(["net", "localgroup", name])
            return result is not None and result.ok

        import grp

        try:
            grp.getgrnam(name)
        except KeyError:
            return False
        return True

    def user_in_group(self, username: str, groupname: str) -> bool:
        """Whether ``username`` belongs to ``groupname``.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        if self._windows:
            if not self.user_exists(username):
                raise UserNotFoundError(username)
            result = self._run(["net", "localgroup", groupname])
            if result is None or not result.ok:
                return False
            wanted = username.casefold()
            return any(
                m.casefold() == wanted or m.casefold().endswith("\\" + wanted)
                for m in _parse_net_members(result.stdout)
            )

        import grp
        import pwd

        try:
            user = pwd.getpwnam(username)
        except KeyError as exc:
            raise UserNotFoundError(username) from exc
        try:
            group = grp.getgrnam(groupname)
        except KeyError:
            return False
        return username in group.gr_mem or user.pw_gid == group.gr_gid

    def user_is_admin(self, username: str) -> bool:
        """Root, or a member of an administrative group.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        if self._windows:
            return self.user_in_group(username, WINDOWS_ADMIN_GROUP)

        import pwd

        try:
            user = pwd.getpwnam(username)
        except KeyError as exc:
            raise UserNotFoundError(username) from exc
        if user.pw_uid == 0:
            return True
        return any(self.user_in_group(username, group) for group in ADMIN_GROUPS)


# ---------------------------------------------------------------------------
# Module-level shortcuts
# ---------------------------------------------------------------------------


def user_exists(name: str) -> bool:
    return UserQuery().user_exists(name)


def group_exists(name: str) -> bool:
    return UserQuery().group_exists(name)


def user_in_group(username: str, groupname: str) -> bool:
    return UserQuery().user_in_group(username, groupname)


def user_is_admin(username: str) -> bool:
    return UserQuery().user_is_admin(username)
