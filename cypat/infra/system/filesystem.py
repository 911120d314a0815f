"""File ownership queries (POSIX).

Owners are resolved to names through ``pwd``/``grp``; an id with no
matching account is returned as its decimal string.
"""

from __future__ import annotations

import os

from cypat.domain.common.errors import ResourceUnavailableError


def _stat(path: str | os.PathLike) -> os.stat_result:
    try:
        return os.stat(path)
    except OSError as exc:
        raise ResourceUnavailableError(os.fspath(path), exc.strerror or str(exc)) from exc


def get_file_owner_uid(path: str | os.PathLike) -> int:
    return _stat(path).st_uid


def get_file_owner_gid(path: str | os.PathLike) -> int:
    return _stat(path).st_gid


def get_file_owner(path: str | os.PathLike) -> str:
    import pwd

    uid = get_file_owner_uid(path)
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def get_file_group(path: str | os.PathLike) -> str:
    import grp

    gid = get_file_owner_gid(path)
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


def file_owned_by_user(username: str, path: str | os.PathLike) -> bool:
    return get_file_owner(path) == username


def file_owned_by_group(groupname: str, path: str | os.PathLike) -> bool:
    return get_file_group(path) == groupname
