"""Install-state queries per install source.

Sources and how they are probed:
- package manager: ``dpkg-query`` on Linux, ``winget`` on Windows
- Flatpak: ``flatpak list`` (application id or name column)
- Snap: ``snap list <name>``
- WinGet: ``winget list --exact --id <name>``
- manual: an executable of that name on PATH

A source whose tool is missing reports "not installed" for that source.
"""

from __future__ import annotations

import logging
import shutil
import sys
from typing import Callable

from cypat.domain.engine.models import AppData, InstallMethod
from cypat.domain.system.ports import CommandRunner
from cypat.infra.system.commands import SubprocessRunner

logger = logging.getLogger(__name__)


def _default_sources(platform: str) -> tuple[InstallMethod, ...]:
    if platform.startswith("linux"):
        return (
            InstallMethod.PACKAGE_MANAGER,
            InstallMethod.FLATPAK,
            InstallMethod.SNAP,
            InstallMethod.MANUAL,
        )
    if platform.startswith("win"):
        return (InstallMethod.WINGET, InstallMethod.MANUAL)
    return (InstallMethod.MANUAL,)


class PackageQuery:
    """Answer "is this application installed?" for one or all sources."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        *,
        platform: str | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._runner = runner or SubprocessRunner()
        self._platform = platform or sys.platform
        self._which = which

    def is_installed(
        self, name: str, method: InstallMethod = InstallMethod.DEFAULT
    ) -> bool:
        method = InstallMethod(method)
        if method == InstallMethod.DEFAULT:
            sources = _default_sources(self._platform)
        else:
            sources = (method,)

        for source in sources:
            if self._probe(source, name):
                logger.debug("%s found via %s", name, source.value)
                return True
        return False

    def is_app_installed(self, app: AppData) -> bool:
        return self.is_installed(app.name, app.install_method)

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------

    def _probe(self, source: InstallMethod, name: str) -> bool:
        if source == InstallMethod.PACKAGE_MANAGER:
            if self._platform.startswith("win"):
                return self._winget(name)
            return self._dpkg(name)
        if source == InstallMethod.FLATPAK:
            return self._flatpak(name)
        if source == InstallMethod.SNAP:
            return self._snap(name)
        if source == InstallMethod.WINGET:
            return self._winget(name)
        if source == InstallMethod.MANUAL:
            return self._which(name) is not None
        raise ValueError(f"Unsupported install source: {source}")

    def _dpkg(self, name: str) -> bool:
        result = self._runner.run(["dpkg-query", "-W", "-f=${Status}", name])
        return (
            result is not None
            and result.ok
            and "install ok installed" in result.stdout
        )

    def _flatpak(self, name: str) -> bool:
        result = self._runner.run(["flatpak", "list", "--columns=application,name"])
        if result is None or not result.ok:
            return False
        wanted = name.casefold()
        for line in result.stdout.splitlines():
            columns = [c.strip().casefold() for c in line.split("\t")]
            if wanted in columns:
                return True
        return False

    def _snap(self, name: str) -> bool:
        result = self._runner.run(["snap", "list", name])
        if result is None or not result.ok:
            return False
        # First line is the header row
        for line in result.stdout.splitlines()[1:]:
            fields = line.split()
            if fields and fields[0] == name:
                return True
        return False

    def _winget(self, name: str) -> bool:
        result = self._runner.run(
            ["winget", "list", "--exact", "--id", name, "--accept-source-agreements"]
        )
        return result is not None and result.ok and name.casefold() in result.stdout.casefold()


def is_package_installed(app: AppData, query: PackageQuery | None = None) -> bool:
    """Convenience for app predicates: check ``app`` against its install source."""
    return (query or PackageQuery()).is_app_installed(app)
