"""External capabilities the pipeline drives: git, package managers, build, cleanup."""

from __future__ import annotations

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from .errors import CommandError

__all__ = [
    "BuildInvoker",
    "Collaborators",
    "CommandPackageInstaller",
    "FileTreeCleaner",
    "GitSourceFetcher",
    "NpmScriptInvoker",
    "PackageInstaller",
    "PathToolChecker",
    "ShutilFileTreeCleaner",
    "SourceFetcher",
    "ToolChecker",
    "run_command",
]


LOGGER = logging.getLogger(__name__)

_STDERR_TAIL = 20


def run_command(args: Sequence[str], cwd: str | Path | None = None) -> str:
    """Run ``args`` to completion and return its standard output.

    Raises :class:`CommandError` when ``cwd`` or the executable is missing, or
    when the command exits with a non-zero status. The error carries the tail
    of standard error.
    """

    command = " ".join(args)
    if cwd is not None and not Path(cwd).is_dir():
        raise CommandError(f"working directory {cwd} does not exist")
    LOGGER.debug("running command=%r cwd=%s", command, cwd)
    try:
        result = subprocess.run(
            list(args),
            cwd=cwd,
            capture_output=True,
            check=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise CommandError(f"command not found: {args[0]}") from exc
    except subprocess.CalledProcessError as exc:
        output = (exc.stderr or exc.stdout or "").strip().splitlines()
        tail = "\n".join(output[-_STDERR_TAIL:])
        message = f"'{command}' exited with status {exc.returncode}"
        if tail:
            message = f"{message}\n{tail}"
        raise CommandError(message) from exc
    return result.stdout


class SourceFetcher(ABC):
    """Obtain the project template."""

    @abstractmethod
    def fetch(self, repository_url: str, ref: str, destination: Path) -> None:
        """Clone ``repository_url`` at ``ref`` into ``destination``."""


class PackageInstaller(ABC):
    """Install the dependency graph of one ecosystem."""

    @abstractmethod
    def install_dependencies(self, project_path: Path, ecosystem: str) -> None:
        """Install dependencies for ``ecosystem`` inside ``project_path``."""

    @abstractmethod
    def refresh_autoloader(self, project_path: Path, ecosystem: str) -> None:
        """Regenerate the class autoloader for ``ecosystem``."""


class BuildInvoker(ABC):
    """Run a named build script of the project."""

    @abstractmethod
    def run_named_script(self, project_path: Path, script_name: str) -> None:
        """Execute ``script_name`` inside ``project_path``."""


class FileTreeCleaner(ABC):
    @abstractmethod
    def remove(self, path: Path) -> None:
        """Delete ``path``. Missing paths are ignored."""


class ToolChecker(ABC):
    @abstractmethod
    def missing(self, tools: Iterable[str]) -> list[str]:
        """Return the tools from ``tools`` that are unavailable."""


class GitSourceFetcher(SourceFetcher):
    def fetch(self, repository_url: str, ref: str, destination: Path) -> None:
        destination = Path(destination)
        run_command(
            ["git", "clone", "-b", ref, repository_url, destination.name],
            cwd=destination.parent,
        )
        if not destination.is_dir():
            raise CommandError(f"clone did not create {destination}")


_INSTALL_COMMANDS: Mapping[str, Sequence[str]] = {
    "node": ("npm", "install"),
    "composer": ("composer", "install"),
}

_AUTOLOAD_COMMANDS: Mapping[str, Sequence[str]] = {
    "composer": ("composer", "-o", "dump-autoload"),
}


@dataclass(slots=True)
class CommandPackageInstaller(PackageInstaller):
    """Install dependencies by shelling out to the ecosystem's package manager."""

    install_commands: Mapping[str, Sequence[str]] = field(default_factory=lambda: dict(_INSTALL_COMMANDS))
    autoload_commands: Mapping[str, Sequence[str]] = field(default_factory=lambda: dict(_AUTOLOAD_COMMANDS))

    def install_dependencies(self, project_path: Path, ecosystem: str) -> None:
        run_command(self._command(self.install_commands, ecosystem), cwd=project_path)

    def refresh_autoloader(self, project_path: Path, ecosystem: str) -> None:
        run_command(self._command(self.autoload_commands, ecosystem), cwd=project_path)

    @staticmethod
    def _command(table: Mapping[str, Sequence[str]], ecosystem: str) -> list[str]:
        try:
            return list(table[ecosystem])
        except KeyError as exc:
            raise CommandError(f"unsupported ecosystem '{ecosystem}'") from exc


class NpmScriptInvoker(BuildInvoker):
    def run_named_script(self, project_path: Path, script_name: str) -> None:
        run_command(["npm", "run", script_name], cwd=project_path)


class ShutilFileTreeCleaner(FileTreeCleaner):
    def remove(self, path: Path) -> None:
        path = Path(path)
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        else:
            return
        LOGGER.debug("removed %s", path)


class PathToolChecker(ToolChecker):
    def missing(self, tools: Iterable[str]) -> list[str]:
        return [tool for tool in tools if shutil.which(tool) is None]


@dataclass(slots=True)
class Collaborators:
    """Bundle of the external capabilities used by one run."""

    fetcher: SourceFetcher
    installer: PackageInstaller
    builder: BuildInvoker
    cleaner: FileTreeCleaner
    tools: ToolChecker

    @classmethod
    def default(cls) -> "Collaborators":
        return cls(
            fetcher=GitSourceFetcher(),
            installer=CommandPackageInstaller(),
            builder=NpmScriptInvoker(),
            cleaner=ShutilFileTreeCleaner(),
            tools=PathToolChecker(),
        )
