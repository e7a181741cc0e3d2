"""Regex token substitution across a cloned project tree."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, replace
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator, Sequence, Union

from .errors import SubstitutionError

if TYPE_CHECKING:
    from .config import CookerSettings, IdentitySpec

__all__ = [
    "ExclusionPolicy",
    "Placeholders",
    "Replacement",
    "SubstitutionEngine",
    "identity_replacements",
    "stamp_manifest",
]


LOGGER = logging.getLogger(__name__)

VERSION_PATTERN = r'"version"\s*:\s*"[^"]*"'


@dataclass(frozen=True, slots=True)
class Replacement:
    """A single ``pattern`` to ``literal`` rewrite.

    ``pattern`` is a regular expression. ``literal`` is inserted verbatim, group
    references are not expanded. ``count`` limits the number of rewrites per
    file, ``0`` meaning every match.
    """

    pattern: str
    literal: str
    count: int = 0

    @property
    def is_noop(self) -> bool:
        return self.pattern == self.literal

    def apply(self, text: str) -> str:
        literal = self.literal
        return re.compile(self.pattern).sub(lambda _match: literal, text, count=self.count)


@dataclass(frozen=True, slots=True)
class Placeholders:
    """Whole-word tokens rewritten together in a single pass.

    A value inserted for one token is never matched by another token, so the
    order of ``values`` does not matter. Tokens only match when they are not
    part of a longer identifier.
    """

    values: tuple[tuple[str, str], ...]

    @property
    def is_noop(self) -> bool:
        return all(token == value for token, value in self.values)

    def apply(self, text: str) -> str:
        mapping = {token: value for token, value in self.values if token != value}
        if not mapping:
            return text
        alternation = "|".join(re.escape(token) for token in sorted(mapping, key=len, reverse=True))
        regex = re.compile(rf"(?<![A-Za-z0-9_])(?:{alternation})(?![A-Za-z0-9_])")
        return regex.sub(lambda match: mapping[match.group(0)], text)


Rewrite = Union[Replacement, Placeholders]


@dataclass(frozen=True, slots=True)
class ExclusionPolicy:
    """Which files under a root take part in a substitution pass.

    Globs are matched against POSIX paths relative to the root.
    """

    include: tuple[str, ...] = ("*",)
    exclude_dirs: tuple[str, ...] = ("node_modules", ".git", ".github", "vendor", "packages")
    exclude_files: tuple[str, ...] = (
        "bin/rename.js",
        "bin/rename-runnable.js",
        "bin/setup.js",
        "bin/setup-wp.js",
        "bin/output.js",
        "bin/files.js",
        "bin/theme-setup.js",
        "bin/test.js",
    )

    def restricted_to(self, *patterns: str) -> "ExclusionPolicy":
        return replace(self, include=tuple(patterns))

    def skips_directory(self, relative: str) -> bool:
        return any(fnmatch(relative, pattern) for pattern in self.exclude_dirs)

    def accepts_file(self, relative: str) -> bool:
        if any(fnmatch(relative, pattern) for pattern in self.exclude_files):
            return False
        return any(fnmatch(relative, pattern) for pattern in self.include)

    def iter_files(self, root: Path) -> Iterator[Path]:
        """Yield the regular files under ``root`` accepted by this policy."""

        for current, directories, files in os.walk(root):
            current_path = Path(current)
            directories[:] = sorted(
                name
                for name in directories
                if not self.skips_directory((current_path / name).relative_to(root).as_posix())
            )
            for name in sorted(files):
                path = current_path / name
                if path.is_symlink() or not path.is_file():
                    continue
                if self.accepts_file(path.relative_to(root).as_posix()):
                    yield path


class SubstitutionEngine:
    """Apply ordered rewrites to every accepted file."""

    def __init__(self, policy: ExclusionPolicy | None = None, *, encoding: str = "utf-8") -> None:
        self.policy = policy or ExclusionPolicy()
        self.encoding = encoding

    def substitute(self, root: str | Path, replacements: Sequence[Rewrite]) -> list[Path]:
        """Rewrite files under ``root`` and return the ones that changed."""

        root = Path(root)
        if not root.is_dir():
            raise SubstitutionError(f"{root} is not a directory")

        active = [item for item in replacements if not item.is_noop]
        if not active:
            return []

        changed: list[Path] = []
        for path in self.policy.iter_files(root):
            if self.substitute_file(path, active):
                changed.append(path)
        LOGGER.info("substitution pass root=%s changed=%s", root, len(changed))
        return changed

    def substitute_file(self, path: str | Path, replacements: Iterable[Rewrite]) -> bool:
        """Rewrite a single file, returning whether its content changed."""

        path = Path(path)
        try:
            original = path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise SubstitutionError(f"unable to read {path}: {exc}") from exc

        text = original
        for item in replacements:
            if item.is_noop:
                continue
            try:
                text = item.apply(text)
            except re.error as exc:
                raise SubstitutionError(f"invalid pattern in {item!r}: {exc}") from exc

        if text == original:
            return False

        try:
            path.write_text(text, encoding=self.encoding)
        except OSError as exc:
            raise SubstitutionError(f"unable to write {path}: {exc}") from exc
        LOGGER.debug("rewrote %s", path)
        return True


def identity_replacements(identity: "IdentitySpec", version: str) -> list[Rewrite]:
    """Return the manifest placeholder rewrites for ``identity``.

    The four placeholders share one pass so a derived value such as the slug
    ``theme_name_pro`` is never rewritten by a later placeholder.
    """

    return [
        Placeholders(
            (
                ("theme_namespace", identity.namespace),
                ("theme_package", identity.package_slug),
                ("theme_prefix", identity.prefix),
                ("theme_name", identity.name),
            )
        ),
        Replacement(VERSION_PATTERN, f'"version": "{version}"', count=1),
    ]


def stamp_manifest(
    project_path: str | Path,
    identity: "IdentitySpec",
    settings: "CookerSettings",
) -> list[Path]:
    """Write ``identity`` into the project manifest and reset its version."""

    project_path = Path(project_path)
    manifest = project_path / settings.manifest
    if not manifest.is_file():
        raise SubstitutionError(f"manifest {manifest} does not exist")

    engine = SubstitutionEngine(settings.manifest_policy())
    return engine.substitute(project_path, identity_replacements(identity, settings.reset_version))
