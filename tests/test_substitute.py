from __future__ import annotations

import hashlib
import json
from pathlib import Path

import pytest

from cooker.config import CookerSettings, IdentitySpec
from cooker.errors import SubstitutionError
from cooker.substitute import (
    ExclusionPolicy,
    Placeholders,
    Replacement,
    SubstitutionEngine,
    identity_replacements,
    stamp_manifest,
)


def _digest(root: Path) -> dict[str, str]:
    return {
        path.relative_to(root).as_posix(): hashlib.sha256(path.read_bytes()).hexdigest()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture()
def tree(tmp_path: Path, manifest_template: str) -> Path:
    root = tmp_path / "theme"
    files = {
        "package.json": manifest_template,
        "src/functions.php": "namespace theme_namespace;\ndefine('theme_prefix_ENV', 1);\n",
        "node_modules/lib/index.js": "theme_name",
        ".git/config": "theme_name",
        "vendor/autoload.php": "theme_namespace",
        "bin/setup.js": "theme_name",
        "bin/custom.js": "theme_name",
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def test_substitute_respects_exclusions(tree: Path):
    engine = SubstitutionEngine(ExclusionPolicy())
    changed = engine.substitute(tree, [Replacement("theme_name", "Acme")])

    assert sorted(path.relative_to(tree).as_posix() for path in changed) == [
        "bin/custom.js",
        "package.json",
        "src/functions.php",
    ]
    assert (tree / "node_modules/lib/index.js").read_text(encoding="utf-8") == "theme_name"
    assert (tree / ".git/config").read_text(encoding="utf-8") == "theme_name"
    assert (tree / "bin/setup.js").read_text(encoding="utf-8") == "theme_name"


def test_pattern_is_a_regular_expression_and_literal_is_verbatim(tree: Path):
    engine = SubstitutionEngine()
    engine.substitute(tree, [Replacement(r"theme_(namespace|prefix)", r"\1$&")])
    text = (tree / "src/functions.php").read_text(encoding="utf-8")
    assert text == "namespace \\1$&;\ndefine('\\1$&_ENV', 1);\n"


def test_noop_pair_leaves_files_untouched(tree: Path):
    before = _digest(tree)
    changed = SubstitutionEngine().substitute(tree, [Replacement("theme_name", "theme_name")])
    assert changed == []
    assert _digest(tree) == before


def test_replacements_apply_in_order(tree: Path):
    engine = SubstitutionEngine(ExclusionPolicy().restricted_to("src/*"))
    engine.substitute(
        tree,
        [Replacement("theme_namespace", "Acme"), Replacement("Acme", "Beta")],
    )
    assert (tree / "src/functions.php").read_text(encoding="utf-8").startswith("namespace Beta;")


def test_count_limits_rewrites(tmp_path: Path):
    path = tmp_path / "file.txt"
    path.write_text("a a a", encoding="utf-8")
    assert SubstitutionEngine().substitute_file(path, [Replacement("a", "b", count=1)])
    assert path.read_text(encoding="utf-8") == "b a a"


def test_unreadable_file_is_an_error(tmp_path: Path):
    (tmp_path / "image.bin").write_bytes(b"\xff\xfe\x00theme")
    with pytest.raises(SubstitutionError):
        SubstitutionEngine().substitute(tmp_path, [Replacement("theme", "x")])


def test_invalid_pattern_is_an_error(tmp_path: Path):
    (tmp_path / "a.txt").write_text("x", encoding="utf-8")
    with pytest.raises(SubstitutionError):
        SubstitutionEngine().substitute(tmp_path, [Replacement("(", "x")])


def test_missing_root_is_an_error(tmp_path: Path):
    with pytest.raises(SubstitutionError):
        SubstitutionEngine().substitute(tmp_path / "missing", [Replacement("a", "b")])


def test_placeholders_match_whole_tokens_only():
    item = Placeholders((("theme_name", "Acme"), ("theme_namespace", "Acme_Ns")))
    text = "theme_name theme_namespace theme_name_pro xtheme_name"
    assert item.apply(text) == "Acme Acme_Ns theme_name_pro xtheme_name"


def test_placeholder_values_are_not_rewritten_by_other_placeholders():
    item = Placeholders((("theme_package", "theme_name"), ("theme_name", "Theme Name")))
    assert item.apply('"theme_package" "theme_name"') == '"theme_name" "Theme Name"'


def test_placeholders_mapping_to_themselves_are_noop():
    assert Placeholders((("theme_name", "theme_name"),)).is_noop
    assert not Placeholders((("theme_name", "Acme"),)).is_noop


def test_identity_replacements_stamp_placeholders_in_one_pass():
    identity = IdentitySpec.from_name("Acme Theme")
    placeholders, version = identity_replacements(identity, "1.0.0")
    assert dict(placeholders.values) == {
        "theme_namespace": "Acme_Theme",
        "theme_package": "acme_theme",
        "theme_prefix": "AT",
        "theme_name": "Acme Theme",
    }
    assert version.count == 1


@pytest.mark.parametrize(
    "name",
    ["Theme Name Pro", "Theme Prefix Studio", "Theme Name", "Theme Namespace"],
)
def test_stamp_manifest_keeps_values_that_contain_placeholders(tree: Path, name: str):
    identity = IdentitySpec.from_name(name)
    stamp_manifest(tree, identity, CookerSettings())

    manifest = json.loads((tree / "package.json").read_text(encoding="utf-8"))
    assert manifest["name"] == identity.package_slug
    assert manifest["description"] == f"{identity.name} development habitat"
    assert manifest["config"]["namespace"] == identity.namespace
    assert manifest["config"]["prefix"] == identity.prefix


def test_stamp_manifest(tree: Path):
    identity = IdentitySpec.from_name("Acme Theme")
    changed = stamp_manifest(tree, identity, CookerSettings())

    assert changed == [tree / "package.json"]
    manifest = json.loads((tree / "package.json").read_text(encoding="utf-8"))
    assert manifest["name"] == "acme_theme"
    assert manifest["version"] == "1.0.0"
    assert manifest["description"] == "Acme Theme development habitat"
    assert manifest["config"]["namespace"] == "Acme_Theme"
    assert manifest["config"]["prefix"] == "AT"
    assert manifest["config"]["dependencies"]["version"] == "9.9.9"
    assert "theme_namespace" in (tree / "src/functions.php").read_text(encoding="utf-8")


def test_stamp_manifest_is_idempotent(tree: Path):
    identity = IdentitySpec.from_name("Acme Theme")
    stamp_manifest(tree, identity, CookerSettings())
    before = _digest(tree)
    assert stamp_manifest(tree, identity, CookerSettings()) == []
    assert _digest(tree) == before


def test_stamp_manifest_requires_manifest(tmp_path: Path):
    with pytest.raises(SubstitutionError):
        stamp_manifest(tmp_path, IdentitySpec.from_name("Foo"), CookerSettings())
