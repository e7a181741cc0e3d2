"""The fixed list of steps that turns a confirmed identity into a theme."""

from __future__ import annotations

from functools import partial

from .errors import CookerError
from .pipeline import Step, StepContext
from .substitute import stamp_manifest

__all__ = ["build_steps"]


_ECOSYSTEM_LABELS = {"node": "Node", "composer": "Composer"}


def preflight_checklist(context: StepContext) -> None:
    """Make sure the destination is free and the required tools are installed."""

    if context.project_path.exists():
        raise CookerError(f"destination {context.project_path} already exists")
    if not context.project_path.parent.is_dir():
        raise CookerError(f"parent directory {context.project_path.parent} does not exist")

    missing = context.collaborators.tools.missing(context.settings.required_tools)
    if missing:
        raise CookerError(
            "unable to find " + ", ".join(missing) + ". Please make sure they are "
            "installed and globally available before running this script."
        )


def skip_checklist(context: StepContext) -> None:  # noqa: ARG001
    return None


def clone_repository(context: StepContext, *, branch: str | None = None) -> None:
    ref = branch or context.settings.default_branch
    context.collaborators.fetcher.fetch(
        context.settings.repository_url,
        ref,
        context.project_path,
    )


def install_dependencies(context: StepContext, *, ecosystem: str) -> None:
    context.collaborators.installer.install_dependencies(context.project_path, ecosystem)


def configure_theme(context: StepContext) -> None:
    stamp_manifest(context.project_path, context.identity, context.settings)


def refresh_autoloader(context: StepContext) -> None:
    context.collaborators.installer.refresh_autoloader(context.project_path, "composer")


def build_environment(context: StepContext) -> None:
    context.collaborators.builder.run_named_script(
        context.project_path, context.settings.build_script
    )


def cleanup(context: StepContext) -> None:
    for relative in context.settings.cleanup_paths:
        context.collaborators.cleaner.remove(context.project_path / relative)


def build_steps(
    *,
    ecosystems: tuple[str, ...] = ("node", "composer"),
    branch: str | None = None,
    skip_checklist_step: bool = False,
) -> list[Step]:
    """Return the ordered pipeline for one run.

    ``skip_checklist_step`` replaces the preflight checklist with a no-op but
    never changes the order of the remaining steps.
    """

    steps: list[Step] = []
    if skip_checklist_step:
        steps.append(Step("Skipping pre-config", skip_checklist))
    else:
        steps.append(Step("Pre-config", preflight_checklist))

    steps.append(Step("Cloning theme repo", partial(clone_repository, branch=branch)))
    for ecosystem in ecosystems:
        label = _ECOSYSTEM_LABELS.get(ecosystem, ecosystem.capitalize())
        steps.append(
            Step(f"Installing {label} dependencies", partial(install_dependencies, ecosystem=ecosystem))
        )
    steps.append(Step("Config theme", configure_theme))
    if "composer" in ecosystems:
        steps.append(Step("Updating composer autoloader", refresh_autoloader))
    steps.append(Step("Building WordPress Habitat", build_environment))
    steps.append(Step("Cleaning up", cleanup))
    return steps
