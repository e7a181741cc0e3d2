"""Interactive prompts collecting the theme identity."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Sequence

from pydantic import ValidationError

from .config import IdentitySpec
from .errors import CookerError, InputValidationError, UserAbort
from .naming import derive_slug, is_valid_prefix
from .output import Reporter

__all__ = [
    "AFFIRMATIVE",
    "SENTINEL",
    "ConfirmationGate",
    "IdentityCollector",
    "PromptSession",
    "PromptState",
]


LOGGER = logging.getLogger(__name__)

SENTINEL = "exit"
AFFIRMATIVE = "y"

Reader = Callable[[str], str]


class PromptState(str, Enum):
    """States of a single :meth:`PromptSession.ask` call."""

    AWAITING_INPUT = "awaiting-input"
    VALIDATING = "validating"
    ACCEPTED = "accepted"
    ABORTED = "aborted"


class PromptSession:
    """Ask questions one line at a time until a valid answer arrives."""

    def __init__(self, reader: Reader, reporter: Reporter, *, sentinel: str = SENTINEL) -> None:
        self._reader = reader
        self._reporter = reporter
        self.sentinel = sentinel
        self.state = PromptState.ACCEPTED

    def ask(
        self,
        question: str,
        *,
        min_length: int = 0,
        error: str | None = None,
        label: str | None = None,
    ) -> str:
        """Return the trimmed answer to ``question``.

        Answers whose trimmed length is not greater than ``min_length`` are
        refused and the question is asked again. Typing the sentinel, or
        closing the input stream, raises :class:`UserAbort`.
        """

        if label:
            self._reporter.label(label)

        answer = ""
        self.state = PromptState.AWAITING_INPUT
        while self.state is PromptState.AWAITING_INPUT:
            try:
                answer = self._reader(question).strip()
            except EOFError:
                answer = self.sentinel
            self.state = PromptState.VALIDATING

            if answer == self.sentinel:
                self.state = PromptState.ABORTED
                continue

            try:
                self._validate(answer, min_length, error)
            except InputValidationError as exc:
                self._reporter.error(str(exc))
                self.state = PromptState.AWAITING_INPUT
                continue

            self.state = PromptState.ACCEPTED

        if label:
            self._reporter.label("")

        if self.state is PromptState.ABORTED:
            self._reporter.message("Exiting script...")
            raise UserAbort()

        return answer

    @staticmethod
    def _validate(answer: str, min_length: int, error: str | None) -> None:
        if len(answer) <= min_length:
            raise InputValidationError(
                error or f"Answer must be longer than {min_length} characters."
            )


class ConfirmationGate:
    """Show the collected values and ask the user to accept them."""

    def __init__(self, session: PromptSession, reporter: Reporter, *, affirmative: str = AFFIRMATIVE) -> None:
        self._session = session
        self._reporter = reporter
        self.affirmative = affirmative

    def confirm(self, summary_lines: Sequence[tuple[str, str]], auto_confirm: bool = False) -> bool:
        self._reporter.summary(summary_lines)
        if auto_confirm:
            return True
        answer = self._session.ask(f"Confirm ({self.affirmative}/n)? ")
        return answer == self.affirmative


class IdentityCollector:
    """Loop over the prompts until the user confirms an :class:`IdentitySpec`."""

    def __init__(self, session: PromptSession, gate: ConfirmationGate, reporter: Reporter) -> None:
        self._session = session
        self._gate = gate
        self._reporter = reporter

    def collect_quick(
        self,
        *,
        theme_name: str | None = None,
        dev_url: str | None = None,
        auto_confirm: bool = False,
    ) -> IdentitySpec:
        """Ask for the theme name and dev url, deriving everything else."""

        while True:
            identity = self._quick_identity(theme_name, dev_url)
            if self._gate.confirm(identity.summary_lines(), auto_confirm):
                return identity
            LOGGER.debug("identity rejected, collecting again")

    def collect_detailed(self, *, auto_confirm: bool = False) -> IdentitySpec:
        """Ask for every field, deriving only the namespace."""

        while True:
            identity = self._detailed_identity()
            if self._gate.confirm(identity.summary_lines(detailed=True), auto_confirm):
                return identity
            LOGGER.debug("identity rejected, collecting again")

    def _quick_identity(self, theme_name: str | None, dev_url: str | None) -> IdentitySpec:
        if theme_name is not None:
            try:
                name_only = IdentitySpec.from_name(theme_name)
            except ValidationError as exc:
                raise CookerError(f"invalid theme name '{theme_name}': {_first_error(exc)}") from exc
        else:
            name_only = self._ask_valid_name()

        url = dev_url
        if url is None:
            url = self._session.ask(
                "Dev url (e.g. dev.wordpress.com): ",
                label=":earth_africa: Please enter a theme development url "
                "(for local development with browsersync - no protocol):",
                error="Dev url is required and cannot be empty.",
            )
        return name_only.model_copy(update={"url": url})

    def _ask_valid_name(self) -> IdentitySpec:
        while True:
            name = self._session.ask(
                "Theme name: ",
                min_length=2,
                label=":green_book: Please enter your theme name (shown in WordPress admin):",
                error="Theme name field is required and cannot be empty.",
            )
            try:
                return IdentitySpec.from_name(name)
            except ValidationError as exc:
                self._reporter.error(_first_error(exc))

    def _detailed_identity(self) -> IdentitySpec:
        name = self._session.ask(
            "Theme name: ",
            label=":green_book: Your creative, smart cool theme name!",
            error="Theme name field is required and cannot be empty.",
        )
        while True:
            package = self._session.ask(
                "Package name: ",
                label=":package: Used in translations - lowercase, no special characters, "
                "'_' or '-' allowed for spaces",
                error="Package name field is required and cannot be empty.",
            )
            package = derive_slug(package, separator="-")
            if package:
                break
            self._reporter.error("Package name must contain letters or digits.")
        while True:
            prefix = self._session.ask(
                "Prefix (e.g. INF, ABRR): ",
                min_length=1,
                label=":bullet_train: Please enter a theme prefix",
                error="Prefix is required and must have at least 2 characters.",
            ).upper()
            if is_valid_prefix(prefix):
                break
            self._reporter.error("Prefix may only contain letters, digits or '_'.")
        description = self._session.ask(
            "Theme description: ",
            min_length=-1,
            label=":spiral_notepad: Describe your theme:",
        )
        author = self._session.ask(
            "Author name: ",
            min_length=-1,
            label=":crab: Please enter author name:",
        )
        return IdentitySpec(
            name=name,
            package_slug=package,
            prefix=prefix,
            description=description,
            author=author,
        )


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    message = str(errors[0].get("msg", exc))
    return message.removeprefix("Value error, ")
