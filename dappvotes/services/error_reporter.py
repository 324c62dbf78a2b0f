"""Error classification and reporting."""

import logging
from typing import Callable

from dappvotes.constants import DEFAULT_ERROR_MESSAGE, ErrorKind
from dappvotes.core.exceptions import DappVotesError

logger = logging.getLogger(__name__)

Notifier = Callable[[str, ErrorKind], None]

# Message fragments checked in order when an error carries no kind of its own
_MESSAGE_RULES: tuple[tuple[tuple[str, ...], ErrorKind], ...] = (
    (("selector was not recognized",), ErrorKind.VIEW_FUNCTION),
    (("user rejected",), ErrorKind.TRANSACTION),
    (("network", "connect"), ErrorKind.CONNECTION),
)


def classify_message(message: str, default: ErrorKind = ErrorKind.UNKNOWN) -> ErrorKind:
    """Classify a failure from its message text."""
    for fragments, kind in _MESSAGE_RULES:
        if any(fragment in message for fragment in fragments):
            return kind
    return default


def classify(error: BaseException | str, default: ErrorKind = ErrorKind.UNKNOWN) -> ErrorKind:
    """
    Classify a failure into an error kind.

    DappVotes errors carry their kind. Other exceptions are classified from
    their message. Plain strings keep the caller's kind.
    """
    if isinstance(error, DappVotesError) and error.kind != ErrorKind.UNKNOWN:
        return error.kind
    if isinstance(error, str):
        return default
    return classify_message(str(error), default)


def resolve_message(error: BaseException | str) -> str:
    """Human-readable message for an error."""
    if isinstance(error, str):
        return error or DEFAULT_ERROR_MESSAGE
    if isinstance(error, DappVotesError):
        return error.message or DEFAULT_ERROR_MESSAGE
    return str(error) or DEFAULT_ERROR_MESSAGE


class ErrorReporter:
    """
    Logs failures at a severity matching their kind and forwards the ones a
    user should see to a notifier (a toast, a flash message).
    """

    def __init__(self, notifier: Notifier | None = None, development: bool = False) -> None:
        """
        Initialize the reporter.

        Args:
            notifier: Called with (message, kind) for user-facing errors.
            development: Log view-function errors (debug level) when True.
        """
        self._notifier = notifier
        self._development = development

    def attach_notifier(self, notifier: Notifier) -> None:
        """Route user-facing errors to a new notifier, replacing any previous one."""
        if self._notifier is not None and self._notifier is not notifier:
            logger.info("[Reporter] Replacing notifier")
        self._notifier = notifier

    def report(self, error: BaseException | str, kind: ErrorKind = ErrorKind.UNKNOWN) -> str:
        """
        Classify, log and surface an error.

        Returns:
            The resolved message, whether or not it was surfaced.
        """
        resolved_kind = classify(error, kind)
        message = resolve_message(error)
        exc_info = error if isinstance(error, BaseException) else None

        if resolved_kind == ErrorKind.CRITICAL:
            logger.critical(f"CRITICAL ERROR: {message}", exc_info=exc_info)
        elif resolved_kind == ErrorKind.TRANSACTION:
            logger.warning(f"TRANSACTION ERROR: {message}")
        elif resolved_kind == ErrorKind.CONNECTION:
            logger.error(f"CONNECTION ERROR: {message}", exc_info=exc_info)
        elif resolved_kind == ErrorKind.VIEW_FUNCTION:
            if self._development:
                logger.debug(f"VIEW FUNCTION ERROR: {message}")
        else:
            logger.error(f"UNKNOWN ERROR: {message}", exc_info=exc_info)

        if resolved_kind != ErrorKind.VIEW_FUNCTION and self._notifier is not None:
            try:
                self._notifier(message, resolved_kind)
            except Exception as e:
                logger.warning(f"[Reporter] Notifier failed: {e}")

        return message
