"""
Interpretation of versioned delete results.

A versioned delete ends one of three ways:

1. no response body: success, close the confirmation and refresh
2. an adapter error: show the joined error text and keep confirming
3. any other response: unexpected, force a full reload
"""

import inspect
import logging
from typing import Any, Callable, Optional, Sequence

from ..config import DeleteToolkitConfig, get_config
from ..store import Notifier, PageReloader
from .models import DeleteOutcome, is_adapter_error, response_errors

logger = logging.getLogger(__name__)


def get_error_message(
    errors: Optional[Sequence[str]], config: Optional[DeleteToolkitConfig] = None
) -> str:
    """
    Build the message shown for a failed delete.

    Args:
        errors: Error strings from the store, possibly empty or None
        config: Configuration supplying the separator and fallback text

    Returns:
        The joined errors, or the generic message when there are none
    """
    config = config or get_config()
    message = config.error_separator.join(str(e) for e in errors or [] if e)
    return message or config.generic_error_message


class OutcomeHandler:
    """Reacts to the result of a versioned delete call."""

    def __init__(
        self,
        notifier: Notifier,
        reloader: PageReloader,
        refresh: Callable[[], Any],
        config: Optional[DeleteToolkitConfig] = None,
    ):
        self.notifier = notifier
        self.reloader = reloader
        self.refresh = refresh
        self.config = config or get_config()
        self.last_error: Optional[str] = None

    async def handle(self, response: Any) -> DeleteOutcome:
        """Classify ``response`` and perform the matching side effect."""
        if not response:
            self.last_error = None
            result = self.refresh()
            if inspect.isawaitable(result):
                await result
            return DeleteOutcome.REFRESHED

        if is_adapter_error(response):
            self.last_error = get_error_message(response_errors(response), self.config)
            logger.warning(f"Delete failed: {self.last_error}")
            self.notifier.danger(self.last_error)
            return DeleteOutcome.ERROR_SHOWN

        logger.warning("Delete returned an unexpected response, reloading")
        self.last_error = None
        self.reloader.reload()
        return DeleteOutcome.RELOADED
