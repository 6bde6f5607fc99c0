"""
Client-side challenge gate.

Holds the token produced by the bot-prevention widget until a submission
consumes it. With no site key configured the gate is disabled and never
blocks a submission.
"""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ChallengeRequiredError(Exception):
    """Raised when the challenge is enabled but not yet completed."""

    def __init__(self):
        super().__init__("Challenge not completed")


class ChallengeGate:
    """
    Usage:
        gate = ChallengeGate(site_key, renderer=render_widget)
        gate.mount()              # renders the widget once
        gate.on_success(token)    # widget callback
        token = gate.require_token()
    """

    def __init__(
        self,
        site_key: str | None,
        renderer: Callable[[str, "ChallengeGate"], None] | None = None,
    ) -> None:
        self.site_key = (site_key or "").strip() or None
        self._renderer = renderer
        self._mounted = False
        self._token: str | None = None

    @property
    def enabled(self) -> bool:
        return self.site_key is not None

    @property
    def token(self) -> str | None:
        return self._token

    def mount(self) -> bool:
        """Render the widget. Only the first call renders; returns whether it did."""
        if not self.enabled or self._mounted:
            return False
        self._mounted = True
        if self._renderer is not None:
            self._renderer(self.site_key, self)
        return True

    def on_success(self, token: str) -> None:
        self._token = token or None

    def on_error(self) -> None:
        logger.warning("Challenge widget reported an error")
        self._token = None

    def on_expired(self) -> None:
        self._token = None

    def require_token(self) -> str | None:
        """
        Token for the next submission.

        Raises:
            ChallengeRequiredError: If enabled and no token is held
        """
        if not self.enabled:
            return None
        if not self._token:
            raise ChallengeRequiredError()
        return self._token

    def consume(self) -> str | None:
        """Return the held token and clear it; each token is single-use."""
        token, self._token = self._token, None
        return token
