"""
Host navigation port.
"""

from typing import Callable, List, Optional

from shared.logging import get_logger


class LocationNavigator:
    """Tracks the host's current location and sends it to the login page when the session ends."""

    def __init__(
        self,
        login_page: str = "/login",
        current_path: str = "/",
        on_navigate: Optional[Callable[[str], None]] = None,
    ):
        self.login_page = login_page
        self.current_path = current_path
        self.on_navigate = on_navigate
        self.history: List[str] = []
        self.logger = get_logger("client.session.navigation")

    @property
    def on_login_page(self) -> bool:
        return self.current_path.rstrip("/") == self.login_page.rstrip("/")

    def navigate(self, path: str) -> None:
        self.history.append(path)
        self.current_path = path
        if self.on_navigate is not None:
            self.on_navigate(path)

    async def redirect_to_login(self) -> None:
        """Go to the login page unless already there."""
        if self.on_login_page:
            self.logger.debug("Already on login page, redirect skipped")
            return
        self.logger.info("Redirecting to login page", login_page=self.login_page)
        self.navigate(self.login_page)
