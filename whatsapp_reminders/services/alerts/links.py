"""Open WhatsApp deep links on the host."""

import webbrowser

from ...logging_config import get_logger

logger = get_logger(__name__)


class BrowserLinkOpener:
    """Opens links in a new tab of the host's default browser."""

    def open(self, url: str) -> bool:
        opened = webbrowser.open_new_tab(url)
        if opened:
            logger.info(f"Opened WhatsApp link {url}")
        else:
            logger.warning(f"No browser available to open {url}")
        return opened
