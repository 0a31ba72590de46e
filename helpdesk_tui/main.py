from __future__ import annotations

import logging
import sys

from helpdesk_tui.api.client import HelpdeskClient, Session
from helpdesk_tui.core.config import ConfigurationError, Settings, load_settings
from helpdesk_tui.core.logging import configure_logging
from helpdesk_tui.ui.app import HelpdeskApp

logger = logging.getLogger(__name__)


def build_client(settings: Settings) -> HelpdeskClient:
    session = Session(
        base_url=settings.base_url,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        username=settings.username,
        password=settings.password,
    )
    return HelpdeskClient(session, timeout=settings.timeout)


def main() -> int:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    configure_logging(settings)
    logger.info("Starting helpdesk client against %s", settings.base_url)

    with build_client(settings) as client:
        app = HelpdeskApp(client)
        app.run()
    return app.return_code or 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
