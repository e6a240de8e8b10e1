"""
design_bridge.api.__main__

Entrypoint for running the service via `python -m design_bridge.api` (or the
`design-bridge` console script).

Responsibilities:
- Load and validate settings; an inconsistent environment exits with status 1.
- Create the app and start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn
from pydantic import ValidationError

from design_bridge.api.app import create_app
from design_bridge.observability.logging import configure_logging, get_logger
from design_bridge.settings import get_settings

log = get_logger(__name__)


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as e:
        # Settings never loaded, so log with defaults. Field values are left out;
        # several of them are secrets.
        configure_logging(service_name="design-bridge", level="INFO")
        log.error(
            "startup.invalid_config",
            errors=[
                {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                for err in e.errors(include_input=False, include_url=False)
            ],
        )
        raise SystemExit(1) from e

    app = create_app(settings=settings)
    log.info(
        "startup.listening",
        host=settings.api_host,
        port=settings.api_port,
        upstream_url=settings.upstream_base_url,
    )
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# Run behind a process manager; a non-zero exit on bad config lets it surface
# the misconfiguration instead of restarting into a half-working auth layer.
