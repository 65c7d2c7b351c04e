"""Run the API with uvicorn: ``python -m ledger_api``."""

from __future__ import annotations

import uvicorn

from ledger_api.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "ledger_api.main:create_app",
        factory=True,
        host=settings.server_host,
        port=settings.server_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
