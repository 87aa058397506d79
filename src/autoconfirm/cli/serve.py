"""Run the webhook server."""

from __future__ import annotations

import uvicorn

from autoconfirm.infrastructure import get_settings


def main() -> int:
    settings = get_settings()
    # Single worker: the sync engine's checkpoint and processed set live in-process
    uvicorn.run(
        "autoconfirm.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        workers=1,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
