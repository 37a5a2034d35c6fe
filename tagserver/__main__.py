from __future__ import annotations

import uvicorn

from tagserver.common.settings import get_settings
from tagserver.services.api.app import create_app


def main() -> None:
    cfg = get_settings()
    uvicorn.run(create_app(cfg), host=cfg.api.host, port=cfg.api.port, log_level=cfg.log_level.lower())


if __name__ == "__main__":
    main()
