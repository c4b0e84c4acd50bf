import logging
import os

import uvicorn


def main() -> int:
    log_level = os.getenv("SQUIRCLE_LOG_LEVEL", "info").strip().lower() or "info"
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.getenv("SQUIRCLE_HOST", "0.0.0.0")
    port = int(os.getenv("SQUIRCLE_PORT", os.getenv("PORT", "8000")))
    uvicorn.run("squircleapi.app:app", host=host, port=port, log_level=log_level)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
