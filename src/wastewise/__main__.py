"""wastewise entrypoint.

Run with:
  python -m wastewise
"""

import logging

import uvicorn

from wastewise.config import Settings

def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("wastewise.app:app", host=settings.host, port=settings.port, reload=settings.reload)

if __name__ == "__main__":
    main()
