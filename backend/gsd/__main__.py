"""Run the API with uvicorn: `python -m gsd`."""

import uvicorn

from .config import settings


def main():
    uvicorn.run("gsd.main:app", host="0.0.0.0", port=settings.HTTP_SERVER_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == '__main__':
    main()
