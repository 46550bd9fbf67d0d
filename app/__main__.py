"""Punto de entrada para hosting.

Uso:
  python -m app
"""

import os

import uvicorn

from app.config import HOST, PORT


def main() -> None:
    reload = os.getenv("RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("app.main:app", host=HOST, port=PORT, reload=reload)


if __name__ == "__main__":
    main()
