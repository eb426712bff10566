"""Run the registry with uvicorn on LISTEN_ADDR."""

import uvicorn

from linker.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("linker.main:app", host=settings.listen_host, port=settings.listen_port)


if __name__ == "__main__":
    main()
