"""Run the API server."""
import uvicorn

from orderbot.core.config import settings


def main() -> None:
    uvicorn.run("orderbot.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
