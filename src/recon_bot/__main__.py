"""Run the app with uvicorn: ``python -m recon_bot``."""

import uvicorn

from recon_bot.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("recon_bot.app:app", host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
