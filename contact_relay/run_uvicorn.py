import uvicorn

from contact_relay.config import get_settings
from contact_relay.logging_config import configure_logging


def main() -> None:
    """
    Uvicorn launcher.
    - Reads PORT from env / .env, defaults to 3000.
    - Logging configured before Uvicorn starts.
    """

    # Must run before uvicorn.run() so the app's loggers inherit it.
    configure_logging()

    uvicorn.run(
        "contact_relay.main:app",
        host="0.0.0.0",
        port=get_settings().port,
        reload=False,
        log_config=None,
        use_colors=False,
    )


if __name__ == "__main__":
    main()
