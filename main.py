import os

import uvicorn

from goalforest.logger import setup_logging


def main():
    """Main entry point for the goalforest web service."""
    setup_logging()

    reload_enabled = os.getenv("GOALFOREST_RELOAD", "0").lower() in {"1", "true", "yes"}
    host = os.getenv("GOALFOREST_HOST", "127.0.0.1")
    port = int(os.getenv("GOALFOREST_PORT", "8010"))

    uvicorn.run(
        "web.backend.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
        reload_dirs=["web", "goalforest"] if reload_enabled else None,
    )


if __name__ == "__main__":
    main()
