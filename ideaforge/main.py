"""
IdeaForge - Main Entry Point
Serves the HTTP API with uvicorn.
"""

import uvicorn
from dotenv import load_dotenv

from .api import create_app
from .config import create_default_config_from_env


# Load environment variables
load_dotenv()


def main():
    """Main entry point."""
    settings = create_default_config_from_env()

    # Fail before binding the port rather than on the first request
    errors = settings.validate_settings()
    if errors:
        print("Configuration errors:")
        for error in errors:
            print(f"  - {error}")
        raise SystemExit(1)

    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.server.log_level.lower(),
    )


if __name__ == "__main__":
    main()
