"""
Run the frontend server from the CLI:
    python -m spaserve                              # mode from MODE / .env
    python -m spaserve --mode release --port 8080   # serve frontend/dist
    python -m spaserve --skip-dev-server --dev-port 5173

Every flag overrides the matching environment setting.
"""

import argparse
import logging

import uvicorn

from spaserve.config import build_settings
from spaserve.main import create_app
from spaserve.models import FrameworkType, OperatingMode

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="spaserve",
        description="Serve a frontend build, or proxy to its dev server.",
    )
    parser.add_argument("--mode", choices=[m.value for m in OperatingMode])
    parser.add_argument("--host")
    parser.add_argument("--port", type=int)
    parser.add_argument("--frontend", dest="frontend_folder_path",
                        help="Frontend folder, or its parent directory")
    parser.add_argument("--dist", dest="dist_folder", help="Build output subfolder")
    parser.add_argument("--framework", choices=[f.value for f in FrameworkType] + ["nextjs"])
    parser.add_argument("--assets-package", help="Importable package that ships the frontend build")
    parser.add_argument("--dev-command", help="Dev-server start command")
    parser.add_argument("--skip-dev-server", action="store_true", default=None,
                        help="Do not start the dev server")
    parser.add_argument("--dev-port", type=int, help="Port of an already running dev server")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    overrides = {
        "MODE": args.mode,
        "HOST": args.host,
        "PORT": args.port,
        "FRONTEND_FOLDER_PATH": args.frontend_folder_path,
        "DIST_FOLDER": args.dist_folder,
        "FRAMEWORK_TYPE": args.framework,
        "ASSETS_PACKAGE": args.assets_package,
        "DEV_SERVER_COMMAND": args.dev_command,
        "SKIP_RUNNING_DEV_SERVER": args.skip_dev_server,
        "DEV_SERVER_PORT": args.dev_port,
        "LOG_LEVEL": args.log_level,
    }
    settings = build_settings(**{k: v for k, v in overrides.items() if v is not None})

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Frontend running at http://{settings.HOST}:{settings.PORT} ({settings.operating_mode.value})")

    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
