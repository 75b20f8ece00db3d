import argparse
import asyncio
import logging
import sys
from typing import Optional

from app_config import AppConfig, AppConfigurationError, load_app_config, resolve_config_path
from app_config_schema import STORE_BACKEND_SQLITE
from pomodoro import Settings, UserProfile
from runtime import ConsoleRenderer, RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from server import ServerConfigurationError, UIServer, UIServerConfig
from sync import DocumentStore, InMemoryStore, SqliteStore, SyncController


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    return logging.getLogger("runtime")


def read_stdin_line() -> Optional[str]:
    """Blocking line reader for the command prompt; None at end of input."""
    line = sys.stdin.readline()
    if not line:
        return None
    return line.rstrip("\r\n")


def build_store(app_config: AppConfig) -> DocumentStore:
    store_logger = logging.getLogger("store")
    settings = app_config.store
    if settings.backend == STORE_BACKEND_SQLITE:
        return SqliteStore(
            settings.path,
            history_limit=settings.history_limit,
            logger=store_logger,
        )
    return InMemoryStore(history_limit=settings.history_limit, logger=store_logger)


def build_controller(app_config: AppConfig, store: DocumentStore) -> SyncController:
    profile = app_config.profile
    timer = app_config.timer
    return SyncController(
        store,
        UserProfile(
            uid=profile.uid,
            email=profile.email,
            first_name=profile.first_name,
            last_name=profile.last_name,
        ),
        seed_settings=Settings(
            work_duration=timer.work_minutes * 60,
            break_duration=timer.break_minutes * 60,
            long_break_duration=timer.long_break_minutes * 60,
        ),
        logger=logging.getLogger("sync"),
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Terminal pomodoro timer with store sync.")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.toml (defaults to $APP_CONFIG_FILE or ./config.toml).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Run the pomodoro command runtime until logout or end of input."""
    args = parse_args(argv)
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path(args.config)
        app_config = load_app_config(str(config_path))
        logging.getLogger().setLevel(app_config.logging.level)
        logger.info("Loaded runtime config: %s", config_path)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    ui_server: Optional[UIServer] = None
    try:
        ui_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        return 1
    if ui_config.enabled:
        ui_server = UIServer(config=ui_config, logger=logging.getLogger("ui_server"))
        try:
            ui_server.start()
        except RuntimeError as error:
            logger.error("UI server failed to start: %s", error)
            return 1

    store = build_store(app_config)
    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            controller=build_controller(app_config, store),
            ui_server=ui_server,
            console=ConsoleRenderer(sys.stdout),
            hooks=RuntimeHooks(read_line=read_stdin_line),
        )
    )
    if ui_server is not None:
        ui_server.set_message_handler(engine.submit_threadsafe)

    try:
        return asyncio.run(engine.run())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by keyboard interrupt.")
        if ui_server is not None:
            ui_server.stop(timeout_seconds=5.0)
        return 0


if __name__ == "__main__":
    sys.exit(main())
