"""Command-line entry point for the perception assistant."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import threading

from config import ConfigController
from core.app import PerceptionApp, build_app
from core.logging import enable_file_logging, log_error, log_info, logger
from hardware.camera import Frame
from storage.controller import StorageController
from vision.overlay import BoxAnnotation


HELP_TEXT = (
    "Commands: s=snapshot  w=save  p=pause/resume live  "
    "t=start/stop threat monitor  l=list cameras  c <n>=select camera  q=quit"
)


def configure_logging(level_name: str) -> None:
    """Configure application logging."""

    level = logging._nameToLevel.get(level_name.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.setLevel(level)


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Raw command-line arguments.

    Returns:
        Parsed arguments namespace.
    """

    parser = argparse.ArgumentParser(
        description="Run the live detection, hazard alert and narration assistant."
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Run diagnostics probes and exit.",
    )
    parser.add_argument(
        "--camera",
        type=int,
        default=None,
        help="Override the configured camera device index.",
    )
    parser.add_argument(
        "--no-threats",
        action="store_true",
        help="Start with the threat monitor stopped.",
    )
    return parser.parse_args(argv)


def log_overlay(channel: str, frame: Frame | None, boxes: list[BoxAnnotation]) -> None:
    """Overlay sink for headless runs."""

    if not boxes:
        logger.debug("[OVERLAY] %s cleared", channel)
        return
    logger.debug("[OVERLAY] %s: %s", channel, ", ".join(box.text for box in boxes))


def log_flash(intensity: float) -> None:
    """Flash sink for headless runs."""

    if intensity > 0:
        logger.debug("[OVERLAY] flash on %.2f", intensity)
    else:
        logger.debug("[OVERLAY] flash off")


def start_command_reader(
    loop: asyncio.AbstractEventLoop,
    commands: asyncio.Queue[str | None],
    prompt: str = "> ",
) -> threading.Thread:
    """Read stdin lines on a daemon thread and queue them on ``loop``.

    ``None`` is queued at end of input.
    """

    def _read() -> None:
        while True:
            try:
                line: str | None = input(prompt)
            except EOFError:
                line = None
            try:
                loop.call_soon_threadsafe(commands.put_nowait, line)
            except RuntimeError:
                # Event loop already closed.
                return
            if line is None:
                return

    thread = threading.Thread(target=_read, name="command-reader", daemon=True)
    thread.start()
    return thread


async def handle_command(app: PerceptionApp, command: str) -> bool:
    """Execute one interactive command; returns ``False`` to quit."""

    parts = command.strip().split()
    if not parts:
        return True
    action = parts[0].lower()

    if action == "q":
        return False
    if action == "s":
        result = await app.take_snapshot()
        log_info(result.summary)
    elif action == "w":
        try:
            result = app.save()
        except OSError as exc:
            log_error(f"Save failed, cycles kept: {exc}")
            return True
        log_info(result.message if result.path is None else f"{result.message} ({result.path})")
    elif action == "p":
        running = app.toggle_live()
        log_info("Live detection resumed" if running else "Live detection paused")
    elif action == "t":
        running = app.toggle_threats()
        log_info("Threat monitor started" if running else "Threat monitor stopped")
    elif action == "l":
        devices = app.list_cameras()
        log_info(f"Cameras: {', '.join(str(d) for d in devices) or 'none'}")
    elif action == "c" and len(parts) > 1 and parts[1].isdigit():
        if await app.select_camera(int(parts[1])):
            log_info(f"Switched to camera {parts[1]}")
    else:
        log_info(HELP_TEXT)
    return True


async def run(app: PerceptionApp, start_threats: bool = True) -> None:
    """Start the app and serve interactive commands until quit."""

    await app.start()
    if not start_threats:
        app.toggle_threats()
    log_info(app.status)
    log_info(HELP_TEXT)
    commands: asyncio.Queue[str | None] = asyncio.Queue()
    start_command_reader(asyncio.get_running_loop(), commands)
    try:
        while True:
            command = await commands.get()
            if command is None or not await handle_command(app, command):
                break
    finally:
        await app.close()


def main(argv: list[str] | None = None) -> int:
    """Application entry point.

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Process exit code.
    """

    if argv is None:
        argv = sys.argv[1:]

    config_controller = ConfigController.get_instance()
    config = config_controller.get_config()
    configure_logging(config.get("logging_level", "INFO"))
    args = parse_args(argv)
    if args.diagnostics:
        from diagnostics.run import main as diagnostics_main

        return diagnostics_main([])

    if args.camera is not None:
        camera_cfg = dict(config.get("camera") or {})
        camera_cfg["device_index"] = args.camera
        config = {**config, "camera": camera_cfg}

    storage_controller = StorageController.get_instance()
    if config.get("file_logging_enabled", True):
        log_file_path = storage_controller.get_log_file_path()
        enable_file_logging(log_file_path, level=logger.level)
        logger.info("Writing logs to %s", log_file_path)

    try:
        app = build_app(
            config,
            persist=storage_controller.persist_artifact,
            sink=log_overlay,
            on_flash=log_flash,
        )
    except Exception as exc:
        logger.exception("Startup failed: %s", exc)
        return 1

    try:
        asyncio.run(run(app, start_threats=not args.no_threats))
    except KeyboardInterrupt:
        logger.info("Program terminated by user")
    except Exception as exc:
        logger.exception("An unexpected error occurred: %s", exc)
        return 1
    finally:
        app.frame_source.close()
        if app.speech is not None:
            app.speech.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
