"""Logging configuration for texrecolor."""

import logging
import sys
import time
from pathlib import Path
from typing import Dict, Optional

import colorlog


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    enable_colors: bool = True,
    format_string: Optional[str] = None,
) -> None:
    """Setup logging configuration for texrecolor.

    Args:
        level: Logging level
        log_file: Optional log file path
        enable_colors: Whether to use colored output
        format_string: Custom format string
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    use_colors = enable_colors and sys.stderr.isatty()

    if format_string is None:
        if use_colors:
            format_string = "%(log_color)s%(levelname)-8s%(reset)s %(blue)s%(name)s%(reset)s: %(message)s"
        else:
            format_string = "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s"

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    if use_colors:
        formatter = colorlog.ColoredFormatter(
            format_string,
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    else:
        formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)  # Always debug level for file
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    _configure_library_loggers(level)


def _configure_library_loggers(level: int = logging.INFO) -> None:
    """Configure logging levels for third-party libraries."""
    logging.getLogger("PIL").setLevel(logging.WARNING)

    # Handlers filter quiet runs; the package logger never drops warnings
    logging.getLogger("texrecolor").setLevel(min(level, logging.INFO))


class ProgressLogger:
    """Logger for tracking batch progress."""

    def __init__(self, name: str = "texrecolor.progress"):
        """Initialize progress logger.

        Args:
            name: Logger name
        """
        self.logger = logging.getLogger(name)

    def log_bundle_step(
        self, index: int, total: int, bundle_name: str, frequency: int = 10
    ) -> None:
        """Log progress through the bundle list.

        Args:
            index: Zero-based bundle index
            total: Number of bundles
            bundle_name: Bundle being processed
            frequency: Logging frequency (every N bundles)
        """
        if index % frequency == 0 or index == total - 1:
            progress_pct = ((index + 1) / total) * 100 if total else 100.0
            self.logger.info(
                f"Bundle {index + 1:4d}/{total} ({progress_pct:5.1f}%) - {bundle_name}"
            )

    def log_palette(self, category_name: str, palette: dict) -> None:
        """Log the palette chosen for a bundle.

        Args:
            category_name: Category display name
            palette: Mapping of slot name to hex color
        """
        self.logger.debug(f"Using {category_name} palette:")
        for slot, hex_color in palette.items():
            self.logger.debug(f"  {slot}: {hex_color}")

    def log_export_results(self, output_files: Dict[str, str]) -> None:
        """Log written output files.

        Args:
            output_files: Mapping of texture name to output path
        """
        self.logger.info(f"Wrote {len(output_files)} textures:")
        for texture, file_path in output_files.items():
            self.logger.info(f"  {texture}: {Path(file_path).name}")


class PerformanceLogger:
    """Logger for tracking performance metrics."""

    def __init__(self, name: str = "texrecolor.performance"):
        """Initialize performance logger."""
        self.logger = logging.getLogger(name)
        self.timers: Dict[str, float] = {}

    def start_timer(self, name: str) -> None:
        """Start a performance timer.

        Args:
            name: Timer name
        """
        self.timers[name] = time.perf_counter()

    def end_timer(self, name: str) -> float:
        """End a performance timer and log result.

        Args:
            name: Timer name

        Returns:
            Elapsed time in seconds
        """
        if name not in self.timers:
            self.logger.warning(f"Timer '{name}' was not started")
            return 0.0

        elapsed = time.perf_counter() - self.timers.pop(name)
        self.logger.debug(f"{name}: {elapsed:.2f}s")
        return elapsed


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
