"""
Logging Utilities for Adaptive Resonance.

Console logging with colorlog, optional log files per experiment, and
small helpers for recording training runs and their metrics.
"""

import csv
import datetime
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import colorlog


def setup_logging(
    level: Union[str, int] = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
    experiment_name: Optional[str] = None,
    console_output: bool = True,
    file_output: bool = True,
    format_type: str = "detailed",
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files; no files are written without it
        experiment_name: Name used for the log file names
        console_output: Whether to log to stdout
        file_output: Whether to log to files in ``log_dir``
        format_type: Format type ("simple", "detailed", "json")
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    formatters = create_formatters(format_type)

    if console_output:
        console_handler = colorlog.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatters["console"])
        root_logger.addHandler(console_handler)

    if file_output and log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        base_name = experiment_name or "adaptive_resonance"
        file_handler = logging.FileHandler(log_dir / f"{base_name}.log")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatters["file"])
        root_logger.addHandler(file_handler)

        error_handler = logging.FileHandler(log_dir / f"{base_name}_error.log")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatters["file"])
        root_logger.addHandler(error_handler)

    configure_external_loggers()

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured")
    if log_dir and file_output:
        logger.info(f"Log files will be saved to: {log_dir}")


def create_formatters(format_type: str = "detailed") -> Dict[str, logging.Formatter]:
    """
    Create console and file formatters.

    Args:
        format_type: Type of formatting ("simple", "detailed", "json")

    Returns:
        Dictionary with "console" and "file" formatters
    """
    if format_type == "simple":
        console_format = "%(log_color)s%(levelname)-8s%(reset)s %(message)s"
        file_format = "%(asctime)s - %(levelname)-8s - %(message)s"

    elif format_type == "detailed":
        console_format = (
            "%(log_color)s%(asctime)s%(reset)s | "
            "%(log_color)s%(levelname)-8s%(reset)s | "
            "%(cyan)s%(name)-28s%(reset)s | "
            "%(message)s"
        )
        file_format = (
            "%(asctime)s | %(levelname)-8s | %(name)-28s | "
            "%(filename)s:%(lineno)d | %(message)s"
        )

    elif format_type == "json":
        console_format = (
            '{"time": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}'
        )
        file_format = console_format

    else:
        raise ValueError(f"Unknown format type: {format_type}")

    console_formatter = colorlog.ColoredFormatter(
        console_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors={
            "DEBUG": "cyan",
            "INFO": "white",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        },
    )
    file_formatter = logging.Formatter(file_format, datefmt="%Y-%m-%d %H:%M:%S")

    return {
        "console": console_formatter,
        "file": file_formatter,
    }


def configure_external_loggers() -> None:
    """Quieten third-party libraries."""
    external_loggers = {
        "sklearn": logging.WARNING,
        "numexpr": logging.WARNING,
        "matplotlib": logging.WARNING,
        "urllib3": logging.WARNING,
    }

    for logger_name, level in external_loggers.items():
        logging.getLogger(logger_name).setLevel(level)


class ExperimentLogger:
    """
    Per-run logger for training experiments.

    Writes a dedicated ``<experiment>_experiment.log`` alongside whatever the
    root logger is configured to do.
    """

    def __init__(self, experiment_name: str, log_dir: Optional[Union[str, Path]] = None):
        self.experiment_name = experiment_name
        self.log_dir = Path(log_dir) if log_dir else Path("logs")

        self.logger = logging.getLogger(f"experiment.{experiment_name}")
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self._handler = logging.FileHandler(self.log_dir / f"{experiment_name}_experiment.log")
        self._handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        self.logger.addHandler(self._handler)
        self.logger.setLevel(logging.INFO)

    def log_experiment_start(self, config: dict) -> None:
        self.logger.info("=" * 60)
        self.logger.info(f"EXPERIMENT START: {self.experiment_name}")
        self.logger.info("=" * 60)

        self.logger.info("Configuration:")
        for key, value in config.items():
            self.logger.info(f"  {key}: {value}")

    def log_epoch_metrics(self, epoch: int, metrics: dict) -> None:
        metric_str = " | ".join(
            f"{k}: {v:.4f}" if isinstance(v, float) else f"{k}: {v}"
            for k, v in metrics.items()
        )
        self.logger.info(f"Epoch {epoch:3d} | {metric_str}")

    def log_experiment_end(self, final_metrics: dict) -> None:
        self.logger.info("=" * 60)
        self.logger.info(f"EXPERIMENT END: {self.experiment_name}")
        self.logger.info("=" * 60)

        self.logger.info("Final Results:")
        for key, value in final_metrics.items():
            if isinstance(value, float):
                self.logger.info(f"  {key}: {value:.4f}")
            else:
                self.logger.info(f"  {key}: {value}")

    def close(self) -> None:
        self.logger.removeHandler(self._handler)
        self._handler.close()


class MetricsLogger:
    """CSV log of scalar metrics, one row per value."""

    FIELDS = ["timestamp", "epoch", "step", "metric_name", "metric_value"]

    def __init__(self, log_file: Union[str, Path]):
        self.log_file = Path(log_file)
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self.metrics_history: List[Dict] = []

        with open(self.log_file, "w", newline="") as f:
            csv.writer(f).writerow(self.FIELDS)

    def log_metric(self, epoch: int, step: int, metric_name: str, metric_value: float) -> None:
        entry = {
            "timestamp": datetime.datetime.now().isoformat(),
            "epoch": epoch,
            "step": step,
            "metric_name": metric_name,
            "metric_value": metric_value,
        }
        self.metrics_history.append(entry)

        with open(self.log_file, "a", newline="") as f:
            csv.writer(f).writerow([entry[name] for name in self.FIELDS])

    def log_metrics_dict(self, epoch: int, step: int, metrics: dict) -> None:
        """Log every numeric value in ``metrics``; other values are skipped."""
        for name, value in metrics.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                self.log_metric(epoch, step, name, value)

    def get_metric_history(self, metric_name: str) -> List[Dict]:
        return [
            entry for entry in self.metrics_history
            if entry["metric_name"] == metric_name
        ]
