"""
Training CLI for Adaptive Resonance.

This module provides the ``artmap`` command group and its ``train`` and
``generate-config`` commands. Evaluation, prediction and inspection
commands live in ``evaluate`` and ``inference`` and are registered here.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import numpy as np
import yaml
from omegaconf import OmegaConf

from .. import __version__
from ..configs.schema import SystemConfig
from ..data.dataloader import ARTDataModule
from ..training.trainer import ARTMAPTrainer
from ..utils.logging import ExperimentLogger, MetricsLogger, setup_logging
from .evaluate import evaluate, inspect_model, print_evaluation_summary, save_results
from .inference import predict

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to configuration file (YAML)"
)
@click.option(
    "--experiment-name",
    "-n",
    type=str,
    help="Override experiment name"
)
@click.option(
    "--train-data",
    "-d",
    type=click.Path(exists=True, path_type=Path),
    help="Override training CSV"
)
@click.option(
    "--test-data",
    type=click.Path(exists=True, path_type=Path),
    help="Override test CSV"
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(path_type=Path),
    help="Override output directory"
)
@click.option(
    "--vigilance",
    "-v",
    type=float,
    help="Override input-space vigilance"
)
@click.option(
    "--epochs",
    "-e",
    type=int,
    help="Override number of epochs"
)
@click.option(
    "--match-tracking",
    type=click.Choice(["increment", "match_plus"]),
    help="Override match-tracking mode"
)
@click.option(
    "--seed",
    type=int,
    help="Random seed for the train/test split"
)
@click.option(
    "--tags",
    type=str,
    help="Comma-separated tags for experiment"
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Validate configuration and data without training"
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug mode"
)
def train(
    config: Path,
    experiment_name: Optional[str] = None,
    train_data: Optional[Path] = None,
    test_data: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    vigilance: Optional[float] = None,
    epochs: Optional[int] = None,
    match_tracking: Optional[str] = None,
    seed: Optional[int] = None,
    tags: Optional[str] = None,
    dry_run: bool = False,
    debug: bool = False,
) -> None:
    """
    Train a Fuzzy ARTMAP model on labelled CSV data.

    Writes a checkpoint, a per-epoch metrics CSV and a JSON results file to
    the output directory.
    """
    try:
        click.echo(f"Loading configuration from {config}")
        system_config = load_and_validate_config(
            config,
            experiment_name=experiment_name,
            train_data=train_data,
            test_data=test_data,
            output_dir=output_dir,
            vigilance=vigilance,
            epochs=epochs,
            match_tracking=match_tracking,
            seed=seed,
            tags=tags,
        )

        log_level = "DEBUG" if debug else system_config.log_level
        setup_logging(
            level=log_level,
            log_dir=system_config.log_dir,
            experiment_name=system_config.experiment_name,
        )
        log_system_info(system_config)

        data_module = ARTDataModule(system_config)
        data_module.setup()
        click.echo(f"Data: {data_module.get_dataset_info()}")

        if dry_run:
            click.echo("Dry run completed successfully")
            return

        output_path = Path(system_config.output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        name = system_config.experiment_name

        metrics_logger = MetricsLogger(output_path / f"{name}_metrics.csv")
        experiment_logger = ExperimentLogger(name, log_dir=system_config.log_dir or output_path)
        experiment_logger.log_experiment_start(system_config.dict())

        try:
            trainer = ARTMAPTrainer(
                system_config,
                data_module,
                metrics_logger=metrics_logger,
                experiment_logger=experiment_logger,
            )

            click.echo("Starting training...")
            history = trainer.train()
            checkpoint_path = trainer.save_checkpoint(output_path / f"{name}.pkl")

            results = trainer.evaluate()
            results["history"] = history
            results["statistics"] = trainer.model.statistics()
            save_results(results, output_path / f"{name}_results.json")

            experiment_logger.log_experiment_end(results.get("overall_metrics", {}))
        finally:
            experiment_logger.close()

        click.echo("Training completed successfully!")
        click.echo(f"Checkpoint saved to: {checkpoint_path}")
        if results.get("num_samples"):
            print_evaluation_summary(results)

    except Exception as e:
        logger.error(f"Training failed: {e}")
        if debug:
            raise
        sys.exit(1)


def load_and_validate_config(config_path: Path, **overrides) -> SystemConfig:
    """
    Load a YAML configuration file and apply command-line overrides.

    Args:
        config_path: Path to configuration file
        **overrides: Configuration overrides; None values are ignored

    Returns:
        Validated SystemConfig
    """
    with open(config_path) as f:
        config_dict = yaml.safe_load(f) or {}

    cfg = OmegaConf.create(config_dict)

    for key, value in overrides.items():
        if value is None:
            continue
        if key == "experiment_name":
            cfg.experiment_name = value
        elif key == "train_data":
            OmegaConf.update(cfg, "data.train_path", str(value))
        elif key == "test_data":
            OmegaConf.update(cfg, "data.test_path", str(value))
        elif key == "output_dir":
            cfg.output_dir = str(value)
            cfg.log_dir = str(Path(value) / "logs")
        elif key == "vigilance":
            OmegaConf.update(cfg, "artmap.input_module.vigilance", value)
        elif key == "epochs":
            OmegaConf.update(cfg, "training.epochs", value)
        elif key == "match_tracking":
            OmegaConf.update(cfg, "artmap.match_tracking", value)
        elif key == "seed":
            cfg.seed = value
        elif key == "tags":
            cfg.tags = [tag.strip() for tag in value.split(",") if tag.strip()]
        else:
            raise ValueError(f"Unknown override: {key}")

    try:
        return SystemConfig(**OmegaConf.to_object(cfg))
    except Exception as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def log_system_info(system_config: SystemConfig) -> None:
    """Log the configuration a run uses."""
    artmap = system_config.artmap

    logger.info("=" * 50)
    logger.info("FUZZY ARTMAP TRAINING")
    logger.info("=" * 50)
    logger.info(f"Experiment: {system_config.experiment_name}")
    logger.info(f"Package version: {__version__}")
    logger.info(f"NumPy version: {np.__version__}")
    logger.info(f"Input vigilance: {artmap.input_module.vigilance}")
    logger.info(f"Target vigilance: {artmap.target_module.vigilance}")
    logger.info(f"Map vigilance: {artmap.map_vigilance}")
    logger.info(f"Match tracking: {artmap.match_tracking} (+{artmap.vigilance_increment})")
    logger.info(f"Max input categories: {artmap.input_module.max_categories}")
    logger.info(f"Epochs: {system_config.training.epochs}")
    logger.info("=" * 50)


@click.command("generate-config")
@click.option(
    "--template",
    "-t",
    type=click.Choice(["basic", "strict"]),
    default="basic",
    help="Configuration template to generate"
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default="config.yaml",
    help="Output configuration file"
)
def generate_config(template: str, output: Path) -> None:
    """
    Generate a configuration template.

    The file can be edited and passed to ``artmap train --config``.
    """
    try:
        if template == "basic":
            config = create_basic_config()
        elif template == "strict":
            config = create_strict_config()
        else:
            raise ValueError(f"Unknown template: {template}")

        # Round-trip through the schema so templates never drift from it
        SystemConfig(**config)

        with open(output, "w") as f:
            yaml.safe_dump(config, f, default_flow_style=False, indent=2, sort_keys=False)

        click.echo(f"Generated {template} configuration template: {output}")

    except Exception as e:
        click.echo(f"Failed to generate config: {e}", err=True)
        sys.exit(1)


def create_basic_config() -> dict:
    """Basic configuration template."""
    return {
        "experiment_name": "artmap_basic",
        "seed": 42,
        "log_level": "INFO",
        "output_dir": "outputs",

        "artmap": {
            "input_module": {
                "vigilance": 0.75,
                "learning_rate": 1.0,
                "choice_alpha": 0.001,
                "max_categories": 1000,
            },
            "target_module": {
                "vigilance": 1.0,
                "learning_rate": 1.0,
            },
            "map_vigilance": 0.95,
            "vigilance_increment": 0.05,
            "max_vigilance": 1.0,
            "max_search_attempts": 50,
            "match_tracking": "increment",
        },

        "data": {
            "train_path": "data/train.csv",
            "label_column": "label",
            "normalize": True,
            "test_size": 0.2,
        },

        "training": {
            "epochs": 5,
            "log_every": 100,
            "stop_when_stable": True,
        },
    }


def create_strict_config() -> dict:
    """High-vigilance template: finer categories, match-plus tracking."""
    config = create_basic_config()
    config["experiment_name"] = "artmap_strict"
    config["artmap"]["input_module"]["vigilance"] = 0.9
    config["artmap"]["match_tracking"] = "match_plus"
    config["artmap"]["vigilance_increment"] = 0.001
    return config


@click.group()
@click.version_option(__version__, prog_name="artmap")
def main() -> None:
    """Fuzzy ART / ARTMAP command-line interface."""
    pass


main.add_command(train)
main.add_command(evaluate)
main.add_command(predict)
main.add_command(inspect_model)
main.add_command(generate_config)


if __name__ == "__main__":
    main()
