"""
Evaluation CLI for Adaptive Resonance.

Commands to score a trained checkpoint on labelled data and to inspect its
categories and map field.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Dict, Optional

import click
import numpy as np

from ..data.dataloader import load_csv
from ..training.trainer import evaluate_model, load_checkpoint
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--checkpoint",
    "-m",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to trained checkpoint"
)
@click.option(
    "--data",
    "-d",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Labelled CSV to evaluate on"
)
@click.option(
    "--label-column",
    type=str,
    default="label",
    help="Name of the label column"
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Write results to this JSON file"
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug mode"
)
def evaluate(
    checkpoint: Path,
    data: Path,
    label_column: str,
    output: Optional[Path],
    debug: bool,
) -> None:
    """
    Evaluate a trained checkpoint on labelled data.

    Features are scaled with the scaler stored in the checkpoint.
    """
    try:
        setup_logging(level="DEBUG" if debug else "INFO")

        click.echo(f"Loading checkpoint: {checkpoint}")
        bundle = load_checkpoint(checkpoint)

        features, labels = load_csv(data, label_column=label_column)
        if labels is None:
            raise ValueError(f"Label column '{label_column}' not found in {data}")

        results = evaluate_model(
            bundle.model, bundle.classes, bundle.transform(features), labels
        )
        if output is not None:
            save_results(results, output)
            click.echo(f"Results saved to: {output}")

        print_evaluation_summary(results)

    except Exception as e:
        logger.error(f"Evaluation failed: {e}")
        if debug:
            raise
        sys.exit(1)


@click.command("inspect")
@click.option(
    "--checkpoint",
    "-m",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to trained checkpoint"
)
@click.option(
    "--space",
    type=click.Choice(["input", "target"]),
    default="input",
    help="Category space to list"
)
@click.option(
    "--categories",
    is_flag=True,
    help="List every category box"
)
@click.option(
    "--map-field",
    is_flag=True,
    help="List every map-field association"
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug mode"
)
def inspect_model(
    checkpoint: Path,
    space: str,
    categories: bool,
    map_field: bool,
    debug: bool,
) -> None:
    """Show statistics, categories and associations of a checkpoint."""
    try:
        setup_logging(level="DEBUG" if debug else "WARNING")
        bundle = load_checkpoint(checkpoint)
        model = bundle.model

        click.echo("=" * 60)
        click.echo("MODEL SUMMARY")
        click.echo("=" * 60)
        click.echo(f"Classes: {bundle.classes.tolist()}")
        click.echo(json.dumps(to_serializable(model.statistics()), indent=2))

        if categories:
            click.echo(f"\n{space} categories:")
            for index in range(model.get_category_count(space)):
                category = model.get_category(index, space)
                lower = np.round(category.lower, 4).tolist()
                upper = np.round(category.upper, 4).tolist()
                click.echo(
                    f"  [{index}] usage={category.usage_count} "
                    f"lower={lower} upper={upper}"
                )

        if map_field:
            click.echo("\nMap field:")
            for a_index, b_index in model.get_map_field().items():
                label = bundle.classes[int(np.argmax(model.get_category(b_index, "target").lower))]
                click.echo(f"  input {a_index} -> target {b_index} ({label})")

    except Exception as e:
        logger.error(f"Inspection failed: {e}")
        if debug:
            raise
        sys.exit(1)


def to_serializable(obj):
    """Convert numpy values (recursively) into JSON-friendly Python ones."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, dict):
        return {str(k): to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_serializable(item) for item in obj]
    return obj


def save_results(results: Dict, output_file: Path) -> None:
    """Save evaluation results to a JSON file."""
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w") as f:
        json.dump(to_serializable(results), f, indent=2)

    logger.info(f"Results saved to {output_file}")


def print_evaluation_summary(results: Dict) -> None:
    """Print a summary of evaluation results to the console."""
    overall = results.get("overall_metrics", {})

    click.echo("\n" + "=" * 60)
    click.echo("EVALUATION SUMMARY")
    click.echo("=" * 60)
    click.echo(f"Samples: {results.get('num_samples', 0)}")
    click.echo(f"Accuracy: {overall.get('accuracy', 0):.3f}")
    click.echo(f"F1 (macro): {overall.get('f1', 0):.3f}")
    click.echo(f"Coverage: {overall.get('coverage', 0):.3f}")

    stats = results.get("category_statistics", {})
    if stats:
        click.echo(f"Input categories: {stats.get('num_categories', 0)}")
    click.echo("=" * 60)
