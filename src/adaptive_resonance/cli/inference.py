"""
Inference CLI for Adaptive Resonance.

Predicts labels for new samples with a trained checkpoint, either from a
CSV file or from a single comma-separated feature vector.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import numpy as np
import pandas as pd

from ..core.results import ResultKind
from ..data.dataloader import load_csv
from ..training.trainer import Checkpoint, load_checkpoint, target_class
from ..utils.logging import setup_logging
from ..utils.metrics import UNKNOWN_LABEL

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
    help="CSV of samples to classify"
)
@click.option(
    "--input",
    "-i",
    "input_values",
    type=str,
    help="Single sample as comma-separated feature values"
)
@click.option(
    "--label-column",
    type=str,
    default="label",
    help="Label column to ignore if present in the CSV"
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Write predictions to this CSV file"
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug mode"
)
def predict(
    checkpoint: Path,
    data: Optional[Path],
    input_values: Optional[str],
    label_column: str,
    output: Optional[Path],
    debug: bool,
) -> None:
    """Predict labels with a trained checkpoint."""
    try:
        setup_logging(level="DEBUG" if debug else "WARNING")

        if (data is None) == (input_values is None):
            raise click.UsageError("Pass exactly one of --data or --input")

        bundle = load_checkpoint(checkpoint)
        if data is not None:
            features, _ = load_csv(data, label_column=label_column)
        else:
            features = parse_input(input_values)

        predictions = run_inference(bundle, features)

        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            predictions.to_csv(output, index=False)
            click.echo(f"Predictions saved to: {output}")
        else:
            click.echo(predictions.to_string(index=False))

    except click.UsageError:
        raise
    except Exception as e:
        logger.error(f"Prediction failed: {e}")
        if debug:
            raise
        sys.exit(1)


def parse_input(input_values: str) -> np.ndarray:
    """Parse ``"0.1,0.2,0.3"`` into a one-row feature matrix."""
    try:
        values = [float(value) for value in input_values.split(",") if value.strip()]
    except ValueError as e:
        raise ValueError(f"Could not parse input values '{input_values}': {e}") from e
    if not values:
        raise ValueError("No input values given")
    return np.array([values], dtype=np.float64)


def run_inference(bundle: Checkpoint, features: np.ndarray) -> pd.DataFrame:
    """
    Classify every row of ``features``.

    Returns:
        DataFrame with the predicted label, input and target category
        indices, match score and confidence per row (-1 / NaN where nothing
        was predicted)
    """
    rows = []
    for x in bundle.transform(features):
        outcome = bundle.model.predict_association(x)
        if outcome.kind == ResultKind.ASSOCIATION:
            rows.append({
                "label": target_class(bundle.model, bundle.classes, outcome.b_index),
                "input_category": outcome.a_index,
                "target_category": outcome.b_index,
                "score": outcome.score,
                "confidence": outcome.confidence,
                "status": "predicted",
            })
        else:
            rows.append({
                "label": UNKNOWN_LABEL,
                "input_category": -1,
                "target_category": -1,
                "score": np.nan,
                "confidence": np.nan,
                "status": outcome.reason.value,
            })
    return pd.DataFrame(rows)
