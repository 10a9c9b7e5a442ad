"""
Command Line Interface for the self-organized feature map
"""

import argparse
import json
import os
import sys
import structlog
from pathlib import Path

import numpy as np
import pandas as pd

from sofm import (
    SOM,
    SOMParameters,
    ConnectionType,
    InitType,
    setup_logging,
    trace_operation,
)
from sofm import __version__

# Initialize observability
setup_logging(
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    json_format=False,  # Use console format for CLI
)

logger = structlog.get_logger()


def load_data(file_path: str, format: str = "auto") -> np.ndarray:
    """Load data from various formats"""
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    # Auto-detect format if not specified
    if format == "auto":
        format = path.suffix.lower()

    try:
        if format in [".csv", "csv"]:
            df = pd.read_csv(file_path)
            return df.select_dtypes(include=[np.number]).values.astype(np.float64)
        elif format in [".json", "json"]:
            with open(file_path, "r") as f:
                data = json.load(f)
            return np.array(data, dtype=np.float64)
        elif format in [".npy", "npy"]:
            return np.load(file_path).astype(np.float64)
        elif format in [".npz", "npz"]:
            loaded = np.load(file_path)
            # Use first array if multiple arrays in npz
            key = list(loaded.keys())[0]
            return loaded[key].astype(np.float64)
        else:
            raise ValueError(f"Unsupported format: {format}")
    except Exception as e:
        raise ValueError(f"Failed to load data from {file_path}: {e}")


def build_report(som: SOM, epochs_run: int) -> dict:
    """Summary of a trained map as JSON-serializable data"""
    return {
        "shape": [som.rows, som.cols],
        "conn_type": som.conn_type.value,
        "epochs_run": epochs_run,
        "quantization_error": som.quantization_error(),
        "topographic_error": som.topographic_error(),
        "weights": som.get_weights().tolist(),
        "awards": som.get_awards().tolist(),
        "capture_objects": som.get_capture_objects(),
        "neighbors": som.get_neighbors(),
    }


def train_command(args) -> None:
    """Train a map and write its report"""
    print(f"Loading data from: {args.input}")
    try:
        data = load_data(args.input, args.format)
        print(f"Data shape: {data.shape}")

        parameters = SOMParameters(
            init_type=InitType(args.init_type),
            init_radius=args.radius,
            init_learn_rate=args.learning_rate,
            adaptation_threshold=args.threshold,
            seed=args.seed,
        )

        print(
            f"Training SOM: {args.rows}x{args.cols}, {args.epochs} epochs, "
            f"{args.conn_type} connections"
        )

        with trace_operation(
            "som_training", rows=args.rows, cols=args.cols, epochs=args.epochs
        ):
            som = SOM(
                data,
                args.rows,
                args.cols,
                args.epochs,
                ConnectionType(args.conn_type),
                parameters,
                verbose=args.verbose,
            )
            epochs_run = som.train(autostop=args.autostop)

        report = build_report(som, epochs_run)

        print("Training completed!")
        print(f"Epochs run: {epochs_run}")
        print(f"Quantization Error: {report['quantization_error']:.4f}")
        print(f"Topographic Error: {report['topographic_error']:.4f}")
        print(f"Awards: {report['awards']}")

        with open(args.output, "w") as f:
            json.dump(report, f, indent=2)
        print(f"Report saved to: {args.output}")

        if args.visualize:
            stem = args.output.rsplit(".", 1)[0]
            som.show_distance_matrix(show_plot=False, save_path=f"{stem}_umatrix.png")
            som.show_density_matrix(show_plot=False, save_path=f"{stem}_density.png")
            som.plot_training_progress(
                show_plot=False, save_path=f"{stem}_progress.png"
            )
            print("Visualizations saved to: plots/")

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Self-Organized Feature Map CLI",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Train command
    train_parser = subparsers.add_parser("train", help="Train a map")
    train_parser.add_argument("input", help="Input data file")
    train_parser.add_argument(
        "--output", "-o", default="som_report.json", help="Output report file"
    )
    train_parser.add_argument("--rows", type=int, default=5, help="Neuron rows")
    train_parser.add_argument("--cols", type=int, default=5, help="Neuron columns")
    train_parser.add_argument(
        "--epochs", type=int, default=100, help="Number of training epochs"
    )
    train_parser.add_argument(
        "--conn-type",
        choices=[c.value for c in ConnectionType],
        default=ConnectionType.GRID_EIGHT.value,
        help="Connections between neurons",
    )
    train_parser.add_argument(
        "--init-type",
        choices=[i.value for i in InitType],
        default=InitType.UNIFORM_GRID.value,
        help="Weight initialization strategy",
    )
    train_parser.add_argument(
        "--radius",
        type=float,
        default=1.0,
        help="Initial neighborhood radius; eight-grid diagonals need at least 1.415",
    )
    train_parser.add_argument(
        "--learning-rate", type=float, default=0.1, help="Initial learning rate"
    )
    train_parser.add_argument(
        "--threshold",
        type=float,
        default=0.001,
        help="Adaptation threshold for --autostop",
    )
    train_parser.add_argument(
        "--autostop", action="store_true", help="Stop once weights settle"
    )
    train_parser.add_argument(
        "--format",
        choices=["auto", "csv", "json", "npy", "npz"],
        default="auto",
        help="Input data format",
    )
    train_parser.add_argument(
        "--seed", type=int, help="Random seed for reproducibility"
    )
    train_parser.add_argument(
        "--visualize", action="store_true", help="Save visualizations"
    )
    train_parser.add_argument("--verbose", action="store_true", help="Verbose output")

    # Version command
    subparsers.add_parser("version", help="Show version information")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "train":
        train_command(args)
    elif args.command == "version":
        print(f"SOFM CLI v{__version__}")
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
