"""
Command line interface for training and evaluating the job match model.

    job-match train --data export.json --epochs 50
    job-match train --data export.json --quick
    job-match evaluate --data export.json
    job-match status
    job-match data-stats --data export.json
"""

import argparse
import json
import logging
import os
import sys
import traceback
from typing import Any, Dict, List, Optional

from .config import QUICK_TRAINING_CONFIG, PipelineSettings, TrainingConfig, load_settings
from .data_source import JsonFileDataSource
from .diagnostics import collect_data_stats, training_status
from .evaluator import ModelEvaluator
from .persistence import LocalArtifactStore
from .training_pipeline import TrainingPipeline

logger = logging.getLogger(__name__)


def setup_logging(logs_dir: str = 'logs', level: int = logging.INFO):
    os.makedirs(logs_dir, exist_ok=True)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(os.path.join(logs_dir, 'training.log')),
            logging.StreamHandler()
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Train and evaluate the job match engagement model')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON settings file with "training" and "pipeline" sections')
    parser.add_argument('--artifacts-dir', type=str, default=None,
                        help='Directory holding persisted runs')
    parser.add_argument('--logs-dir', type=str, default='logs',
                        help='Directory for training.log')
    subparsers = parser.add_subparsers(dest='command', required=True)

    train_parser = subparsers.add_parser('train', help='Run the training pipeline')
    train_parser.add_argument('--data', type=str, required=True,
                              help='Path to the JSON data export')
    train_parser.add_argument('--quick', action='store_true',
                              help='Use the quick preset (20 epochs, [64, 32])')
    train_parser.add_argument('--epochs', type=int, default=None,
                              help='Number of training epochs')
    train_parser.add_argument('--batch-size', type=int, default=None,
                              help='Training batch size')
    train_parser.add_argument('--learning-rate', type=float, default=None,
                              help='Learning rate')
    train_parser.add_argument('--validation-split', type=float, default=None,
                              help='Validation data split')
    train_parser.add_argument('--dropout-rate', type=float, default=None,
                              help='Dropout rate')
    train_parser.add_argument('--hidden-units', type=int, nargs='+', default=None,
                              help='Hidden layer sizes')
    train_parser.add_argument('--negative-ratio', type=float, default=None,
                              help='Negative examples per interaction')
    train_parser.add_argument('--random-state', type=int, default=None,
                              help='Random state for reproducibility')
    train_parser.add_argument('--progress', action='store_true',
                              help='Show an epoch progress bar')

    eval_parser = subparsers.add_parser('evaluate', help='Evaluate a persisted run')
    eval_parser.add_argument('--data', type=str, required=True,
                             help='Path to the JSON data export')
    eval_parser.add_argument('--run-id', type=str, default=None,
                             help='Run to evaluate (latest by default)')

    subparsers.add_parser('status', help='Show the latest persisted run')

    stats_parser = subparsers.add_parser('data-stats', help='Summarize available training data')
    stats_parser.add_argument('--data', type=str, required=True,
                              help='Path to the JSON data export')
    return parser


def resolve_settings(args: argparse.Namespace) -> Dict[str, Any]:
    if args.config:
        loaded = load_settings(args.config)
        training, pipeline = loaded['training'], loaded['pipeline']
    else:
        training, pipeline = TrainingConfig(), PipelineSettings()

    if getattr(args, 'quick', False):
        training = QUICK_TRAINING_CONFIG

    training_overrides = {
        'epochs': getattr(args, 'epochs', None),
        'batch_size': getattr(args, 'batch_size', None),
        'learning_rate': getattr(args, 'learning_rate', None),
        'validation_split': getattr(args, 'validation_split', None),
        'dropout_rate': getattr(args, 'dropout_rate', None),
        'hidden_units': getattr(args, 'hidden_units', None),
    }
    pipeline_overrides = {
        'artifacts_dir': args.artifacts_dir,
        'negative_ratio': getattr(args, 'negative_ratio', None),
        'random_state': getattr(args, 'random_state', None),
        'show_progress': True if getattr(args, 'progress', False) else None,
    }

    training = TrainingConfig(**{
        **training.model_dump(),
        **{k: v for k, v in training_overrides.items() if v is not None},
    })
    pipeline = PipelineSettings(**{
        **pipeline.model_dump(),
        **{k: v for k, v in pipeline_overrides.items() if v is not None},
    })
    return {'training': training, 'pipeline': pipeline}


def run_train(args: argparse.Namespace, training: TrainingConfig, pipeline: PipelineSettings) -> int:
    source = JsonFileDataSource(args.data)
    report = TrainingPipeline(source, settings=pipeline).train(training)
    metrics = report.metrics

    print("\n" + "=" * 60)
    print("TRAINING COMPLETED SUCCESSFULLY")
    print("=" * 60)
    print(f"Run: {report.run_id}")
    print(f"   • Data Points: {metrics.data_points}")
    print(f"   • Epochs: {metrics.epochs}")
    print(f"   • Final Loss: {metrics.loss:.4f}")
    print(f"   • Validation Loss: {metrics.validation_loss:.4f}")
    print(f"   • Accuracy: {metrics.accuracy:.4f}")
    print(f"   • Training Time: {metrics.training_time:.2f}s")
    print(f"\nArtifacts: {os.path.join(pipeline.artifacts_dir, 'runs', report.run_id)}")
    return 0


def run_evaluate(args: argparse.Namespace, pipeline: PipelineSettings) -> int:
    source = JsonFileDataSource(args.data)
    result = ModelEvaluator(source, settings=pipeline).evaluate(args.run_id)
    print(json.dumps(result.to_dict(), indent=2))
    return 0


def run_status(pipeline: PipelineSettings) -> int:
    status = training_status(LocalArtifactStore(pipeline.artifacts_dir))
    print(json.dumps(status, indent=2))
    return 0


def run_data_stats(args: argparse.Namespace) -> int:
    stats = collect_data_stats(JsonFileDataSource(args.data))
    print(json.dumps(stats, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.logs_dir)

    try:
        settings = resolve_settings(args)
        training, pipeline = settings['training'], settings['pipeline']
        logger.info(f"Arguments: {vars(args)}")

        if args.command == 'train':
            return run_train(args, training, pipeline)
        if args.command == 'evaluate':
            return run_evaluate(args, pipeline)
        if args.command == 'status':
            return run_status(pipeline)
        return run_data_stats(args)

    except Exception as e:
        logger.error(f"{args.command} failed with error: {str(e)}")
        logger.error(traceback.format_exc())
        return 1


if __name__ == "__main__":
    sys.exit(main())
