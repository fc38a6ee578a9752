#!/usr/bin/env python3
"""
Main entry point for the dijet mass scan pipeline.

Supports:
  - Full run (scan → histogram) from a YAML config (default)
  - Overriding the input dataset via --input
  - Shared or pre-created run directory via --run-dir
  - Rendering the modulo demo histogram via --histogram-demo
"""

import sys
import os
import logging
import argparse
import yaml

from domain.config import PipelineConfig
from pipeline.executor import PipelineExecutor
from services.analysis.histogram_plotter import HistogramPlotter, modulo_demo_values
from utils.paths import create_timestamped_run_dir, update_config_paths_with_run_dir


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        # stdout is reserved for the report when report_path is null
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def load_config(config_path: str) -> dict:
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Dijet mass scan pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # All enabled stages from config.yaml (default)
  python main.py

  # Scan another dataset with a custom config
  python main.py --config my_config.yaml --input data/tstar.root

  # Write into an existing run directory
  python main.py --run-dir ./output/dijet_scan_20260217

  # Render the modulo demo histogram
  python main.py --histogram-demo

  # Dry-run to validate config
  python main.py --dry-run
        """
    )

    parser.add_argument(
        "--config", type=str, default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--input", type=str, default=None,
        help="Dataset path, overrides scan_task_config.input_path"
    )
    parser.add_argument(
        "--run-dir", type=str, default=None,
        help="Pre-created run directory (skips timestamped dir creation)"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Validate configuration without running pipeline"
    )
    parser.add_argument(
        "--histogram-demo", action="store_true",
        help="Render the i %% 10 demo histogram into <run_dir>/histograms/test.png and exit"
    )

    return parser.parse_args(argv)


def run_histogram_demo(run_dir: str) -> int:
    """Fill i % 10 for i in 0..44 into 10 bins over [0, 10) and render it."""
    logger = logging.getLogger(__name__)

    plotter = HistogramPlotter(os.path.join(run_dir, "histograms"))
    result = plotter.fill_and_render(
        modulo_demo_values(),
        bin_count=10,
        range_min=0.0,
        range_max=10.0,
        title="i % 10",
        file_name="test.png",
        x_label="value",
    )
    logger.info(f"Demo counts: {result.counts.tolist()}")
    logger.info(f"✓ Demo histogram saved to {result.image_path}")
    return 0


def main(argv=None):
    """Run the configured stages; returns the process exit code."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    logger.info("Dijet mass scan")

    try:
        logger.info(f"Loading configuration from: {args.config}")
        if os.path.exists(args.config):
            config_dict = load_config(args.config)
        elif args.histogram_demo:
            config_dict = {}
        else:
            raise FileNotFoundError(f"Config file not found: {args.config}")

        if args.input:
            config_dict.setdefault("scan_task_config", {})
            config_dict["scan_task_config"]["input_path"] = args.input

        if args.run_dir:
            run_dir = args.run_dir
            os.makedirs(run_dir, exist_ok=True)
            logger.info(f"Using run directory: {run_dir}")
        else:
            run_metadata = config_dict.get('run_metadata') or {}
            run_name = run_metadata.get('run_name', 'dijet_scan')
            base_output = run_metadata.get('base_output_dir', './output')
            run_dir = create_timestamped_run_dir(base_output, run_name)
            logger.info(f"Created timestamped run directory: {run_dir}")

        if args.histogram_demo:
            return run_histogram_demo(run_dir)

        config_dict = update_config_paths_with_run_dir(config_dict, run_dir)

        config = PipelineConfig.from_dict(config_dict)
        logger.info(f"Config OK, writing under {run_dir}")

        if args.dry_run:
            enabled = [k for k, v in vars(config.tasks).items() if v]
            logger.info(f"Dry run: config is valid, would run {enabled} into {run_dir}")
            return 0

        executor = PipelineExecutor(config)
        final_context = executor.run()
        executor.save_run_stats(run_dir, final_context)

        if final_context.is_successful:
            logger.info("✓ Pipeline completed successfully")
            return 0
        else:
            logger.error(f"✗ Pipeline failed: {final_context.error_message}")
            return 1

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
