#!/usr/bin/env python
"""
CLI entrypoint: run a single chain of the sleep data analysis.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from sleepdata_analysis.config.run_config import DEFAULT_VARIABLES, VARIABLE_UNIVERSE
from sleepdata_analysis.config.settings import check_settings, configure_logging, load_settings
from sleepdata_analysis.invariant_runtime import SleepAnalysisError
from sleepdata_analysis.simulation.orchestrator import RunOrchestrator


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run a single chain of the sleep data analysis (multilevel hidden Markov model)."
    )
    parser.add_argument(
        "iterations",
        type=int,
        help="Number of MCMC iterations used to sample the posterior distribution of the parameters.",
    )
    parser.add_argument(
        "burn_in",
        type=int,
        help="Number of samples discarded (burn-in samples) at the beginning of the chain.",
    )
    parser.add_argument(
        "variables",
        nargs="*",
        default=list(DEFAULT_VARIABLES),
        help="Three variable names to use in the analysis. Accepted: " + ", ".join(VARIABLE_UNIVERSE) + ".",
    )
    parser.add_argument("--config", default=None, help="Settings YAML (default: packaged default_run.yaml).")
    parser.add_argument("--sampler", default=None, help="Sampler target as 'package.module:function'.")
    parser.add_argument("--data-dir", default=None, help="Directory holding the input resources.")
    parser.add_argument("--output-dir", default=None, help="Directory for the result file.")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, ...).")
    return parser.parse_args(argv)


def run(iterations: int, burn_in: int, variables: List[str], **overrides) -> str:
    settings = load_settings(overrides.pop("config", None)).with_overrides(**overrides)
    check_settings(settings)
    log = configure_logging(settings.log_level)
    log.info("Application is starting up ...")
    path = RunOrchestrator(settings, logger=log).run(iterations, burn_in, variables)
    return str(path)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        path = run(
            args.iterations,
            args.burn_in,
            args.variables,
            config=args.config,
            sampler_target=args.sampler,
            data_dir=args.data_dir,
            output_dir=args.output_dir,
            log_level=args.log_level.upper() if args.log_level else None,
        )
    except SleepAnalysisError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
