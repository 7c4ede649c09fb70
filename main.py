# main.py
import argparse
import logging
import os
import sys
from typing import List, Optional

from seqbench.core.config import SimpleConfigLoader
from seqbench.core.exceptions import ComponentNotFoundError, ConfigurationError, LifecycleError, SeqbenchError
from seqbench.core.logging_setup import LOG_LEVEL_STRINGS, setup_logging
from seqbench.runner import ExperimentRunner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run one train/test experiment of a classifier on a sequence dataset.",
        epilog="Classifier parameters may follow '--' as option tokens, e.g. -- -k 3 --distance_measure [ -p 1 ]",
    )
    parser.add_argument(
        "--config", type=str, default="config/config.yaml", help="Path to the configuration YAML file."
    )
    parser.add_argument("--classifier", type=str, default=None, help="Registered classifier name.")
    parser.add_argument("--train", type=str, default=None, help="Train dataset CSV file.")
    parser.add_argument("--test", type=str, default=None, help="Test dataset CSV file.")
    parser.add_argument("--dataset", type=str, default=None, help="Dataset name used in results.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the classifier.")
    parser.add_argument(
        "--estimate-train-error", action="store_true", help="Ask the classifier for a train-set estimate."
    )
    parser.add_argument("--train-time-limit", type=str, default=None, help="Train time contract, e.g. 10m.")
    parser.add_argument("--results-dir", type=str, default=None, help="Directory for results files.")
    parser.add_argument("--max-cases", type=int, default=None, help="Use only the first N cases of each file.")
    parser.add_argument(
        "--log-level", type=str, choices=['DEBUG', 'INFO', 'RESULT', 'WARNING', 'ERROR', 'CRITICAL'],
        help="Override the log level defined in the config file."
    )
    parser.add_argument("--log-file", type=str, default=None, help="Log file path.")
    parser.add_argument(
        "--quiet", action="store_true", help="Print bare console messages without timestamps or levels."
    )
    return parser


def split_option_tokens(argv: List[str]):
    """Everything after a bare '--' is classifier option tokens."""
    if '--' in argv:
        index = argv.index('--')
        return argv[:index], argv[index + 1:]
    return argv, []


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    own_args, option_tokens = split_option_tokens(argv)
    args = build_parser().parse_args(own_args)

    if not logging.getLogger().hasHandlers():
        minimal_level = LOG_LEVEL_STRINGS.get((args.log_level or 'WARNING').upper(), logging.WARNING)
        logging.basicConfig(level=minimal_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                            stream=sys.stdout)

    try:
        if os.path.exists(args.config):
            config_loader = SimpleConfigLoader(config_file_path=args.config)
        else:
            logger.warning(f"Config file '{args.config}' not found, using command-line settings only.")
            config_loader = SimpleConfigLoader.from_dict({})
    except ConfigurationError as e:
        logger.critical(f"Config error - {e}. Path: {args.config}")
        return 1

    overrides = {
        'classifier': args.classifier,
        'train': args.train,
        'test': args.test,
        'dataset': args.dataset,
        'seed': args.seed,
        'train_time_limit': args.train_time_limit,
        'results_dir': args.results_dir,
        'max_cases': args.max_cases,
    }
    for key, value in overrides.items():
        if value is not None:
            config_loader.set(f"experiment.{key}", value)
    if args.estimate_train_error:
        config_loader.set("experiment.estimate_train_error", True)

    setup_logging(config_loader, args.log_level, log_file=args.log_file, quiet=args.quiet)

    try:
        summary = ExperimentRunner(config_loader).run(option_tokens)
    except (ConfigurationError, ComponentNotFoundError, LifecycleError) as e:
        logger.critical(f"Experiment could not run: {e}")
        return 1
    except SeqbenchError as e:
        logger.critical(f"Experiment failed: {e}", exc_info=True)
        return 1

    logger.log(LOG_LEVEL_STRINGS['RESULT'], f"{summary['experiment']}: test accuracy {summary['test_accuracy']:.4f}")
    logger.log(LOG_LEVEL_STRINGS['RESULT'], f"Results written to {summary['results_dir']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
