"""Train a variable-order context model and evaluate it on held-out streams.

Usage (from repo root):
    python -m runners.run_predict -f data/traces/train.dat -o 3 --logloss data/traces/test.dat
    python -m runners.run_predict -f data/traces/train.dat -o 1 -p data/traces/test.dat \
        --neighbors data/traces/neighbors.json --input-type binboxstrings -v
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Sequence

import numpy as np

from ppmpredict.config import (
    DEFAULT_MAX_ORDER,
    DEFAULT_MAX_TEST_LENGTH,
    EscapePolicy,
    EvaluationConfig,
    ModelConfig,
    Representation,
)
from ppmpredict.data.neighbors import NeighborOracle
from ppmpredict.data.streams import iter_training_symbols, load_symbols, load_test_symbols
from ppmpredict.evaluation.harness import (
    LogLossResult,
    PredictionTestResult,
    evaluate_logloss,
    evaluate_predictions,
)
from ppmpredict.model.prediction import PredictionEngine
from ppmpredict.model.store import ContextModelStore
from ppmpredict.sanity_checks.compression_check import (
    format_compression_report,
    summarize_compression,
)
from ppmpredict.training.trainer import Trainer


DEFAULT_TRAIN_PATH = "test.inp"

logger = logging.getLogger("runners.run_predict")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Train a variable-order context model and score its predictions."
    )
    parser.add_argument("-f", "--train-path", type=str, default=DEFAULT_TRAIN_PATH)
    parser.add_argument("-o", "--order", type=int, default=DEFAULT_MAX_ORDER)
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument(
        "--logloss",
        type=str,
        default=None,
        metavar="TEST_PATH",
        help="Report the average log-loss (bits) on this test stream.",
    )
    parser.add_argument(
        "-p",
        "--predict",
        type=str,
        default=None,
        metavar="TEST_PATH",
        help="Run the paired prediction test on this test stream.",
    )
    parser.add_argument(
        "--input-type",
        choices=[r.value for r in Representation],
        default=Representation.NONE.value,
        help="Input representation; only changes diagnostic labels.",
    )
    parser.add_argument(
        "--neighbors",
        type=str,
        default=None,
        help="JSON adjacency table used for neighbor soft scoring.",
    )
    parser.add_argument(
        "--escape-policy",
        choices=[p.value for p in EscapePolicy],
        default=EscapePolicy.DISTINCT.value,
    )
    parser.add_argument("--alphabet-size", type=int, default=None)
    parser.add_argument("--max-test-length", type=int, default=DEFAULT_MAX_TEST_LENGTH)
    parser.add_argument(
        "--compression-report",
        action="store_true",
        help="With --logloss, compare the model's code length to zlib/lzma/bz2.",
    )
    return parser


def _print_prediction_trace(result: PredictionTestResult, representation: Representation) -> None:
    print(
        "expected symbol, predicted symbol, # predictions, depth, probability, "
        f"representation {representation.label}, is_neighbor"
    )
    for position in result.positions:
        prediction = position.result
        for candidate, is_neighbor in zip(prediction.candidates, position.neighbor_flags):
            print(
                f"0x{position.expected:04x}, 0x{candidate.symbol:04x}, "
                f"{prediction.num_predictions}, {prediction.depth}, "
                f"{candidate.numerator / prediction.denominator:f}, "
                f"{position.kind.value}, {'YES' if is_neighbor else 'NO'}"
            )
    print(
        f"max_order={result.max_order}, number of tests={result.num_scored}, "
        f"number correct={result.num_correct}, % correct = {result.percent_correct:.1f}, "
        f"number neighbors={result.num_neighbor_correct}"
    )


def format_prediction_summary(result: PredictionTestResult) -> str:
    return (
        f"{result.max_order}, {result.num_correct}, {result.num_scored}, "
        f"{result.percent_correct:.1f}, {result.num_fallback_correct}, "
        f"{result.num_fallback_total}, {result.num_multi_prediction}, "
        f"{result.num_neighbor_correct}"
    )


def format_logloss_line(result: LogLossResult) -> str:
    return f"{result.max_order}, {result.mean_loss:f}"


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    model_config = ModelConfig(
        max_order=args.order,
        escape_policy=EscapePolicy(args.escape_policy),
        alphabet_size=args.alphabet_size,
    )
    eval_config = EvaluationConfig(
        max_order=args.order,
        representation=Representation(args.input_type),
        verbose=args.verbose,
        max_test_length=args.max_test_length,
    )
    try:
        model_config.validate()
        eval_config.validate()
    except ValueError as exc:
        parser.error(str(exc))

    if args.order % 2 == 0:
        logger.warning(
            "max_order %d is even; paired (context, target) streams expect an odd order.",
            args.order,
        )

    # Every source is opened before training so a bad path leaves no partial output.
    try:
        train = load_symbols(args.train_path)
        logloss_test = (
            load_test_symbols(args.logloss, max_length=args.max_test_length)
            if args.logloss
            else None
        )
        predict_test = (
            load_test_symbols(args.predict, max_length=args.max_test_length)
            if args.predict
            else None
        )
        oracle = NeighborOracle.from_json(args.neighbors) if args.neighbors else None
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1)

    logger.info("Training on file %s", Path(args.train_path))
    store = ContextModelStore(model_config)
    Trainer(store).train(iter_training_symbols(train))
    store.freeze()
    engine = PredictionEngine(store)

    if predict_test is not None:
        logger.info("Testing on file %s (%d symbols)", args.predict, len(predict_test))
        result = evaluate_predictions(
            engine,
            predict_test,
            config=eval_config,
            oracle=oracle,
        )
        if args.verbose:
            _print_prediction_trace(result, eval_config.representation)
        else:
            print(format_prediction_summary(result))

    if logloss_test is not None:
        loss = evaluate_logloss(engine, logloss_test, config=eval_config)
        print(format_logloss_line(loss))
        if args.verbose:
            logger.info(
                "Log-loss: scored=%d clamped=%d depth_counts=%s",
                loss.num_scored,
                loss.num_clamped,
                loss.depth_counts,
            )
        if args.compression_report:
            summary = summarize_compression(
                np.asarray(logloss_test, dtype=np.int64), model_bits=loss.total_bits
            )
            for line in format_compression_report(summary):
                print(line)


if __name__ == "__main__":
    main()
