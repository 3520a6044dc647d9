"""Command line entry point for rpropnet training runs."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

from rpropnet.core.network import KERNELS
from rpropnet.training import pipelines
from rpropnet.training.epochs import ALGORITHMS


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "error": result.error,
        "converged": result.converged,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    if result.class_error is not None:
        payload["class_error"] = result.class_error
    if result.plot_path:
        payload["plot"] = result.plot_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-rprop",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument(
        "--algorithm", choices=sorted(ALGORITHMS), help="Override the training algorithm"
    )
    parser.add_argument("--seed", type=int, help="Seed used for weight initialisation")
    parser.add_argument("--max-epochs", type=int, help="Override the epoch budget")
    parser.add_argument("--max-error", type=float, help="Override the target mean error")
    parser.add_argument("--kernel", choices=KERNELS, help="Dot-product kernel to use")
    parser.add_argument("--enable-plots", action="store_true", help="Write an error curve plot")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log training progress")
    return parser.parse_args(argv)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = dict(pipelines.read_config_file(args.config))
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    train_cfg = config.setdefault("train", {})
    if args.algorithm:
        train_cfg["algorithm"] = args.algorithm
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.max_epochs is not None:
        train_cfg["max_epochs"] = int(args.max_epochs)
    if args.max_error is not None:
        train_cfg["max_error"] = float(args.max_error)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.kernel:
        config.setdefault("model", {})["kernel"] = args.kernel

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)

    if isinstance(result, list):
        for item in result:
            print(_format_result(item))
    else:
        print(_format_result(result))


if __name__ == "__main__":
    main()
