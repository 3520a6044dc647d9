"""Pipeline assembly: build a network from a config, train it and write artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..core.kernels import check_kernel
from ..core.network import Network, create_network
from ..core.types import RunResult
from ..data import get_dataset
from ..data.registry import Dataset
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from .epochs import resolve_algorithm
from .trainer import Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-rprop": {
        "data": {"name": "xor", "options": {}},
        "model": {"hidden": [2], "kernel": "vectorized"},
        "train": {
            "algorithm": "rprop",
            "max_epochs": 1000,
            "max_error": 0.01,
            "seed": 7,
            "run_dir": "runs/xor-rprop",
            "enable_plots": False,
        },
    },
    "xor-gd": {
        "data": {"name": "xor", "options": {}},
        "model": {"hidden": [3], "kernel": "vectorized", "learning_rate": 4.0},
        "train": {
            "algorithm": "gd",
            "max_epochs": 2000,
            "max_error": 0.01,
            "seed": 7,
            "online": True,
            "run_dir": "runs/xor-gd",
            "enable_plots": False,
        },
    },
    "blobs-rprop": {
        "data": {"name": "blobs", "options": {"n_points": 64, "seed": 0}},
        "model": {"hidden": [4], "kernel": "vectorized"},
        "train": {
            "algorithm": "rprop",
            "max_epochs": 300,
            "max_error": 0.001,
            "seed": 1,
            "classify": True,
            "test_data": {"name": "blobs", "options": {"n_points": 32, "seed": 100}},
            "run_dir": "runs/blobs-rprop",
            "enable_plots": False,
        },
    },
    "sine-rprop": {
        "data": {"name": "sine", "options": {"n_points": 32, "seed": 0}},
        "model": {"hidden": [8], "kernel": "vectorized"},
        "train": {
            "algorithm": "rprop",
            "max_epochs": 2000,
            "max_error": 0.0005,
            "seed": 3,
            "run_dir": "runs/sine-rprop",
            "enable_plots": False,
        },
    },
    "xor-seed-sweep": {
        "sweep": {"seeds": [0, 1, 2, 3, 4], "algorithms": ["rprop"]},
        "data": {"name": "xor", "options": {}},
        "model": {"hidden": [2], "kernel": "vectorized"},
        "train": {
            "max_epochs": 1000,
            "max_error": 0.01,
            "run_dir": "runs/xor-sweep",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def read_config_file(path: Path) -> Mapping[str, object]:
    """Load a JSON or YAML config mapping from ``path``."""

    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Dict[str, object]:
    file_presets = _file_presets()
    if name in file_presets:
        return dict(file_presets[name])
    try:
        return deepcopy(dict(_PRESETS[name]))
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def run_pipeline(config: Mapping[str, object]) -> RunResult | List[RunResult]:
    if "sweep" in config:
        return _run_sweep(config)
    return _train_single(config)


def _run_sweep(config: Mapping[str, object]) -> List[RunResult]:
    sweep_cfg = config["sweep"]
    base_train = dict(config.get("train", {}))
    base_dir = Path(base_train.get("run_dir", "runs/sweep"))
    algorithms = sweep_cfg.get("algorithms") or [base_train.get("algorithm", "rprop")]
    seeds = sweep_cfg.get("seeds") or [base_train.get("seed", 0)]
    results: List[RunResult] = []
    for algorithm in algorithms:
        for seed in seeds:
            cfg = deepcopy(dict(config))
            cfg.pop("sweep", None)
            train_cfg = cfg.setdefault("train", {})
            train_cfg["algorithm"] = algorithm
            train_cfg["seed"] = int(seed)
            train_cfg["run_dir"] = str(base_dir / f"{algorithm}-s{seed}")
            results.append(_train_single(cfg))
    return results


def build_network(model_cfg: Mapping[str, object], dataset: Dataset, seed: int) -> Network:
    """Create the network described by ``model_cfg`` for ``dataset``.

    ``hidden`` lists hidden layer sizes from the input side, as configs
    usually read; the network itself is indexed output first.
    """

    hidden = [int(h) for h in model_cfg.get("hidden", [])]
    d_in = int(model_cfg.get("d_in", dataset.input_units))
    d_out = int(model_cfg.get("d_out", dataset.output_units))
    if d_in != dataset.input_units:
        raise ValueError(f"Configured d_in={d_in} but dataset has {dataset.input_units}")
    if d_out != dataset.output_units:
        raise ValueError(f"Configured d_out={d_out} but dataset has {dataset.output_units}")

    units = [d_out] + list(reversed(hidden)) + [d_in]
    net = create_network(units, rng=np.random.default_rng(seed))
    net.kernel = check_kernel(str(model_cfg.get("kernel", net.kernel)))
    if "learning_rate" in model_cfg:
        net.learning_rate = float(model_cfg["learning_rate"])
    rprop_cfg = dict(model_cfg.get("rprop", {}))
    net.rprop_nplus = float(rprop_cfg.get("nplus", net.rprop_nplus))
    net.rprop_nminus = float(rprop_cfg.get("nminus", net.rprop_nminus))
    net.rprop_maxupdate = float(rprop_cfg.get("maxupdate", net.rprop_maxupdate))
    net.rprop_minupdate = float(rprop_cfg.get("minupdate", net.rprop_minupdate))
    return net


def _train_single(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])
    model_cfg = dict(config.get("model", {}))
    train_cfg = dict(config.get("train", {}))

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    test_set = None
    if train_cfg.get("test_data"):
        test_cfg = dict(train_cfg["test_data"])
        test_set = get_dataset(str(test_cfg["name"]), **dict(test_cfg.get("options", {})))

    seed = int(train_cfg.get("seed", 0))
    algorithm = str(train_cfg.get("algorithm", "rprop"))
    resolve_algorithm(algorithm)
    max_epochs = int(train_cfg.get("max_epochs", 1000))
    max_error = float(train_cfg.get("max_error", 0.01))
    classify = bool(train_cfg.get("classify", dataset.task_type == "classification"))
    epoch_options = {}
    if algorithm == "gd" and "online" in train_cfg:
        epoch_options["online"] = bool(train_cfg["online"])

    run_dir = _resolve_run_dir(train_cfg, dataset.name, algorithm)
    run_dir.mkdir(parents=True, exist_ok=True)

    net = build_network(model_cfg, dataset, seed)
    _print_startup_summary(
        dataset_name=dataset.name,
        units=[layer.units for layer in net.layers],
        algorithm=algorithm,
        kernel=net.kernel,
        max_epochs=max_epochs,
        max_error=max_error,
        weights=net.count_weights(),
    )

    train_jsonl = JsonlSink(run_dir / "metrics_train.jsonl", split="train", seed=seed, algorithm=algorithm)
    train_csv = CsvSink(run_dir / "metrics_train.csv", split="train")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    split_loggers: Dict[str, Sequence[object]] = {"train": [train_jsonl, train_csv, plots]}
    if test_set is not None:
        split_loggers["test"] = [
            JsonlSink(run_dir / "metrics_test.jsonl", split="test", seed=seed, algorithm=algorithm),
            CsvSink(run_dir / "metrics_test.csv", split="test"),
        ]

    trainer = Trainer(net, algorithm=algorithm)
    with net:
        result = trainer.run(
            dataset.inputs,
            dataset.desired,
            max_epochs=max_epochs,
            max_error=max_error,
            test_inputs=None if test_set is None else test_set.inputs,
            test_desired=None if test_set is None else test_set.desired,
            eval_every=int(train_cfg.get("eval_every", 1)),
            classify=classify,
            split_loggers=split_loggers,
            epoch_options=epoch_options,
        )
        network_meta = net.describe()
    plot_path = plots.close()

    outcome = {
        "epochs": result.epochs,
        "error": result.error,
        "converged": result.converged,
        "test_error": result.test_error,
        "class_error": result.class_error,
    }
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=config,
        network=network_meta,
        dataset_provenance=dataset.provenance,
        result=outcome,
    )
    (run_dir / "config.json").write_text(json.dumps(json.loads(json.dumps(config)), indent=2))

    return RunResult(
        epochs=result.epochs,
        error=result.error,
        converged=result.converged,
        metrics_path=str(train_jsonl.path),
        manifest_path=manifest,
        class_error=result.class_error,
        plot_path=plot_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str, algorithm: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset / algorithm


def _print_startup_summary(
    *,
    dataset_name: str,
    units: Sequence[int],
    algorithm: str,
    kernel: str,
    max_epochs: int,
    max_error: float,
    weights: int,
) -> None:
    print("=== rpropnet run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Units (o->i)  : {list(units)}")
    print(f"Algorithm     : {algorithm}")
    print(f"Kernel        : {kernel}")
    print(f"Max epochs    : {max_epochs}")
    print(f"Max error     : {max_error}")
    print(f"Weights       : {weights}")
    print("====================")


__all__ = ["build_network", "load_preset", "presets", "read_config_file", "run_pipeline"]
