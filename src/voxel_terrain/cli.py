"""Command-line entry point for terrain generation."""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from voxel_terrain.generate import generate_terrain
from voxel_terrain.pipeline import GeneratorConfig
from voxel_terrain.render import render_png


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    mapping: Dict[str, Any] = {}
    if args.config:
        mapping = GeneratorConfig.from_file(args.config).to_dict()
    for key, value in (("map_size", args.size), ("max_height", args.max_height), ("seed", args.seed)):
        if value is not None:
            mapping[key] = value
    if args.log_dir:
        mapping["log_dir"] = args.log_dir
    return GeneratorConfig.from_mapping(mapping)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser("voxel_terrain")
    parser.add_argument("--size", type=int, default=None, help="Map width and depth in cells")
    parser.add_argument("--max-height", type=float, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=str, default=None, help="YAML or JSON config file")
    parser.add_argument("--out", type=str, default="out/terrain.txt", help="Voxel array output path")
    parser.add_argument("--preview", type=str, default=None, help="Optional PNG preview path")
    parser.add_argument("--log-dir", type=str, default=None)
    args = parser.parse_args(argv)

    config = build_config(args)

    t0 = time.time()
    result = generate_terrain(config)
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(result.voxel_array, encoding="utf-8")

    if args.preview:
        preview_path = Path(args.preview)
        preview_path.parent.mkdir(parents=True, exist_ok=True)
        render_png(result.grid).save(preview_path)

    metadata = {
        "seed": config.seed,
        "config": config.to_dict(),
        "dimensions": list(result.grid.dimensions()),
        "stats": result.stats,
    }
    with open(out_path.with_suffix(".json"), "w", encoding="utf-8") as fh:
        json.dump(metadata, fh, indent=2)

    elapsed = time.time() - t0
    print(f"Wrote {out_path} and {out_path.with_suffix('.json')} in {elapsed:.2f}s")


if __name__ == "__main__":
    main()
