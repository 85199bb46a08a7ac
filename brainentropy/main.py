"""
main
====

Command line entry point for metastate series complexity.  Each
positional argument is one session: a ``.npy`` file or a delimited
text file (``.csv``, ``.tsv`` or whitespace separated ``.txt``)
holding a time points × features matrix.  Sessions are named after
their file stems and analysed together:

1. Load every session matrix.
2. Run :class:`brainentropy.metastate.MetastateAnalyzer` with the
   requested clustering and LZ76 options.
3. Print the per-session scores and write all results to the output
   directory with :func:`brainentropy.metastate.io.save_result`.

Example
-------
python -m brainentropy.main sub-01.npy sub-02.npy --output results --seed 0
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

import numpy as np

from .metastate import MetastateAnalyzer, MetastateConfig
from .metastate.config import LZ_MODES

logger = logging.getLogger(__name__)

_DELIMITERS = {'.csv': ',', '.tsv': '\t'}


def load_session(path: str | Path) -> np.ndarray:
    """Load one session matrix from a ``.npy`` or delimited text file."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Session file does not exist: {p}")
    if p.suffix == '.npy':
        return np.load(p)
    return np.loadtxt(p, delimiter=_DELIMITERS.get(p.suffix), ndmin=2)


def run_pipeline(paths: list[str], config: MetastateConfig) -> None:
    sessions: dict[str, np.ndarray] = {}
    for path in paths:
        name = Path(path).stem
        if name in sessions:
            raise SystemExit(f"Duplicate session name '{name}'")
        sessions[name] = load_session(path)
        logger.info("Loaded session %s with shape %s", name, sessions[name].shape)
    result = MetastateAnalyzer(config).analyse(sessions)
    print(result.table[['entropy']].to_string())
    if config.output_dir is not None:
        print(f"Results written to {config.output_dir}")


def parse_args(args: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute metastate series complexity (LZ76) per session")
    parser.add_argument('sessions', nargs='+', help='Session matrices (.npy, .csv, .tsv or .txt)')
    parser.add_argument('--output', type=str, default=None, help='Directory for result files')
    parser.add_argument('--replicates', type=int, default=200, help='Number of K-means replicates')
    parser.add_argument('--max-iter', type=int, default=1000, help='Maximum K-means iterations per replicate')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for K-means initialisation')
    parser.add_argument('--no-parallel', action='store_true', help='Run K-means replicates sequentially')
    parser.add_argument('--jobs', type=int, default=None, help='Number of parallel workers (default: all cores)')
    parser.add_argument('--lz-mode', choices=LZ_MODES, default='exhaustive', help='LZ76 parsing mode')
    parser.add_argument('--no-normalize', action='store_true', help='Report raw LZ76 phrase counts')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser.parse_args(args)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    config = MetastateConfig(
        n_replicates=args.replicates,
        max_iter=args.max_iter,
        parallel=not args.no_parallel,
        n_jobs=args.jobs,
        random_state=args.seed,
        keepdata=False,
        lz_mode=args.lz_mode,
        normalize=not args.no_normalize,
        output_dir=args.output,
    )
    try:
        config.validate()
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    run_pipeline(args.sessions, config)


if __name__ == '__main__':
    main()
