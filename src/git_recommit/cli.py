from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .authors import default_picker
from .config import load_recommit_config
from .models import RecommitOptions
from .run import run_recommit


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-recommit",
        description="Rewrite a branch's history onto recommited/<branch> with authors drawn from a role-based pool.",
    )
    parser.add_argument("repo", nargs="?", type=Path, default=Path("."), help="Path to the git repository (default: current directory).")
    parser.add_argument("--branch", type=str, default="master", help="Source branch to rewrite (default: master).")
    parser.add_argument("--change-time", action="store_true", help="Shift author/committer dates six months forward.")
    parser.add_argument("--keep-author", action="store_true", help="Keep original authors and dates; only rebuild the chain.")
    parser.add_argument("--config", type=Path, default=Path("config.json"), help="Path to config.json.")
    parser.add_argument("--authors", type=Path, default=None, help="Path to an authors.json pool (overrides the config).")
    parser.add_argument("--seed", type=int, default=None, help="Seed for author picking (repeatable runs).")
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _build_parser().parse_args(argv)

    try:
        config = load_recommit_config(args.config, authors_path=args.authors)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    options = RecommitOptions(
        branch=str(args.branch or "master"),
        change_time=bool(args.change_time),
        keep_author=bool(args.keep_author),
    )
    return run_recommit(repo=args.repo, options=options, config=config, picker=default_picker(args.seed))


if __name__ == "__main__":
    raise SystemExit(main())
