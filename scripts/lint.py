#!/usr/bin/env python3
"""
Run flake8, mypy and black over the FetchSERP MCP server sources.
"""
import argparse
import logging
import subprocess
import sys
from pathlib import Path

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("fetchserp-lint")

ROOT_DIR = Path(__file__).parent.parent.absolute()

CHECK_DIRS = [
    ROOT_DIR / "src",
    ROOT_DIR / "tests",
    ROOT_DIR / "scripts",
]

MAX_LINE_LENGTH = 100

SKIP_PARTS = {".venv", "venv", "__pycache__", "build", "certs", "letsencrypt"}


def get_files_to_check(dirs):
    files = []
    for dir_path in dirs:
        if not dir_path.exists():
            logger.warning(f"Skipping missing directory {dir_path}")
            continue
        for path in sorted(dir_path.rglob("*.py")):
            if SKIP_PARTS.isdisjoint(path.parts):
                files.append(path)
    return files


def run_command(cmd, description):
    """Run a command and report whether it succeeded."""
    logger.info(f"{description}...")
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
    except FileNotFoundError:
        logger.error(f"{cmd[0]} is not installed; pip install -e '.[dev]'")
        return False
    except subprocess.CalledProcessError as e:
        logger.error(f"{description} failed")
        logger.error(e.stdout)
        logger.error(e.stderr)
        return False
    logger.info(f"{description} passed")
    return True


def run_linting(dirs, auto_fix=False):
    files = [str(f) for f in get_files_to_check(dirs)]
    logger.info(f"Found {len(files)} Python files to check")
    if not files:
        return 0

    if auto_fix:
        run_command(["black", *files], "Black formatting")

    results = [
        run_command(
            ["flake8", "--max-line-length", str(MAX_LINE_LENGTH), *files],
            "Flake8 linting",
        ),
        # src/ and tests/ are namespace packages
        run_command(
            ["mypy", "--explicit-package-bases", "--ignore-missing-imports", *files],
            "Mypy type checking",
        ),
        run_command(["black", "--check", *files], "Black format checking"),
    ]

    if all(results):
        logger.info("All linting checks passed")
        return 0
    logger.error("Some linting checks failed")
    return 1


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip())
    parser.add_argument(
        "--fix", action="store_true", help="Reformat files with black before checking"
    )
    parser.add_argument(
        "--dirs", nargs="+", help="Directories to check (default: src tests scripts)"
    )
    args = parser.parse_args()

    dirs = [Path(d) for d in args.dirs] if args.dirs else CHECK_DIRS
    return run_linting(dirs, auto_fix=args.fix)


if __name__ == "__main__":
    sys.exit(main())
