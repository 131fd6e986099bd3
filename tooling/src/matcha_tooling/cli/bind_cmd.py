"""`matcha bind` and `matcha build`: cross-compile Go packages into iOS and Android bundles."""

import logging
import sys
from pathlib import Path

from matcha_tooling.bind.pipeline import BindOptions
from matcha_tooling.bind.pipeline import run as run_bind


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _parser(prog: str, binary: bool):
    import argparse

    desc = (
        "Build the matcha bridge binary into the matcha package directory"
        if binary
        else "Bind Go packages into an iOS fat library and an Android AAR"
    )
    ap = argparse.ArgumentParser(prog=prog, description=desc)
    ap.add_argument(
        "packages",
        nargs="*",
        help="Go packages to bind (default: current directory)",
    )
    ap.add_argument(
        "-target",
        "--target",
        dest="targets",
        default="",
        help='Space-separated targets, e.g. "ios android/arm64" (default: android ios)',
    )
    if not binary:
        ap.add_argument(
            "-o",
            "--output",
            type=Path,
            default=None,
            help="Output directory (default: Matcha-iOS)",
        )
        ap.add_argument(
            "--binary-only",
            action="store_true",
            help="Only install the compiled binaries, not the support files",
        )
    ap.add_argument(
        "-work",
        "--work",
        action="store_true",
        help="Print the working directory and keep it after exit",
    )
    ap.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-architecture go build timeout in seconds (default: none)",
    )
    ap.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Bind layout overrides (default: ./matcha.yaml if present)",
    )
    ap.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Directory packages are resolved from (default: cwd)",
    )
    ap.add_argument("-v", "-x", "--verbose", action="store_true", help="Log commands and environments")
    return ap


def run_bind_argv(argv: list[str] | None = None, *, binary: bool = False) -> None:
    """Parse argv and run bind (or build when binary=True). Exits with the result code."""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []  # skip 'matcha bind'
    ap = _parser("matcha build" if binary else "matcha bind", binary)
    args = ap.parse_args(argv)
    configure_logging(args.verbose)
    options = BindOptions(
        targets=args.targets,
        output_dir=None if binary else args.output,
        binary_only=False if binary else args.binary_only,
        keep_work=args.work,
        packages=list(args.packages),
        timeout=args.timeout,
        config=args.config,
        project_root=args.project_root,
    )
    sys.exit(run_bind(options, binary=binary))
