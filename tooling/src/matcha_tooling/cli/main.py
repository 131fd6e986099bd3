"""Main CLI entry point for matcha tooling."""

import sys

from matcha_tooling.cli import bind_cmd


def _usage() -> None:
    print("Usage: matcha <command> [args...]", file=sys.stderr)
    print("Commands:", file=sys.stderr)
    print(
        "  bind [-target T] [-o DIR] [--binary-only] [pkg...]  - Build iOS/Android bundles",
        file=sys.stderr,
    )
    print(
        "  build [-target T] [pkg...]                          - Build the bridge binary into the matcha package",
        file=sys.stderr,
    )


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        _usage()
        sys.exit(1)

    command = sys.argv[1]

    if command == "bind":
        bind_cmd.run_bind_argv()
    elif command == "build":
        bind_cmd.run_bind_argv(binary=True)
    elif command in ("-h", "--help", "help"):
        _usage()
        sys.exit(0)
    else:
        print(f"Error: Unknown command: {command}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
