"""Thin shim for IDEs and direct execution."""

from blog_store.cli import main

if __name__ == "__main__":
    import sys

    # Default to debug logging when run directly; explicit flags still win.
    if not any(arg.startswith("--log-level") for arg in sys.argv):
        sys.argv.extend(["--log-level", "DEBUG"])

    sys.exit(main())
