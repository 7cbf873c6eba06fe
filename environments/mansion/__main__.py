"""Entry point for playing the mansion from a terminal."""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
