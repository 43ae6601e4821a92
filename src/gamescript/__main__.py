"""Allow running as python -m gamescript."""

from gamescript.cli import app


def main() -> None:
    app()


main()
