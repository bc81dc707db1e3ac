"""Entry point for ``python -m dockside``."""

from dockside.cli.main import main


if __name__ == "__main__":
    main()
