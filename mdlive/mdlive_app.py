"""Command line entry point.

Usage::

    mdlive root_dir=./docs
    mdlive root_dir=./docs config=cli
    mdlive root_dir=./docs config=headless file_watcher.backend=watchdog
"""

import sys

from .core import Application


class MdLiveApp(Application):
    """Application configured from command line style ``key=value`` arguments."""

    def __init__(self, *args, **kwargs):
        args = tuple(self.normalize_arg(arg) for arg in args)
        super().__init__(*args, **kwargs)

    @staticmethod
    def normalize_arg(arg: str) -> str:
        """A lone positional path is shorthand for ``root_dir=<path>``."""
        if "=" not in arg and not arg.startswith("-") and ("/" in arg or arg in (".", "..")):
            return f"root_dir={arg}"
        return arg


def main():
    """Main entry point for running mdlive from the command line."""
    app = MdLiveApp(*sys.argv[1:])
    app.run_service()


if __name__ == "__main__":
    main()
