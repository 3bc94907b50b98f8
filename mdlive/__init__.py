"""mdlive: serve a directory of markdown documents with live re-rendering."""

from . import core
from .core import Application
from .mdlive_app import MdLiveApp

__all__ = [
    "core",
    "Application",
    "MdLiveApp",
]

__version__ = "0.1.0"
