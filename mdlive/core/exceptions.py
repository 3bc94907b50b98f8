"""Exception types raised by the build pipeline."""


class MdLiveError(Exception):
    """Base class for all mdlive errors."""


class SourceReadError(MdLiveError):
    """A source document could not be read."""


class PipelineClosedError(MdLiveError):
    """The pipeline has been shut down and accepts no more work."""


class WatcherError(MdLiveError):
    """A change watcher backend failed and cannot continue."""


class RenderError(MdLiveError):
    """A render backend could not turn a document into HTML."""
