"""Exception hierarchy for tracepage."""


class TracePageError(Exception):
    """Base exception for all tracepage errors."""

    pass


class ImageDecodeError(TracePageError):
    """Source image could not be read or has no pixels."""

    def __init__(self, source, reason):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot decode image '{source}': {reason}")


class PipelineError(TracePageError):
    """Unexpected failure inside a pipeline stage; no output was produced."""

    def __init__(self, stage, reason):
        self.stage = stage
        self.reason = reason
        super().__init__(f"Pipeline failed in {stage}: {reason}")
