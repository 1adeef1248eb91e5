"""Exceptions raised by the stitching pipeline."""


class StitchError(RuntimeError):
    """Base class for every fatal stitching failure."""


class DecodeError(StitchError):
    """A capture payload could not be parsed as a raster image."""


class EmptyInputError(StitchError):
    """No captures were supplied, or none of them produced visible content."""


class SurfaceAllocationError(StitchError):
    """The output surface could not be allocated."""


class EncodingError(StitchError):
    """The composited surface could not be encoded to PNG."""
