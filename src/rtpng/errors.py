"""
Exceptions raised while processing a layered document.

All the errors derive from :py:class:`RtpngError`, so that a batch driver can
report a broken document and move on to the next one.
"""


class RtpngError(Exception):
    """Base class for all the errors of this package."""


class StructuralError(RtpngError):
    """Malformed or cyclic ancestor chain."""


class UnsupportedContentError(RtpngError):
    """Shape or text content that must be rasterized before processing."""


class MalformedColorError(RtpngError):
    """Invalid solid-color fill metadata."""


class RasterizationError(RtpngError):
    """Failure to obtain the pixels of a layer."""


class DocumentSizeError(RtpngError):
    """Canvas size outside of the allowed sizes."""


class QuantizeError(RtpngError):
    """Failure of the external lossy recompression."""


class ParseError(RtpngError):
    """Failure to parse the layered document."""
