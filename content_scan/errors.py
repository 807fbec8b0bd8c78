"""Exception classes for content scanning.

Collaborators and classifiers raise these; the component entry points catch
them once and turn them into degraded results, so none of them crosses the
public API.
"""


class ContentScanError(Exception):
    """Base content scan exception."""

    def __init__(self, message: str, url: str | None = None):
        self.message = message
        self.url = url
        super().__init__(message)


class DecodeFailure(ContentScanError):
    """Image could not be fetched or decoded."""

    pass


class OcrFailure(ContentScanError):
    """OCR engine failed to extract text."""

    pass


class OcrTimeout(OcrFailure):
    """OCR did not finish within the configured budget."""

    pass


class ClassifierFault(ContentScanError):
    """Unexpected internal error while scoring."""

    pass
