"""
Exceptions for the PDF document framework.

Engine and storage failures are not represented here: they propagate
unmodified from WeasyPrint and from Django's storage backends.
"""


class PdfError(Exception):
    """Base exception for all pdfdoc errors."""
    pass


class UnsupportedOperation(PdfError, AttributeError):
    """
    Raised when a method exists neither on the document nor on its engine.

    Subclasses AttributeError so that ``hasattr()`` keeps working on
    PdfDocument instances.
    """
    pass


class UnsupportedCapability(PdfError):
    """
    Raised when the active engine or canvas cannot perform an operation.

    Example:
        Requesting encryption while the ``weasyprint`` canvas is active.
    """
    pass


class RenderWarning(PdfError):
    """
    Raised after rendering when warnings are escalated (``SHOW_WARNINGS``).

    The message holds every warning, newline-joined in report order.
    """

    def __init__(self, warnings):
        self.warnings = list(warnings)
        super().__init__("\n".join(self.warnings))
