"""
Data Transfer Objects for pdfdoc
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class RenderResult:
    """
    Result of a single engine render call.

    Warnings are scoped to the call that produced them.
    """

    warnings: List[str] = field(default_factory=list)
    page_count: int = 0

    @property
    def has_warnings(self) -> bool:
        return any(self.warnings)


@dataclass
class PdfResult:
    """
    Result of PDF rendering operation.

    Contains the PDF bytes and metadata for HTTP responses.
    """

    pdf_bytes: bytes
    filename: str
    content_type: str = "application/pdf"

    def __len__(self) -> int:
        """Return the size of PDF in bytes"""
        return len(self.pdf_bytes)
