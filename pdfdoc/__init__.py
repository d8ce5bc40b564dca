"""
pdfdoc

Renders HTML, HTML files and Django templates to PDF with WeasyPrint.
Supports download/inline responses, storage backends, encryption and
shaping of right-to-left (Arabic) text.
"""

from .document import PdfDocument
from .dto import PdfResult, RenderResult
from .exceptions import PdfError, RenderWarning, UnsupportedCapability, UnsupportedOperation
from .interfaces import ICanvas, IPdfEngine, chainable
from .options import Options
from .service import PdfRenderService, load_file, load_html, load_view

__all__ = [
    'PdfDocument',
    'PdfRenderService',
    'PdfResult',
    'RenderResult',
    'Options',
    'IPdfEngine',
    'ICanvas',
    'chainable',
    'PdfError',
    'RenderWarning',
    'UnsupportedCapability',
    'UnsupportedOperation',
    'load_html',
    'load_file',
    'load_view',
]
