"""
PDF Render Service

Entry point for creating documents with the configured engine and options.
"""

from typing import Any, Callable, Mapping, Optional
import logging

from django.utils.module_loading import import_string

from . import conf
from .document import PdfDocument
from .dto import PdfResult
from .interfaces import IPdfEngine
from .options import Options


logger = logging.getLogger(__name__)


class PdfRenderService:
    """
    Factory for PdfDocument instances.

    Every document gets its own engine, built from PDFDOC['ENGINE'] and
    PDFDOC['OPTIONS'], so documents are never shared between requests.

    Usage:
        service = PdfRenderService()
        response = service.load_view('invoices/detail.html', {'invoice': invoice}).stream()

        result = service.render(
            template_name='invoices/detail.html',
            context={'invoice': invoice},
            filename='invoice_001.pdf'
        )
    """

    def __init__(self, engine_factory: Optional[Callable[[Options], IPdfEngine]] = None):
        """
        Initialize the service.

        Args:
            engine_factory: Callable building an engine from Options. If None,
                the class named by PDFDOC['ENGINE'] is used.
        """
        self.engine_factory = engine_factory or self._get_default_engine_factory()

    def make(self, **document_kwargs) -> PdfDocument:
        """
        Create a new, empty document.

        Args:
            **document_kwargs: Passed to PdfDocument (show_warnings, disk, ...)
        """
        engine = self.engine_factory(Options(conf.get_default_options()))
        return PdfDocument(engine, **document_kwargs)

    def load_html(self, html: str, encoding: Optional[str] = None) -> PdfDocument:
        return self.make().load_html(html, encoding)

    def load_file(self, path: str) -> PdfDocument:
        return self.make().load_file(path)

    def load_view(
        self,
        template_name: str,
        data: Optional[Mapping[str, Any]] = None,
        merge_data: Optional[Mapping[str, Any]] = None,
        encoding: Optional[str] = None,
        request=None
    ) -> PdfDocument:
        return self.make().load_view(template_name, data, merge_data, encoding, request=request)

    def render(
        self,
        template_name: str,
        context: dict,
        *,
        base_url: Optional[str] = None,
        filename: Optional[str] = None,
        request=None
    ) -> PdfResult:
        """
        Render a template to PDF.

        Args:
            template_name: Django template path (e.g., 'invoices/detail.html')
            context: Template context dictionary
            base_url: Base URL for resolving static assets (defaults to the
                configured ``base_url`` option)
            filename: Optional filename for the PDF (defaults to 'document.pdf')
            request: Optional HttpRequest for context processors

        Returns:
            PdfResult with PDF bytes and metadata

        Raises:
            Exception: If template rendering or PDF generation fails
        """
        try:
            document = self.make()
            if base_url is not None:
                document.set_option('base_url', base_url)

            pdf_bytes = document.load_view(template_name, context, request=request).output()

            result = PdfResult(
                pdf_bytes=pdf_bytes,
                filename=filename or 'document.pdf',
                content_type='application/pdf'
            )

            logger.info(
                f"Successfully generated PDF: {result.filename} "
                f"({len(result.pdf_bytes)} bytes)"
            )

            return result

        except Exception as e:
            logger.error(
                f"Failed to render PDF for template {template_name}: {e}",
                exc_info=True
            )
            raise

    def _get_default_engine_factory(self) -> Callable[[Options], IPdfEngine]:
        """
        Get the engine class configured in PDFDOC['ENGINE'].

        Returns:
            IPdfEngine subclass (called with Options)
        """
        return import_string(conf.get_setting('ENGINE'))


def load_html(html: str, encoding: Optional[str] = None) -> PdfDocument:
    """Create a document from an HTML string with the default service"""
    return PdfRenderService().load_html(html, encoding)


def load_file(path: str) -> PdfDocument:
    """Create a document from an HTML file with the default service"""
    return PdfRenderService().load_file(path)


def load_view(
    template_name: str,
    data: Optional[Mapping[str, Any]] = None,
    merge_data: Optional[Mapping[str, Any]] = None,
    encoding: Optional[str] = None,
    request=None
) -> PdfDocument:
    """Create a document from a Django template with the default service"""
    return PdfRenderService().load_view(template_name, data, merge_data, encoding, request=request)
