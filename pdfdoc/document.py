"""
PDF Document

Stateful façade over an IPdfEngine: load markup, render lazily, and hand
the bytes to an output sink (bytes, storage, or HTTP response).
"""

from functools import wraps
from typing import Any, Mapping, Optional, Sequence, Union
import logging

from django.http import HttpResponse
from django.template.loader import render_to_string

from . import conf, storage
from .exceptions import RenderWarning, UnsupportedCapability, UnsupportedOperation
from .interfaces import IPdfEngine, lookup_chainable
from .options import Options
from .preprocessing import preprocess_html
from .responses import pdf_download_response, pdf_inline_response


logger = logging.getLogger(__name__)


class PdfDocument:
    """
    A single PDF rendering unit.

    The document is either unrendered or rendered. Loading new content
    always returns it to unrendered; output methods render only when
    needed. One instance per request: there is no locking.

    Usage:
        document = PdfDocument(WeasyPrintEngine())
        response = document.load_view('invoices/detail.html', {'invoice': invoice}).download('invoice.pdf')

    Methods not defined here are forwarded to the engine, e.g.
    ``document.set_paper('a4', 'landscape')``. Engine methods marked
    ``@chainable`` return the document instead of the engine.
    """

    def __init__(
        self,
        engine: IPdfEngine,
        *,
        show_warnings: Optional[bool] = None,
        convert_entities: Optional[bool] = None,
        shape_rtl: Optional[bool] = None,
        disk: Optional[str] = None
    ):
        """
        Initialize the document.

        Args:
            engine: Engine instance, owned by this document
            show_warnings: Raise RenderWarning on render warnings
                (defaults to PDFDOC['SHOW_WARNINGS'])
            convert_entities: Replace currency glyphs with entities
                (defaults to PDFDOC['CONVERT_ENTITIES'])
            shape_rtl: Shape right-to-left runs (defaults to PDFDOC['SHAPE_RTL'])
            disk: Default storage alias for save() (defaults to PDFDOC['DISK'])
        """
        self._engine = engine
        self._rendered = False
        self.show_warnings = conf.is_show_warnings_enabled() if show_warnings is None else show_warnings
        self.convert_entities = conf.is_convert_entities_enabled() if convert_entities is None else convert_entities
        self.shape_rtl = conf.is_shape_rtl_enabled() if shape_rtl is None else shape_rtl
        self.disk = disk if disk is not None else conf.get_default_disk()

    @property
    def is_rendered(self) -> bool:
        return self._rendered

    def get_engine(self) -> IPdfEngine:
        """Get the underlying engine instance"""
        return self._engine

    def set_warnings(self, warnings: bool) -> "PdfDocument":
        """Escalate render warnings to RenderWarning, or not"""
        self.show_warnings = warnings
        return self

    def load_html(self, html: str, encoding: Optional[str] = None) -> "PdfDocument":
        """
        Load an HTML string.

        The markup is preprocessed (entities, right-to-left shaping) before
        the engine sees it.
        """
        html = preprocess_html(html, entities=self.convert_entities, shape_rtl=self.shape_rtl)
        self._engine.load_html(html, encoding)
        self._rendered = False
        return self

    def load_file(self, path: str) -> "PdfDocument":
        """Load an HTML file"""
        logger.debug(f"Loading HTML file: {path}")
        self._engine.load_html_file(path)
        self._rendered = False
        return self

    def load_view(
        self,
        template_name: str,
        data: Optional[Mapping[str, Any]] = None,
        merge_data: Optional[Mapping[str, Any]] = None,
        encoding: Optional[str] = None,
        request=None
    ) -> "PdfDocument":
        """
        Render a Django template and load the result.

        Args:
            template_name: Django template path (e.g., 'invoices/detail.html')
            data: Template context
            merge_data: Extra context; keys also present in ``data`` lose
            encoding: Encoding hint passed to the engine
            request: Optional HttpRequest for context processors
        """
        context = dict(merge_data or {})
        context.update(data or {})

        logger.debug(f"Rendering template: {template_name}")
        html = render_to_string(template_name, context, request=request)
        return self.load_html(html, encoding)

    def add_info(self, info: Mapping[str, str]) -> "PdfDocument":
        """Add metadata entries (Title, Author, Subject, ...)"""
        for name, value in info.items():
            self._engine.add_info(name, value)
        return self

    def set_option(self, attribute: Union[str, Mapping[str, Any]], value: Any = None) -> "PdfDocument":
        """Set an option, or several when ``attribute`` is a mapping"""
        self._engine.get_options().set(attribute, value)
        return self

    def set_options(self, options: Mapping[str, Any], merge_with_defaults: bool = False) -> "PdfDocument":
        """
        Replace all engine options.

        Args:
            options: New options
            merge_with_defaults: Overlay ``options`` on PDFDOC['OPTIONS']
        """
        if merge_with_defaults:
            options = {**conf.get_default_options(), **options}
        self._engine.set_options(Options(options))
        return self

    def render(self) -> None:
        """
        Render the document, whatever its current state.

        Raises:
            RenderWarning: If warnings are escalated and the engine reported any
        """
        logger.debug("Rendering PDF document")
        result = self._engine.render()

        if result.has_warnings:
            warnings = [message for message in result.warnings if message]
            logger.warning(f"PDF rendered with {len(warnings)} warning(s)")
            if self.show_warnings:
                raise RenderWarning(warnings)

        self._rendered = True

    def output(self, options: Optional[dict] = None) -> bytes:
        """
        Get the PDF as bytes.

        Renders first only if the document is not rendered yet. The bytes
        are serialized again on every call.

        Args:
            options: Engine output options, e.g. ``{'compress': 0}``
        """
        if not self._rendered:
            self.render()
        return self._engine.output(options or {})

    def save(self, filename: str, disk: Optional[str] = None) -> "PdfDocument":
        """
        Save the PDF.

        Args:
            filename: Name on the storage backend, or a filesystem path
            disk: Storage alias; defaults to the document's disk, and a
                plain filesystem write when that is None too
        """
        storage.put(filename, self.output(), disk=disk or self.disk)
        return self

    def download(self, filename: str = 'document.pdf') -> HttpResponse:
        """Make the PDF downloadable by the user"""
        return pdf_download_response(self.output(), filename)

    def stream(self, filename: str = 'document.pdf') -> HttpResponse:
        """Return a response with the PDF to show in the browser"""
        return pdf_inline_response(self.output(), filename)

    def set_encryption(
        self,
        password: str,
        owner_password: str = '',
        permissions: Optional[Sequence[str]] = None
    ) -> None:
        """
        Encrypt the PDF.

        Always re-renders, then configures the canvas of that render.

        Args:
            password: User password
            owner_password: Owner password
            permissions: Granted permissions ('print', 'modify', 'copy', 'add');
                none are granted by default

        Raises:
            UnsupportedCapability: If the active canvas cannot encrypt
        """
        self.render()
        canvas = self._engine.get_canvas()
        if canvas is None or not canvas.supports_encryption:
            name = getattr(canvas, 'name', None)
            raise UnsupportedCapability(
                f"Encryption is not supported by the '{name}' canvas; use the 'pypdf' backend"
            )
        canvas.set_encryption(password, owner_password, permissions)

    def __getattr__(self, name: str):
        # Only reached for names not found on the document itself
        if name.startswith('_'):
            raise AttributeError(name)

        engine = self.__dict__.get('_engine')
        method = getattr(engine, name, None)
        if not callable(method):
            raise UnsupportedOperation(f"Method [{name}] does not exist on PdfDocument instance.")

        if not lookup_chainable(engine, name):
            return method

        @wraps(method)
        def forward(*args, **kwargs):
            method(*args, **kwargs)
            return self

        return forward
