"""
WeasyPrint Engine Implementation

Adapter exposing WeasyPrint through the IPdfEngine capability interface.
"""

from contextlib import contextmanager
from typing import Mapping, Optional, Sequence, Union
import logging
import threading

try:
    from weasyprint import HTML, CSS
    WEASYPRINT_AVAILABLE = True
except (ImportError, OSError):
    # OSError: WeasyPrint is installed but Pango/HarfBuzz are missing
    WEASYPRINT_AVAILABLE = False

from .canvas import get_canvas as create_canvas
from .dto import RenderResult
from .interfaces import ICanvas, IPdfEngine
from .options import Options


logger = logging.getLogger(__name__)


# Logger WeasyPrint reports CSS/HTML/layout problems on
WEASYPRINT_LOGGER = 'weasyprint'

# add_info names mapped to DocumentMetadata attributes
METADATA_FIELDS = {
    'Title': 'title',
    'Subject': 'description',
    'Creator': 'generator',
    'CreationDate': 'created',
    'ModDate': 'modified',
}


class _WarningCollector(logging.Handler):
    """Collects warning messages logged by one thread while attached."""

    def __init__(self, thread_id: int):
        super().__init__(level=logging.WARNING)
        self.thread_id = thread_id
        self.messages = []

    def emit(self, record):
        if record.thread == self.thread_id:
            self.messages.append(record.getMessage())


# Saved level of each logger lowered by capture_warnings, with its number of
# active captures. Guarded by _capture_lock.
_capture_lock = threading.Lock()
_lowered_levels = {}


def _lower_level(target: logging.Logger) -> None:
    with _capture_lock:
        saved = _lowered_levels.get(target.name)
        if saved is not None:
            _lowered_levels[target.name] = (saved[0], saved[1] + 1)
            return
        _lowered_levels[target.name] = (target.level, 1)
        if target.getEffectiveLevel() > logging.WARNING:
            target.setLevel(logging.WARNING)


def _restore_level(target: logging.Logger) -> None:
    with _capture_lock:
        level, count = _lowered_levels.pop(target.name)
        if count > 1:
            _lowered_levels[target.name] = (level, count - 1)
        elif target.level != level:
            target.setLevel(level)


@contextmanager
def capture_warnings(logger_name: str = WEASYPRINT_LOGGER):
    """
    Collect warnings logged on ``logger_name`` by the current thread inside
    the block.

    The logger is lowered to WARNING for the duration when the project's
    logging config sets it higher.

    Yields:
        List that receives the warning messages, in emission order
    """
    collector = _WarningCollector(threading.get_ident())
    target = logging.getLogger(logger_name)
    _lower_level(target)
    target.addHandler(collector)
    try:
        yield collector.messages
    finally:
        target.removeHandler(collector)
        _restore_level(target)


def page_css(paper: Union[str, Sequence[float]], orientation: str = 'portrait') -> str:
    """
    Build the @page rule for a paper size and orientation.

    Args:
        paper: Named size ('a4', 'letter', ...), (width, height) or
            (x0, y0, x1, y1) in points
        orientation: 'portrait' or 'landscape'

    Example:
        >>> page_css('a4', 'landscape')
        '@page { size: A4 landscape; }'
    """
    orientation = (orientation or 'portrait').lower()
    if isinstance(paper, str):
        return f"@page {{ size: {paper.upper()} {orientation}; }}"

    if len(paper) == 4:
        width, height = paper[2] - paper[0], paper[3] - paper[1]
    else:
        width, height = paper[0], paper[1]
    if orientation == 'landscape' and width < height:
        width, height = height, width
    return f"@page {{ size: {width}pt {height}pt; }}"


class WeasyPrintEngine(IPdfEngine):
    """
    PDF engine using WeasyPrint.

    Supports:
    - HTML strings or files as source
    - Static assets via the ``base_url`` option
    - Paper size and orientation via an injected @page rule
    - Extra stylesheets, metadata and canvas post-processing
    """

    def __init__(self, options: Optional[Union[Options, Mapping]] = None):
        """
        Initialize the engine.

        Args:
            options: Render options (see pdfdoc.conf.DEFAULT_OPTIONS)
        """
        if not WEASYPRINT_AVAILABLE:
            raise ImportError(
                "WeasyPrint is not installed. "
                "Install it with: pip install weasyprint"
            )

        self.options = options if isinstance(options, Options) else Options(options)
        self.info = {}
        self.html_string = None
        self.html_file = None
        self.encoding = None
        self.canvas = None
        self._html = None
        self._document = None

    def load_html(self, html: str, encoding: Optional[str] = None) -> "WeasyPrintEngine":
        self.html_string = html
        self.html_file = None
        self.encoding = encoding
        return self

    def load_html_file(self, path: str) -> "WeasyPrintEngine":
        self.html_file = str(path)
        self.html_string = None
        self.encoding = None
        return self

    def render(self) -> RenderResult:
        """
        Render the loaded source with WeasyPrint.

        Returns:
            RenderResult with the warnings WeasyPrint logged during this call

        Raises:
            ValueError: If nothing has been loaded
            Exception: If rendering fails
        """
        if self.html_string is None and self.html_file is None:
            raise ValueError("No HTML loaded; call load_html() or load_html_file() first")

        try:
            with capture_warnings() as warnings:
                self._html = self._build_html()
                self._document = self._html.render(
                    stylesheets=self._build_stylesheets(),
                    presentational_hints=bool(self.options.get('presentational_hints')),
                )
                self.canvas = create_canvas(self.options.get('pdf_backend') or 'pypdf')

            result = RenderResult(warnings=list(warnings), page_count=len(self._document.pages))
            logger.info(
                f"Rendered document: {result.page_count} page(s), "
                f"{len(result.warnings)} warning(s)"
            )
            return result

        except Exception as e:
            logger.error(f"Failed to render PDF: {e}", exc_info=True)
            raise

    def output(self, options: Optional[dict] = None) -> bytes:
        """
        Write the rendered document to PDF bytes.

        Args:
            options: ``compress`` (1 or 0, default 1) toggles content stream
                compression; other keys go to ``Document.write_pdf`` as is

        Returns:
            PDF content as bytes
        """
        if self._document is None:
            raise ValueError("Document has not been rendered; call render() first")

        pdf_options = dict(options or {})
        compress = pdf_options.pop('compress', None)
        if compress is not None:
            pdf_options['uncompressed_pdf'] = not int(compress)

        try:
            self._apply_info()
            pdf_bytes = self._document.write_pdf(**pdf_options)
            pdf_bytes = self.canvas.finalize(pdf_bytes)

            logger.info(f"Successfully wrote PDF: {len(pdf_bytes)} bytes")
            return pdf_bytes

        except Exception as e:
            logger.error(f"Failed to write PDF: {e}", exc_info=True)
            raise

    def get_options(self) -> Options:
        return self.options

    def set_options(self, options: Options) -> "WeasyPrintEngine":
        self.options = options if isinstance(options, Options) else Options(options)
        return self

    def add_info(self, name: str, value: str) -> "WeasyPrintEngine":
        self.info[name] = value
        return self

    def get_canvas(self) -> Optional[ICanvas]:
        return self.canvas

    def set_canvas(self, canvas: ICanvas) -> "WeasyPrintEngine":
        self.canvas = canvas
        return self

    def get_html(self):
        """Get the WeasyPrint HTML object of the last render."""
        return self._html

    def get_document(self):
        """Get the WeasyPrint Document of the last render."""
        return self._document

    def _build_html(self):
        kwargs = {
            'base_url': self.options.get('base_url'),
            'media_type': self.options.get('media_type') or 'print',
        }
        if self.encoding:
            kwargs['encoding'] = self.encoding

        if self.html_file is not None:
            logger.debug(f"Loading HTML file: {self.html_file}")
            return HTML(filename=self.html_file, **kwargs)
        return HTML(string=self.html_string, **kwargs)

    def _build_stylesheets(self) -> list:
        paper = self.options.get('paper_size')
        stylesheets = []
        if paper:
            stylesheets.append(CSS(string=page_css(paper, self.options.get('orientation'))))
        stylesheets.extend(CSS(filename=css) for css in self.options.get('stylesheets') or [])
        return stylesheets

    def _apply_info(self) -> None:
        metadata = self._document.metadata
        for name, value in self.info.items():
            if name == 'Author':
                metadata.authors = [value]
            elif name == 'Keywords':
                metadata.keywords = [k.strip() for k in value.split(',') if k.strip()]
            elif name in METADATA_FIELDS:
                setattr(metadata, METADATA_FIELDS[name], value)
            else:
                metadata.custom[name] = value
