"""
Interfaces for pdfdoc

Defines the capability interface every rendering engine implements, and
the canvas interface engines use to finalize PDF bytes.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence, Tuple, Union

from .dto import RenderResult
from .exceptions import UnsupportedCapability
from .options import Options


def chainable(func):
    """
    Mark an interface method as returning the engine itself.

    PdfDocument reads this marker from the interface when forwarding a
    call, and returns the document instead of the engine.
    """
    func.__chainable__ = True
    return func


def is_chainable(func) -> bool:
    return getattr(func, '__chainable__', False)


class ICanvas(ABC):
    """
    Interface for the canvas an engine writes its final PDF through.
    """

    name: str = ''

    @property
    def supports_encryption(self) -> bool:
        return False

    @abstractmethod
    def finalize(self, pdf_bytes: bytes) -> bytes:
        """
        Post-process serialized PDF bytes.

        Args:
            pdf_bytes: PDF as written by the engine

        Returns:
            Final PDF content as bytes
        """
        pass

    def set_encryption(
        self,
        password: str,
        owner_password: str = '',
        permissions: Optional[Sequence[str]] = None
    ) -> None:
        raise UnsupportedCapability(f"Canvas '{self.name}' does not support encryption")


class IPdfEngine(ABC):
    """
    Interface for PDF rendering engines.

    Implementations hold one source document (markup or file), render it
    on demand and serialize the result to bytes.
    """

    @chainable
    @abstractmethod
    def load_html(self, html: str, encoding: Optional[str] = None) -> "IPdfEngine":
        """Load an HTML string, replacing any previous source."""
        pass

    @chainable
    @abstractmethod
    def load_html_file(self, path: str) -> "IPdfEngine":
        """Load an HTML file, replacing any previous source."""
        pass

    @abstractmethod
    def render(self) -> RenderResult:
        """
        Lay out the loaded document.

        Returns:
            RenderResult with the warnings reported during this call only

        Raises:
            Exception: If rendering fails
        """
        pass

    @abstractmethod
    def output(self, options: Optional[dict] = None) -> bytes:
        """
        Serialize the rendered document.

        Args:
            options: Engine-specific output options (e.g. ``{'compress': 0}``)

        Returns:
            PDF content as bytes
        """
        pass

    @abstractmethod
    def get_options(self) -> Options:
        pass

    @chainable
    @abstractmethod
    def set_options(self, options: Options) -> "IPdfEngine":
        pass

    @chainable
    @abstractmethod
    def add_info(self, name: str, value: str) -> "IPdfEngine":
        """Add a metadata entry (Title, Author, ...)."""
        pass

    @abstractmethod
    def get_canvas(self) -> Optional[ICanvas]:
        """Get the canvas of the last render, or None before rendering."""
        pass

    @chainable
    @abstractmethod
    def set_canvas(self, canvas: ICanvas) -> "IPdfEngine":
        pass

    @chainable
    def set_paper(
        self,
        paper: Union[str, Sequence[float]],
        orientation: str = 'portrait'
    ) -> "IPdfEngine":
        self.get_options().set({'paper_size': paper, 'orientation': orientation})
        return self

    def get_paper_size(self) -> Union[str, Tuple[float, ...]]:
        return self.get_options().get('paper_size')

    def get_paper_orientation(self) -> str:
        return self.get_options().get('orientation')

    @chainable
    def set_base_path(self, base_path: str) -> "IPdfEngine":
        self.get_options().set('base_url', base_path)
        return self

    def get_base_path(self) -> Optional[str]:
        return self.get_options().get('base_url')


def lookup_chainable(engine: Any, name: str) -> bool:
    """
    Check whether a forwarded method returns the engine itself.

    The interface declaration wins; methods outside the interface may carry
    their own ``@chainable`` marker.
    """
    declared = getattr(IPdfEngine, name, None)
    if declared is not None:
        return is_chainable(declared)
    return is_chainable(getattr(type(engine), name, None))
