"""
Canvas Backends

A canvas is the last stage an engine writes its PDF through. The
``pdf_backend`` option selects one by name from the registry below.
"""

from io import BytesIO
from typing import Callable, Optional, Sequence
import logging

from pypdf import PdfReader, PdfWriter
from pypdf.constants import UserAccessPermissions

from .interfaces import ICanvas


logger = logging.getLogger(__name__)


# Permission names accepted by set_encryption, mapped to pypdf flags
PERMISSIONS = {
    'print': UserAccessPermissions.PRINT | UserAccessPermissions.PRINT_TO_REPRESENTATION,
    'modify': UserAccessPermissions.MODIFY | UserAccessPermissions.ASSEMBLE_DOC,
    'copy': UserAccessPermissions.EXTRACT | UserAccessPermissions.EXTRACT_TEXT_AND_GRAPHICS,
    'add': UserAccessPermissions.ADD_OR_MODIFY | UserAccessPermissions.FILL_FORM_FIELDS,
}


def resolve_permissions(permissions: Optional[Sequence[str]]) -> UserAccessPermissions:
    """
    Build the pypdf permission flag for a list of granted permissions.

    Reserved bits stay set; every standard permission not listed is cleared.

    Raises:
        ValueError: If a permission name is unknown
    """
    granted = set(permissions or ())
    unknown = granted - set(PERMISSIONS)
    if unknown:
        raise ValueError(f"Unknown PDF permission(s): {', '.join(sorted(unknown))}")

    flag = int(UserAccessPermissions.all())
    for name, bits in PERMISSIONS.items():
        if name not in granted:
            flag &= ~int(bits)
    return UserAccessPermissions(flag)


class NativeCanvas(ICanvas):
    """Canvas that keeps WeasyPrint's output as written."""

    name = 'weasyprint'

    def finalize(self, pdf_bytes: bytes) -> bytes:
        return pdf_bytes


class EncryptingCanvas(ICanvas):
    """
    Canvas that can encrypt the final PDF with pypdf.

    Without encryption configured the bytes pass through untouched.
    """

    name = 'pypdf'

    def __init__(self):
        self.encryption = None

    @property
    def supports_encryption(self) -> bool:
        return True

    def set_encryption(
        self,
        password: str,
        owner_password: str = '',
        permissions: Optional[Sequence[str]] = None
    ) -> None:
        self.encryption = {
            'user_password': password,
            'owner_password': owner_password or None,
            'permissions': resolve_permissions(permissions),
        }

    def finalize(self, pdf_bytes: bytes) -> bytes:
        if not self.encryption:
            return pdf_bytes

        reader = PdfReader(BytesIO(pdf_bytes))
        writer = PdfWriter()
        for page in reader.pages:
            writer.add_page(page)
        if reader.metadata:
            writer.add_metadata(dict(reader.metadata))

        writer.encrypt(
            self.encryption['user_password'],
            owner_password=self.encryption['owner_password'],
            permissions_flag=self.encryption['permissions'],
        )

        output = BytesIO()
        writer.write(output)
        logger.debug(f"Encrypted PDF ({len(pdf_bytes)} -> {output.tell()} bytes)")
        return output.getvalue()


class CanvasRegistry:
    """Registry for canvas backends"""

    def __init__(self):
        self._canvases: dict[str, Callable[[], ICanvas]] = {}

    def register(self, name: str, canvas_factory: Callable[[], ICanvas]) -> None:
        """
        Register a canvas backend.

        Args:
            name: Backend name used by the ``pdf_backend`` option
            canvas_factory: Factory function that returns a canvas instance
        """
        if name in self._canvases:
            raise ValueError(f"Canvas backend '{name}' is already registered")
        self._canvases[name] = canvas_factory

    def get_canvas(self, name: str) -> ICanvas:
        """
        Create a canvas by its backend name.

        Raises:
            KeyError: If the backend is not registered
        """
        if name not in self._canvases:
            raise KeyError(f"Canvas backend '{name}' not found")
        return self._canvases[name]()

    def is_registered(self, name: str) -> bool:
        """Check if a backend name is registered"""
        return name in self._canvases

    def list_canvases(self) -> list[str]:
        """List all registered backend names"""
        return list(self._canvases.keys())


# Global registry instance
_registry = CanvasRegistry()
_registry.register(NativeCanvas.name, NativeCanvas)
_registry.register(EncryptingCanvas.name, EncryptingCanvas)


def register_canvas(name: str, canvas_factory: Callable[[], ICanvas]) -> None:
    """Register a canvas backend in the global registry"""
    _registry.register(name, canvas_factory)


def get_canvas(name: str) -> ICanvas:
    """Create a canvas from the global registry"""
    return _registry.get_canvas(name)


def is_registered(name: str) -> bool:
    """Check if a backend name is registered"""
    return _registry.is_registered(name)


def list_canvases() -> list[str]:
    """List all registered backend names"""
    return _registry.list_canvases()
