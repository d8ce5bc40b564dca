"""
Persistence of rendered PDFs

Writes bytes either through a Django storage backend (by alias) or
straight to a filesystem path. Backend errors propagate unmodified.
"""

from pathlib import Path
from typing import Optional, Union
import logging

from django.core.files.base import ContentFile
from django.core.files.storage import storages


logger = logging.getLogger(__name__)


def put(path: Union[str, Path], content: bytes, disk: Optional[str] = None) -> str:
    """
    Write content to a storage backend or a local path.

    An existing file with the same name is replaced.

    Args:
        path: Name on the storage backend, or a filesystem path when
            ``disk`` is None
        content: Bytes to write
        disk: Alias from ``settings.STORAGES``, or None for the filesystem

    Returns:
        The name the content was stored under
    """
    if disk is not None:
        storage = storages[disk]
        name = str(path)
        if storage.exists(name):
            storage.delete(name)
        stored_name = storage.save(name, ContentFile(content))
        logger.info(f"Stored PDF on disk '{disk}': {stored_name} ({len(content)} bytes)")
        return stored_name

    target = Path(path)
    with open(target, 'wb') as dest:
        dest.write(content)
    logger.info(f"Wrote PDF to {target} ({len(content)} bytes)")
    return str(target)
