"""
HTTP responses for rendered PDFs.

Content-Disposition follows RFC 6266: an ASCII ``filename`` fallback for
every client, plus ``filename*`` (RFC 5987) carrying the original name
when the two differ.
"""

import unicodedata
from urllib.parse import quote

from django.http import HttpResponse


PDF_CONTENT_TYPE = 'application/pdf'

DISPOSITION_ATTACHMENT = 'attachment'
DISPOSITION_INLINE = 'inline'


def fallback_filename(filename: str) -> str:
    """
    Make an ASCII-safe fallback filename.

    Accented letters are transliterated, other non-ASCII characters are
    dropped, and percent signs are removed.

    Example:
        >>> fallback_filename('Réçu%2024.pdf')
        'Recu2024.pdf'
    """
    value = unicodedata.normalize('NFKD', filename)
    value = value.encode('ascii', 'ignore').decode('ascii')
    return value.replace('%', '')


def make_disposition(disposition: str, filename: str, fallback: str = None) -> str:
    """
    Build a Content-Disposition header value.

    Args:
        disposition: 'attachment' or 'inline'
        filename: Original filename, may be non-ASCII
        fallback: ASCII filename for older clients (derived if omitted)

    Raises:
        ValueError: On an unknown disposition, a filename containing path
            separators, or a fallback that is not plain ASCII without '%'
    """
    if disposition not in (DISPOSITION_ATTACHMENT, DISPOSITION_INLINE):
        raise ValueError(f"Disposition must be '{DISPOSITION_ATTACHMENT}' or '{DISPOSITION_INLINE}'")

    if fallback is None:
        fallback = fallback_filename(filename)

    if not fallback.isascii() or '%' in fallback:
        raise ValueError("The filename fallback must only contain ASCII characters and no '%'")

    if any(sep in name for name in (filename, fallback) for sep in ('/', '\\')):
        raise ValueError("The filename and the fallback cannot contain the '/' and '\\' characters")

    escaped = fallback.replace('\\', '\\\\').replace('"', '\\"')
    value = f'{disposition}; filename="{escaped}"'
    if filename != fallback:
        value += f"; filename*=utf-8''{quote(filename, safe='')}"
    return value


def pdf_download_response(pdf_bytes: bytes, filename: str = 'document.pdf') -> HttpResponse:
    """Response that makes the browser download the PDF."""
    response = HttpResponse(pdf_bytes, content_type=PDF_CONTENT_TYPE, status=200)
    response['Content-Disposition'] = make_disposition(DISPOSITION_ATTACHMENT, filename)
    response['Content-Length'] = str(len(pdf_bytes))
    return response


def pdf_inline_response(pdf_bytes: bytes, filename: str = 'document.pdf') -> HttpResponse:
    """Response that shows the PDF in the browser."""
    response = HttpResponse(pdf_bytes, content_type=PDF_CONTENT_TYPE, status=200)
    response['Content-Disposition'] = make_disposition(DISPOSITION_INLINE, filename)
    return response
