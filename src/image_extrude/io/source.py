"""Image source resolution.

Handles the ways an image reaches the pipeline:
- data URLs (base64 or percent-encoded)
- local files
- remote URLs fetched with requests
- the plugin's ``{"imageUrl", "dataUrl", "fileType", "fileName"}`` mapping
"""

import base64
import binascii
import mimetypes
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import unquote_to_bytes, urlparse

import requests
import structlog

from image_extrude.config import FetchConfig, ImageExtrudeSettings
from image_extrude.domain import ImageSource, InlineData, RemoteUrl
from image_extrude.exceptions import DecodeError, FetchError

logger = structlog.get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
SVG_MIME_TYPE = "image/svg+xml"
SVG_NAMESPACE = "http://www.w3.org/2000/svg"

_SVG_OPEN_TAG = re.compile(r"<svg(?=[\s>/])", re.IGNORECASE)


def _media_type(value: str | None) -> str | None:
    """Strip parameters such as ``charset`` from a MIME type."""
    if not value:
        return None
    media_type = value.split(";", 1)[0].strip().lower()
    return media_type or None


def parse_data_url(data_url: str, mime_type: str | None = None) -> InlineData:
    """Decode a ``data:`` URL.

    Args:
        data_url: URL of the form ``data:[<mime>][;base64],<payload>``
        mime_type: MIME type overriding the one in the URL header

    Returns:
        InlineData with the decoded bytes

    Raises:
        DecodeError: If the URL is malformed or the payload cannot be decoded
    """
    if not data_url.startswith("data:"):
        raise DecodeError("not a data URL")

    header, separator, payload = data_url[len("data:"):].partition(",")
    if not separator:
        raise DecodeError("data URL is missing the ',' separator")

    declared = _media_type(header)
    is_base64 = any(part.strip().lower() == "base64" for part in header.split(";")[1:])
    resolved_mime = _media_type(mime_type) or declared or DEFAULT_MIME_TYPE

    if is_base64:
        try:
            data = base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"invalid base64 payload: {e}", mime_type=resolved_mime) from e
    else:
        data = unquote_to_bytes(payload)

    return InlineData(data=data, mime_type=resolved_mime)


def to_data_url(data: bytes, mime_type: str) -> str:
    """Encode bytes as a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def ensure_svg_namespace(content: str) -> str:
    """Add the SVG namespace to the root element when it is missing."""
    if "xmlns=" in content:
        return content
    return _SVG_OPEN_TAG.sub(f'<svg xmlns="{SVG_NAMESPACE}"', content, count=1)


def decode_vector_content(data: bytes) -> str:
    """Decode SVG bytes to text.

    A UTF-8 byte order mark is tolerated and the SVG namespace is added when
    the document omits it.

    Raises:
        DecodeError: If the bytes are not valid UTF-8
    """
    try:
        content = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DecodeError(f"vector content is not UTF-8: {e}", mime_type=SVG_MIME_TYPE) from e
    return ensure_svg_namespace(content)


def guess_mime_type(path: str | Path) -> str | None:
    """Guess a MIME type from a file name or URL path."""
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type


def load_file(path: Path) -> InlineData:
    """Read a local image file.

    Raises:
        DecodeError: If the file cannot be read
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DecodeError(f"cannot read '{path}': {e}") from e
    return InlineData(
        data=data,
        mime_type=guess_mime_type(path) or DEFAULT_MIME_TYPE,
        file_name=path.name,
    )


def source_from_value(value: Mapping[str, Any]) -> ImageSource:
    """Build a source from an image-file mapping.

    Inline ``dataUrl`` content takes precedence over ``imageUrl``. The
    declared ``fileType`` decides the MIME type when present.

    Raises:
        DecodeError: If the value is not a mapping of strings, or neither a
            data URL nor an image URL is present
    """
    if not isinstance(value, Mapping):
        raise DecodeError(f"image file must be a mapping, got {type(value).__name__}")
    for key in ("fileType", "fileName", "dataUrl", "imageUrl"):
        if value.get(key) is not None and not isinstance(value[key], str):
            raise DecodeError(f"image file field '{key}' must be a string")

    file_type = value.get("fileType") or None
    file_name = value.get("fileName") or None

    data_url = value.get("dataUrl")
    if data_url:
        inline = parse_data_url(data_url, mime_type=file_type)
        return InlineData(data=inline.data, mime_type=inline.mime_type, file_name=file_name)

    image_url = value.get("imageUrl")
    if image_url:
        return RemoteUrl(url=image_url, mime_type=file_type, file_name=file_name)

    raise DecodeError("no image provided")


def _fetch(url: str, config: FetchConfig, session: requests.Session | None) -> requests.Response:
    http = session or requests
    try:
        response = http.get(
            url,
            timeout=config.timeout_seconds,
            headers={"User-Agent": config.user_agent},
        )
    except requests.RequestException as e:
        raise FetchError(url, str(e)) from e

    if not response.ok:
        raise FetchError(
            url,
            f"HTTP {response.status_code} {response.reason or ''}".strip(),
            status_code=response.status_code,
        )
    return response


def resolve_source(
    source: ImageSource,
    settings: ImageExtrudeSettings | None = None,
    session: requests.Session | None = None,
) -> InlineData:
    """Materialize an image source into bytes and a MIME type.

    Inline sources are returned unchanged. Remote sources are fetched once,
    without retries. The MIME type is taken from the declared type, then
    the response's Content-Type, then the URL's extension.

    Args:
        source: Remote or inline image
        settings: Settings providing the fetch timeout and user agent
        session: Optional requests session to reuse connections

    Returns:
        InlineData

    Raises:
        FetchError: On network failures and HTTP error statuses
    """
    if isinstance(source, InlineData):
        return source

    settings = settings or ImageExtrudeSettings()
    logger.debug("Fetching image", url=source.url)
    response = _fetch(source.url, settings.fetch, session)

    header_mime = _media_type(response.headers.get("Content-Type"))
    if header_mime == DEFAULT_MIME_TYPE:
        header_mime = None
    mime_type = (
        _media_type(source.mime_type)
        or header_mime
        or guess_mime_type(urlparse(source.url).path)
        or DEFAULT_MIME_TYPE
    )

    logger.debug("Fetched image", url=source.url, bytes=len(response.content), mime_type=mime_type)
    file_name = source.file_name or Path(urlparse(source.url).path).name or None
    return InlineData(data=response.content, mime_type=mime_type, file_name=file_name)
