"""PNG files turned into data URIs that can be embedded in an <image> element."""
from __future__ import annotations

import base64
import io
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .errors import OpenFileError, ReadBytesError, UnknownFormat, WrongEncoding
from .log import get_logger

logger = get_logger(__name__)

PNG_MIME_PREFIX = "data:image/png;base64,"


class EncodedImage:
    """Base64 encoded PNG bytes prefixed with the data URI mime type."""

    def __init__(self, data: str, size: Optional[Tuple[int, int]] = None) -> None:
        self.data = data
        self.size = size

    def __str__(self) -> str:
        return self.data

    def __repr__(self) -> str:
        return f"EncodedImage(size={self.size!r}, length={len(self.data)})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EncodedImage):
            return self.data == other.data
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.data)

    def as_bytes(self) -> bytes:
        return self.data.encode("ascii")

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "EncodedImage":
        path = Path(path)
        try:
            fh = path.open("rb")
        except OSError as exc:
            raise OpenFileError(path, exc) from exc
        with fh:
            try:
                blob = fh.read()
            except OSError as exc:
                raise ReadBytesError(path, exc) from exc

        try:
            with Image.open(io.BytesIO(blob)) as img:
                fmt = img.format
                size = img.size
        except UnidentifiedImageError as exc:
            raise UnknownFormat(path) from exc

        if fmt != "PNG":
            raise WrongEncoding(path, fmt)

        data = PNG_MIME_PREFIX + base64.b64encode(blob).decode("ascii")
        logger.debug("encoded %s (%dx%d px) into %d byte payload", path, size[0], size[1], len(data))
        return cls(data, size)
