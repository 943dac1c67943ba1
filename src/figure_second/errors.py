"""Error types raised while parsing, editing and writing figure templates."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class FigureSecondError(Exception):
    """Base class for every structured figure_second error."""

    code = "E_FIGURE_SECOND"


class MarkupError(FigureSecondError, ValueError):
    """Raised when the byte stream does not tokenize as markup."""

    code = "E_PARSE_MARKUP"

    def __init__(self, offset: int, snippet: bytes) -> None:
        super().__init__(f"malformed markup at byte {offset}: {snippet!r}")
        self.offset = offset
        self.snippet = snippet


class IdentifierError(FigureSecondError, ValueError):
    """Raised when a placeholder element has no usable id/width/height."""

    code = "E_OBJECT_IDENTITY"

    def __init__(self, message: str, element) -> None:
        super().__init__(message)
        self.element = element


class IdentifierDecodeError(IdentifierError):
    def __init__(self, field: str, element, error: UnicodeDecodeError) -> None:
        super().__init__(f"failed to decode `{field}` attribute as utf8: {error}", element)
        self.field = field
        self.error = error


class IdentifierParseError(IdentifierError):
    def __init__(self, field: str, element, value: str) -> None:
        super().__init__(f"failed to parse `{field}` attribute {value!r} as a number", element)
        self.field = field
        self.value = value


class MissingIdentifier(IdentifierError):
    def __init__(
        self,
        element,
        width: Optional[float],
        height: Optional[float],
        id: Optional[str],
    ) -> None:
        missing = [
            name
            for name, value in (("width", width), ("height", height), ("id", id))
            if value is None
        ]
        super().__init__(
            f"missing {', '.join(missing)} for element <{element.name.decode('utf-8', 'replace')}> "
            f"(width={width!r}, height={height!r}, id={id!r})",
            element,
        )
        self.width = width
        self.height = height
        self.id = id
        self.missing = missing


class LayerParseError(FigureSecondError, ValueError):
    """Raised when a layer group cannot be parsed."""

    code = "E_LAYER"


class MissingLayerAttribute(LayerParseError):
    code = "E_LAYER_ATTRIBUTE"

    def __init__(self, field: str, element) -> None:
        super().__init__(
            f"layer is missing `{field}` attribute (or it is not utf8): {element.to_bytes()!r}"
        )
        self.field = field
        self.element = element


class MissingLayerEnd(LayerParseError):
    code = "E_LAYER_UNTERMINATED"

    def __init__(self, layer_id: str, layer_name: str) -> None:
        super().__init__(f"layer not terminated: `{layer_name}` (id `{layer_id}`) has no closing tag")
        self.layer_id = layer_id
        self.layer_name = layer_name


class ObjectParseError(LayerParseError):
    code = "E_OBJECT_IDENTITY"

    def __init__(self, error: IdentifierError, layer_name: str) -> None:
        super().__init__(f"failed to parse object in layer `{layer_name}`: {error}")
        self.error = error
        self.layer_name = layer_name
        self.element = error.element


class MissingId(FigureSecondError, LookupError):
    code = "E_MISSING_ID"

    def __init__(self, id: str) -> None:
        super().__init__(f"id `{id}` was not found in document")
        self.id = id

    def __str__(self) -> str:
        return self.args[0]


class MissingLayer(FigureSecondError, LookupError):
    code = "E_MISSING_LAYER"

    def __init__(self, name: str) -> None:
        super().__init__(f"layer `{name}` was not found in document")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class SerializeError(FigureSecondError, OSError):
    """Raised when an event cannot be written to the output sink."""

    code = "E_IO_WRITE"

    def __init__(self, phase: str, event, error: Exception) -> None:
        super().__init__(f"failed to write {phase} event {event!r}: {error}")
        self.phase = phase
        self.event = event
        self.error = error

    def __str__(self) -> str:
        return self.args[0]


class EncodingError(FigureSecondError, OSError):
    """Raised when an image file cannot be turned into an embeddable payload."""

    code = "E_IMAGE"

    def __init__(self, message: str, path: Union[str, Path]) -> None:
        super().__init__(message)
        self.path = Path(path)

    def __str__(self) -> str:
        return self.args[0]


class OpenFileError(EncodingError):
    code = "E_IO_READ"

    def __init__(self, path: Union[str, Path], error: OSError) -> None:
        super().__init__(f"failed to open image file {path}: {error}", path)
        self.error = error


class ReadBytesError(EncodingError):
    code = "E_IO_READ"

    def __init__(self, path: Union[str, Path], error: OSError) -> None:
        super().__init__(f"failed to read bytes of image file {path} after it was opened: {error}", path)
        self.error = error


class UnknownFormat(EncodingError):
    code = "E_IMAGE_FORMAT"

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__(f"image at {path} has an unknown format; only PNG images are supported", path)


class WrongEncoding(EncodingError):
    code = "E_IMAGE_FORMAT"

    def __init__(self, path: Union[str, Path], format: Optional[str]) -> None:
        super().__init__(f"image at {path} is {format} encoded; images must be PNG encoded", path)
        self.format = format
