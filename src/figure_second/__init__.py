"""Public API for figure_second."""
from .document import Document, parse_svg
from .encoding import EncodedImage
from .errors import (
    EncodingError,
    FigureSecondError,
    IdentifierError,
    LayerParseError,
    MarkupError,
    MissingId,
    MissingLayer,
    MissingLayerEnd,
    SerializeError,
)
from .layer import Layer
from .objects import Identity, Image, Other, Rectangle

__all__ = [
    "Document",
    "parse_svg",
    "EncodedImage",
    "Layer",
    "Identity",
    "Image",
    "Rectangle",
    "Other",
    "FigureSecondError",
    "MarkupError",
    "LayerParseError",
    "MissingLayerEnd",
    "IdentifierError",
    "MissingId",
    "MissingLayer",
    "SerializeError",
    "EncodingError",
]
