from .header import (
    ElementType,
    HeaderDocument,
    HeaderSpec,
    InvalidNameError,
    ShapeMismatchError,
    render,
    write,
    write_header,
)
from .image_converter import PixelBuffer, load_pixels

__version__ = '0.1.0'
