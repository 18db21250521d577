from .converter import ConversionResult, ModeMismatch, SectorConverter, SizeMisaligned, convert_file
from .errors import ConversionError, ConversionIOError, MisalignedImageError, UnsupportedModeError
from .sector import ImageGeometry, Layout, compute_geometry, detect_layout

__version__ = "0.1.0"
