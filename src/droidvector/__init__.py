"""Public API for droidvector."""
from .archive import ArchiveBuilder, ArchiveEntry, build_archive
from .converter import ConversionResult, convert_svg, convert_tree, resource_name
from .diagnostics import Diagnostic, Severity, WarningSink
from .errors import DroidVectorError, DuplicateEntryError, SizeOverflowError, StructuralError
from .options import ConversionOptions
from .tree import GeometryTree

__all__ = [
    "convert_svg",
    "convert_tree",
    "resource_name",
    "ConversionOptions",
    "ConversionResult",
    "GeometryTree",
    "build_archive",
    "ArchiveBuilder",
    "ArchiveEntry",
    "WarningSink",
    "Diagnostic",
    "Severity",
    "DroidVectorError",
    "StructuralError",
    "SizeOverflowError",
    "DuplicateEntryError",
]
