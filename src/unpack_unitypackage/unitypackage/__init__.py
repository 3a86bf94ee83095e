from .extract import (
    ArchiveFormatError,
    ArchiveOpenError,
    StagingError,
    extract_assets,
)
from .pack_unpack import (
    PackageExistsError,
    PackageWriteError,
    SourceDirectoryError,
    SourceReadError,
    pack_unitypackage,
    unpack_unitypackage,
)
from .reconstruct import OutputDirectoryError, ensure_output_dir, reconstruct_structure
from .relocate import RelocationError, move_file
from .types import AssetRecord, ReconstructionSummary, StagingArea

__all__ = [
    "ArchiveFormatError",
    "ArchiveOpenError",
    "AssetRecord",
    "OutputDirectoryError",
    "PackageExistsError",
    "PackageWriteError",
    "ReconstructionSummary",
    "RelocationError",
    "SourceDirectoryError",
    "SourceReadError",
    "StagingArea",
    "StagingError",
    "ensure_output_dir",
    "extract_assets",
    "move_file",
    "pack_unitypackage",
    "reconstruct_structure",
    "unpack_unitypackage",
]
