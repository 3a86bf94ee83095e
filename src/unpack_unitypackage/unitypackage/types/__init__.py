from .directory_contents import DirectoryContents, get_contents
from .records import (
    ASSET_FILE_NAME,
    META_FILE_NAME,
    META_SUFFIX,
    PATHNAME_FILE_NAME,
    AssetRecord,
    ReconstructionSummary,
)
from .staging import StagingArea

__all__ = [
    "ASSET_FILE_NAME",
    "META_FILE_NAME",
    "META_SUFFIX",
    "PATHNAME_FILE_NAME",
    "AssetRecord",
    "DirectoryContents",
    "ReconstructionSummary",
    "StagingArea",
    "get_contents",
]
