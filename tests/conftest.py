from pathlib import Path

import pytest
from helpers import (
    GRASS_BYTES,
    GRASS_GUID,
    GRASS_META,
    WOOD_BYTES,
    asset_group,
    write_unitypackage,
)


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def wood_package(tmp_path: Path) -> Path:
    """A package holding one 10-byte asset with no metadata."""
    return write_unitypackage(
        tmp_path / "Wood.unitypackage",
        asset_group("abc123", "Materials/Wood.mat", WOOD_BYTES),
    )


@pytest.fixture
def two_asset_package(tmp_path: Path) -> Path:
    """A package holding one asset with metadata and one without."""
    return write_unitypackage(
        tmp_path / "Two.unitypackage",
        [
            *asset_group("abc123", "Materials/Wood.mat", WOOD_BYTES),
            *asset_group(
                GRASS_GUID,
                "Assets/Textures/Grass.png",
                GRASS_BYTES,
                GRASS_META,
            ),
        ],
    )
