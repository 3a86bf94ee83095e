from pathlib import Path

from pydantic import RootModel


class DirectoryContents(RootModel[dict[Path, bytes]]):
    """
    The contents of a directory tree.

    Attributes:
        root (dict[Path, bytes]): A mapping of the files' relative paths to
            their raw contents.
        files (dict[Path, bytes]): More descriptive alias for `root`.

    """

    root: dict[Path, bytes]

    @property
    def files(self) -> dict[Path, bytes]:
        return self.root


def get_contents(root: Path) -> DirectoryContents:
    """
    Return the contents of every file under `root`, sorted by path.

    Returns an empty `DirectoryContents` if `root` is not a directory.

    Raises:
        OSError: If a file under `root` cannot be read.

    """
    if not root.is_dir():
        return DirectoryContents({})
    full_paths = [p for p in sorted(root.rglob("*")) if p.is_file()]
    return DirectoryContents({p.relative_to(root): p.read_bytes() for p in full_paths})
