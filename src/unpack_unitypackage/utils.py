from pathlib import PurePosixPath


class UnpackError(Exception):
    """Base class for errors that abort packing or unpacking."""


def split_entry_name(name: str) -> tuple[str, str] | None:
    """
    Split a tar entry name into its group id and member name.

    Leading "./" segments are ignored. Returns `None` if the name does not
    consist of a group id and a member name separated by a "/".

    >>> split_entry_name("./0123abcd/asset.meta")
    ('0123abcd', 'asset.meta')
    >>> split_entry_name("0123abcd") is None
    True
    """
    while name.startswith("./"):
        name = name[2:]
    group_id, sep, member_name = name.partition("/")
    if not sep or not member_name or group_id in ("", ".", ".."):
        return None
    return group_id, member_name


def is_safe_relative_path(path: str) -> bool:
    """Check that `path` is a relative path that stays inside its root."""
    pure_path = PurePosixPath(path.replace("\\", "/"))
    return (
        len(pure_path.parts) > 0
        and not pure_path.is_absolute()
        and not (len(path) > 1 and path[1] == ":")  # Windows drive letter
        and ".." not in pure_path.parts
        and "\x00" not in path
    )
