"""Mapping of ``/static/...`` request paths onto files in the served directory."""

from pathlib import Path

from static_server.bootstrap.config import STATIC_PREFIX


class PathOutsideRoot(ValueError):
    """The request path names something outside the served directory."""

    def __init__(self, request_path: str):
        super().__init__(f"{request_path!r} escapes the static directory")
        self.request_path = request_path


def static_segments(request_path: str) -> list[str]:
    """Split the part after ``/static/`` into path segments.

    Empty segments (``//``) and ``.`` are dropped; ``..`` and NUL bytes raise
    ``PathOutsideRoot``. ``/static/`` itself yields no segments.
    """
    if not request_path.startswith(STATIC_PREFIX) or "\x00" in request_path:
        raise PathOutsideRoot(request_path)

    segments = []
    for segment in request_path[len(STATIC_PREFIX) :].split("/"):
        if segment == "..":
            raise PathOutsideRoot(request_path)
        if segment and segment != ".":
            segments.append(segment)
    return segments


def resolve_static_path(directory: str, request_path: str) -> Path:
    """Return the resolved file a ``/static/`` request path points at.

    Symlinks are followed, so a link leading out of ``directory`` is refused
    as well. A path with no segments resolves to ``directory`` itself.
    """
    root = Path(directory).resolve()
    target = root.joinpath(*static_segments(request_path)).resolve()
    if not target.is_relative_to(root):
        raise PathOutsideRoot(request_path)
    return target
