"""Sidecar path mapper for pages and blog articles.

Each page or article lives on disk as a pair of files under a root
directory (``pages`` or ``blogs/<blog-handle>``):

- ``<root>/<handle>.json`` -- metadata, with ``body_html`` replaced by
  ``{"file": "<handle>.html"}``
- ``<root>/<handle>.html`` -- the body

Unpublished items live under ``<root>/drafts/`` instead.

Mapping resolution for a push:

1. **Pairing** -- a handle only counts if both its ``.json`` and its
   ``.html`` exist in the same directory.
2. **Draft bias** -- if a handle exists both published and as a draft,
   the published copy wins and the draft is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

DRAFTS_DIR = "drafts"


@dataclass(frozen=True, slots=True)
class SidecarSource:
    """A complete local page/article pair.

    Attributes:
        handle: Item handle.
        published: False when the pair lives under ``drafts/``.
        json_path: Relative POSIX path of the metadata file.
        html_path: Relative POSIX path of the body file.
    """

    handle: str
    published: bool
    json_path: str
    html_path: str


class SidecarMapper:
    """Map handles to sidecar file paths under one root directory.

    Args:
        root: Root relative to the output directory (``"pages"``).
    """

    def __init__(self, root: str) -> None:
        self.root = root.strip("/")

    # ------------------------------------------------------------------
    # Handle -> paths
    # ------------------------------------------------------------------

    def stem_for(self, handle: str, published: bool) -> str:
        """Relative path without extension (``pages/drafts/about``)."""
        if published:
            return f"{self.root}/{handle}"
        return f"{self.root}/{DRAFTS_DIR}/{handle}"

    def json_path(self, handle: str, published: bool) -> str:
        return self.stem_for(handle, published) + ".json"

    def html_path(self, handle: str, published: bool) -> str:
        return self.stem_for(handle, published) + ".html"

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, files: set[str]) -> dict[str, SidecarSource]:
        """Pick the authoritative sidecar pair per handle.

        Args:
            files: Relative POSIX paths found under the output directory.

        Returns:
            Handle -> source, with the published copy preferred.
        """
        found: dict[str, SidecarSource] = {}
        for rel in sorted(files):
            path = PurePosixPath(rel)
            if path.suffix != ".json":
                continue
            parent = path.parent.as_posix()
            if parent == self.root:
                published = True
            elif parent == f"{self.root}/{DRAFTS_DIR}":
                published = False
            else:
                continue
            html = path.with_suffix(".html").as_posix()
            if html not in files:
                continue
            handle = path.stem
            if handle in found and found[handle].published:
                continue
            found[handle] = SidecarSource(
                handle=handle,
                published=published,
                json_path=rel,
                html_path=html,
            )
        return found
