"""Image resource lookup used when materialising image insertions.

Loaders are synchronous and keyed by name.  A loader returns ``None`` for an
unknown name; :func:`load_image` turns that into
:class:`~styledmarkup.errors.ResourceNotFoundError`.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Union

from styledmarkup.errors import ResourceNotFoundError
from styledmarkup.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImageHandle:
    """Opaque reference to an image asset."""

    name: str
    path: Optional[Path] = None
    media_type: str = ""
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def uri(self) -> str:
        """Location usable by a renderer, falling back to the bare name."""
        return self.path.as_posix() if self.path is not None else self.name


class ImageLoader(Protocol):
    def lookup_image(self, name: str) -> Optional[ImageHandle]:
        ...


class MappingImageLoader:
    """Serve images from an in-memory ``name -> ImageHandle`` mapping."""

    def __init__(self, images: Optional[Mapping[str, ImageHandle]] = None) -> None:
        self._images = dict(images or {})

    @classmethod
    def from_names(cls, *names: str) -> MappingImageLoader:
        return cls({name: ImageHandle(name=name) for name in names})

    def lookup_image(self, name: str) -> Optional[ImageHandle]:
        return self._images.get(name)


class DirectoryImageLoader:
    """Look images up as ``<root>/<name><ext>`` for the known extensions."""

    EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".pdf")

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def lookup_image(self, name: str) -> Optional[ImageHandle]:
        # Names never escape the image directory.
        if not name or "/" in name or "\\" in name or name.startswith("."):
            logger.debug("Rejected image name %r", name)
            return None
        candidates = [self.root / name]
        candidates.extend(self.root / f"{name}{ext}" for ext in self.EXTENSIONS)
        for path in candidates:
            if path.is_file():
                media_type = mimetypes.guess_type(path.name)[0] or ""
                logger.debug("Resolved image %r to %s", name, path)
                return ImageHandle(name=name, path=path, media_type=media_type)
        logger.debug("No image named %r under %s", name, self.root)
        return None


def load_image(loader: Optional[ImageLoader], name: str) -> ImageHandle:
    """Return the image called *name* or raise :class:`ResourceNotFoundError`."""
    if loader is None:
        raise ResourceNotFoundError(name, "no image loader configured")
    handle = loader.lookup_image(name)
    if handle is None:
        raise ResourceNotFoundError(name)
    return handle
