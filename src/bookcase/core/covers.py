# ABOUTME: Cover thumbnail loading with Pillow, the shared placeholder image, and cover cleanup.
# ABOUTME: A cover that cannot be loaded is replaced by the placeholder, never raised.

import logging
from pathlib import Path

from PIL import Image

logger = logging.getLogger(__name__)

THUMBNAIL_WIDTH = 64
_PLACEHOLDER_SIZE = (THUMBNAIL_WIDTH, 96)
_PLACEHOLDER_COLOR = (176, 176, 176)


class CoverLoadError(Exception):
    """Raised when a cover image file cannot be read or decoded."""


def make_placeholder() -> Image.Image:
    """Create the placeholder cover shown for books without a usable cover."""
    return Image.new("RGB", _PLACEHOLDER_SIZE, _PLACEHOLDER_COLOR)


def _open_thumbnail(cover_path: str) -> Image.Image:
    """Load cover_path scaled to THUMBNAIL_WIDTH, keeping the aspect ratio.

    Raises:
        CoverLoadError: If the file is missing or not a decodable image.
    """
    try:
        with Image.open(Path(cover_path)) as img:
            img.load()
            width, height = img.size
            if width == 0 or height == 0:
                raise CoverLoadError(f"Empty image: {cover_path}")
            new_height = max(1, round(height * THUMBNAIL_WIDTH / width))
            return img.resize((THUMBNAIL_WIDTH, new_height), Image.Resampling.LANCZOS)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise CoverLoadError(f"{cover_path}: {exc}") from exc


def load_thumbnail(cover_path: str | None, placeholder: Image.Image) -> Image.Image:
    """Return the cover thumbnail, or placeholder when there is none or it fails to load."""
    if not cover_path:
        return placeholder

    try:
        return _open_thumbnail(cover_path)
    except CoverLoadError as exc:
        logger.warning("Could not load cover image: %s", exc)
        return placeholder


def discard_cover(cover_path: str | None, cover_dir: Path | None) -> bool:
    """Delete an extracted cover file once its book is gone.

    Only files inside cover_dir are touched; a cover that lives anywhere else
    belongs to someone else. Returns True if a file was deleted.
    """
    if not cover_path or cover_dir is None:
        return False

    target = Path(cover_path).resolve()
    if not target.is_relative_to(cover_dir.resolve()):
        return False

    try:
        target.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.warning("Could not delete cover image %s: %s", target, exc)
        return False
    return True
