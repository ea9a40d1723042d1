"""
KK's Cafe Backend - Image Reference Resolver
=============================================

What:  Computes the final ordered `images` list for a drink on create/update.
Why:   A create/update request can carry three independent image inputs:
       freshly uploaded files, URL-hosted images, and (update only) the
       existing images the editor chose to keep. This module is the single
       place that decides how they merge.
How:   Pure functions of already-decoded form values. No I/O, never raises:
       malformed JSON degrades to "nothing supplied" (or, for urlImages,
       to one raw URL).

Create:
    images = uploaded ++ urls

Update (each step appends):
    1. kept existing images (when keptExistingImages is a JSON array)
    2. uploaded
    3. urls
    4. fallback: result empty AND keptExistingImages said nothing
                 → previous images unchanged

Presence marker:
    keptExistingImages="[]" is an explicit statement ("keep none of them")
    and clears the images. An omitted keptExistingImages is no statement,
    so an otherwise empty request keeps the previous images.
"""

import json
from typing import Any, List, NamedTuple, Optional, Sequence


class ImageResolution(NamedTuple):
    """Resolved image list plus its primary entry ("" when empty)."""
    images: List[str]
    image: str


def _clean_references(values: Sequence[Any]) -> List[str]:
    return [v.strip() for v in values if isinstance(v, str) and v.strip()]


def parse_json_image_list(raw: Optional[str]) -> Optional[List[str]]:
    """
    Decode a JSON array of image references.

    Returns:
        The non-blank string entries, or None when `raw` is absent, is not
        valid JSON, or is JSON but not an array.
    """
    if raw is None:
        return None
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(decoded, list):
        return None
    return _clean_references(decoded)


def parse_url_images(raw: Optional[str]) -> List[str]:
    """
    Decode the urlImages form field.

    Order of interpretation:
        1. JSON array  → its entries
        2. otherwise a non-blank value is a single URL
        3. absent / blank → []
    """
    parsed = parse_json_image_list(raw)
    if parsed is not None:
        return parsed
    if isinstance(raw, str) and raw.strip():
        return [raw.strip()]
    return []


def _resolution(images: List[str]) -> ImageResolution:
    return ImageResolution(images=images, image=images[0] if images else "")


def resolve_create_images(
    uploaded: Sequence[str],
    url_images_raw: Optional[str],
) -> ImageResolution:
    """Uploads first, URL images after."""
    return _resolution(list(uploaded) + parse_url_images(url_images_raw))


def resolve_update_images(
    uploaded: Sequence[str],
    url_images_raw: Optional[str],
    kept_existing_raw: Optional[str],
    previous_images: Sequence[str],
) -> ImageResolution:
    """
    Merge kept, uploaded and URL images for an update.

    Args:
        uploaded: References of files stored for this request, in upload order.
        url_images_raw: Raw urlImages form value (may be None).
        kept_existing_raw: Raw keptExistingImages form value (may be None).
        previous_images: The record's images before this update.
    """
    kept = parse_json_image_list(kept_existing_raw)

    images = list(kept or [])
    images.extend(uploaded)
    images.extend(parse_url_images(url_images_raw))

    if not images and kept is None:
        images = list(previous_images)

    return _resolution(images)
