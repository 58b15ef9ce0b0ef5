import json
import logging

logger = logging.getLogger(__name__)


def _split(text: str) -> list[str]:
    return [tag.strip() for tag in text.split(",") if tag.strip()]


def normalize_tags(value) -> list[str]:
    """
    Turn any accepted tag representation into an ordered list of strings.

    Accepts a list (returned unchanged), a JSON array string, a
    comma-separated string, or nothing.  Order and duplicates are kept.
    Never raises: a string that looks like JSON but does not decode to a
    list is treated as comma-separated text.
    """
    if not value:
        return []
    if isinstance(value, list):
        return value
    if not isinstance(value, str):
        return []

    if value.startswith("["):
        try:
            decoded = json.loads(value)
        except ValueError as exc:
            logger.warning("Could not decode tags %r: %s", value, exc)
        else:
            if isinstance(decoded, list):
                return [str(tag) for tag in decoded]
            logger.warning("Tags %r did not decode to a list", value)

    return _split(value)
