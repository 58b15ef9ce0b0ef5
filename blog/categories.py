"""
The fixed set of article categories.

Every place that validates, stores or lists a category goes through
``Category``; there is no other copy of these values.
"""
import enum

# Query-string values meaning "do not filter by category".
ALL_CATEGORIES = frozenset({"All", "Todas"})


class Category(str, enum.Enum):
    TECHNOLOGY = "Technology"
    EDUCATION = "Education"
    LIFESTYLE = "Lifestyle"
    BUSINESS = "Business & Professions"
    ART = "Art & Creativity"
    OPINION = "Opinion / Community"
    OTHER = "Other"

    @classmethod
    def values(cls) -> list[str]:
        return [c.value for c in cls]

    @classmethod
    def parse(cls, value) -> "Category | None":
        """Return the member for *value*, or None when it is not a category."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None
