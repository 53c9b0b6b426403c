"""
Tags - Shared classification values for site plugins.

Tags are immutable and shared: many plugins reference the same instance
(e.g. ``Tags.Language.SPANISH``), none of them owns it.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TagCategory(str, Enum):
    """Classification axes a tag can belong to."""

    MEDIA = "media"
    LANGUAGE = "language"
    SOURCE = "source"
    RATING = "rating"
    ACCESSIBILITY = "accessibility"


class Tag(BaseModel):
    """An enumerated classification value."""

    model_config = ConfigDict(frozen=True)

    category: TagCategory = Field(..., description="Classification axis")
    label: str = Field(..., min_length=1, description="Display label")

    def __str__(self) -> str:
        return f"{self.category.value}:{self.label}"


def _tag(category: TagCategory, label: str) -> Tag:
    return Tag(category=category, label=label)


class Tags:
    """Namespace of all known tags."""

    class Media:
        MANGA = _tag(TagCategory.MEDIA, "Manga")
        MANHWA = _tag(TagCategory.MEDIA, "Manhwa")
        MANHUA = _tag(TagCategory.MEDIA, "Manhua")
        COMIC = _tag(TagCategory.MEDIA, "Comic")
        ANIME = _tag(TagCategory.MEDIA, "Anime")
        NOVEL = _tag(TagCategory.MEDIA, "Novel")

    class Language:
        MULTILINGUAL = _tag(TagCategory.LANGUAGE, "Multilingual")
        ARABIC = _tag(TagCategory.LANGUAGE, "Arabic")
        CHINESE = _tag(TagCategory.LANGUAGE, "Chinese")
        ENGLISH = _tag(TagCategory.LANGUAGE, "English")
        FRENCH = _tag(TagCategory.LANGUAGE, "French")
        GERMAN = _tag(TagCategory.LANGUAGE, "German")
        INDONESIAN = _tag(TagCategory.LANGUAGE, "Indonesian")
        ITALIAN = _tag(TagCategory.LANGUAGE, "Italian")
        JAPANESE = _tag(TagCategory.LANGUAGE, "Japanese")
        KOREAN = _tag(TagCategory.LANGUAGE, "Korean")
        PORTUGUESE = _tag(TagCategory.LANGUAGE, "Portuguese")
        RUSSIAN = _tag(TagCategory.LANGUAGE, "Russian")
        SPANISH = _tag(TagCategory.LANGUAGE, "Spanish")
        THAI = _tag(TagCategory.LANGUAGE, "Thai")
        TURKISH = _tag(TagCategory.LANGUAGE, "Turkish")
        VIETNAMESE = _tag(TagCategory.LANGUAGE, "Vietnamese")

    class Source:
        OFFICIAL = _tag(TagCategory.SOURCE, "Official")
        AGGREGATOR = _tag(TagCategory.SOURCE, "Aggregator")
        SCANLATOR = _tag(TagCategory.SOURCE, "Scanlator")
        PIRATED = _tag(TagCategory.SOURCE, "Pirated")

    class Rating:
        SAFE = _tag(TagCategory.RATING, "Safe")
        SUGGESTIVE = _tag(TagCategory.RATING, "Suggestive")
        EROTICA = _tag(TagCategory.RATING, "Erotica")
        PORNOGRAPHIC = _tag(TagCategory.RATING, "Pornographic")

    class Accessibility:
        REGION_LOCKED = _tag(TagCategory.ACCESSIBILITY, "Region Locked")
        DOMAIN_ROTATION = _tag(TagCategory.ACCESSIBILITY, "Domain Rotation")

    @classmethod
    def all(cls) -> List[Tag]:
        """Get every tag declared in the namespace."""
        groups = [cls.Media, cls.Language, cls.Source, cls.Rating, cls.Accessibility]
        return [
            value
            for group in groups
            for value in vars(group).values()
            if isinstance(value, Tag)
        ]

    @classmethod
    def find(cls, label: str) -> List[Tag]:
        """Find tags by case-insensitive label."""
        needle = label.strip().casefold()
        return [tag for tag in cls.all() if tag.label.casefold() == needle]


__all__ = ["TagCategory", "Tag", "Tags"]
