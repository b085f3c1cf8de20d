"""Data models for the portfolio dataset.

Every model is a frozen dataclass and every collection is a tuple, so a
snapshot can be shared freely between the store, the synchronizer and the
CLI without anyone editing it in place.

Category and status values that this version does not know (written by a
newer release or edited by hand) are kept as plain strings, so they survive
a load/save cycle unchanged.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


class Category(str, Enum):
    """Fixed set of project categories."""

    BRANDING = "BRANDING"
    SPACE = "SPACE"
    CONTENT = "CONTENT"
    DIGITAL = "DIGITAL"


class ProjectStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


def _known_or_raw(enum_cls, raw):
    try:
        return enum_cls(raw)
    except ValueError:
        return str(raw)


def enum_text(value) -> str:
    """Text of an enum member, or the raw string of an unrecognised value."""
    return value.value if isinstance(value, Enum) else str(value)


def new_archive_id() -> str:
    """Return a collision-resistant id for a new archive item."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Project:
    """A portfolio project with its embedded gallery images."""

    id: str
    title: str
    category: Category | str = Category.BRANDING
    client: str = ""
    status: ProjectStatus | str = ProjectStatus.IN_PROGRESS
    date: str = ""  # ISO calendar date, e.g. 2004-03-12
    description: str = ""
    image_urls: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": enum_text(self.category),
            "client": self.client,
            "status": enum_text(self.status),
            "date": self.date,
            "description": self.description,
            "imageUrls": list(self.image_urls),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        image_urls = data.get("imageUrls") or []
        if not isinstance(image_urls, list):
            raise ValueError("imageUrls must be a list")
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            category=_known_or_raw(Category, data.get("category", Category.BRANDING.value)),
            client=str(data.get("client", "")),
            status=_known_or_raw(ProjectStatus, data.get("status", ProjectStatus.IN_PROGRESS.value)),
            date=str(data.get("date", "")),
            description=str(data.get("description", "")),
            image_urls=tuple(str(url) for url in image_urls),
        )


@dataclass(frozen=True)
class ArchiveItem:
    """One line of the archive log. ``image_url`` is empty when there is no thumbnail."""

    id: str
    year: str  # free-form, may be a range like "2015 - Present"
    company: str
    category: str = ""
    project: str = ""
    image_url: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "year": self.year,
            "company": self.company,
            "category": self.category,
            "project": self.project,
            "imageUrl": self.image_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ArchiveItem":
        return cls(
            id=str(data["id"]),
            year=str(data.get("year", "")),
            company=str(data.get("company", "")),
            category=str(data.get("category", "")),
            project=str(data.get("project", "")),
            image_url=str(data.get("imageUrl") or ""),
        )


@dataclass(frozen=True)
class Service:
    id: str
    number: str
    title: str
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "title": self.title,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Service":
        return cls(
            id=str(data["id"]),
            number=str(data.get("number", "")),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
        )


@dataclass(frozen=True)
class AppState:
    """Immutable snapshot of the whole site dataset."""

    projects: tuple[Project, ...] = ()
    archive_items: tuple[ArchiveItem, ...] = ()
    services: tuple[Service, ...] = ()
    site_title: str = ""
    tagline: str = ""
    extra: dict = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict:
        # Unknown top-level keys from newer payloads are written back untouched
        data = dict(self.extra)
        data.update({
            "projects": [p.to_dict() for p in self.projects],
            "archiveItems": [a.to_dict() for a in self.archive_items],
            "services": [s.to_dict() for s in self.services],
            "siteTitle": self.site_title,
            "tagline": self.tagline,
        })
        return data

    @classmethod
    def from_dict(
        cls,
        data: dict,
        on_invalid: Optional[Callable[[str, object, Exception], None]] = None,
    ) -> "AppState":
        """Build a snapshot from its JSON mapping.

        Args:
            data: Mapping with camelCase keys, as written by ``to_dict``
            on_invalid: If given, a record that cannot be parsed is skipped
                and reported as ``on_invalid(collection, record, error)``.
                Otherwise the error propagates.

        Raises:
            ValueError: If a collection is not a list
        """
        known = {"projects", "archiveItems", "services", "siteTitle", "tagline"}
        for key in ("projects", "archiveItems", "services"):
            if not isinstance(data.get(key, []), list):
                raise ValueError(f"{key} must be a list")

        def records(key: str, model) -> tuple:
            parsed = []
            for raw in data.get(key, []):
                try:
                    parsed.append(model.from_dict(raw))
                except (AttributeError, KeyError, TypeError, ValueError) as e:
                    if on_invalid is None:
                        raise
                    on_invalid(key, raw, e)
            return tuple(parsed)

        return cls(
            projects=records("projects", Project),
            archive_items=records("archiveItems", ArchiveItem),
            services=records("services", Service),
            site_title=str(data.get("siteTitle", "")),
            tagline=str(data.get("tagline", "")),
            extra={k: v for k, v in data.items() if k not in known},
        )
