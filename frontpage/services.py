"""Catalogue of BBC World Service front pages, grouped by region.

The dashboard offers these as capture targets; the service name doubles as
the capture's service label and the social rewrite's target language.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class NewsService:
    """A single language service front page."""

    name: str
    url: str


def _bbc(name: str, path: str) -> NewsService:
    return NewsService(name=name, url=f"https://www.bbc.com/{path}")


#: Region → services, in display order.
REGIONS: dict[str, list[NewsService]] = {
    "Africa": [
        _bbc("Gahuza", "gahuza"),
        _bbc("Hausa", "hausa"),
        _bbc("Igbo", "igbo"),
        _bbc("Pidgin", "pidgin"),
        _bbc("Somali", "somali"),
        _bbc("Swahili", "swahili"),
        _bbc("Tigrinya", "tigrinya"),
        _bbc("Yoruba", "africa"),
    ],
    "Asia (Central)": [
        _bbc("Azeri", "azeri"),
        _bbc("Kyrgyz", "kyrgyz"),
        _bbc("Uzbek", "uzbek"),
    ],
    "Asia (East)": [
        _bbc("Burmese", "burmese"),
        _bbc("Indonesia", "indonesia"),
        _bbc("Japanese", "japanese"),
        _bbc("Korean", "korean"),
        _bbc("Thai", "thai"),
        _bbc("Vietnamese", "vietnamese"),
        _bbc("Zhongwen", "zhongwen"),
    ],
    "Asia (South)": [
        _bbc("Bengali", "bengali"),
        _bbc("Dari", "dari"),
        _bbc("Gujarati", "gujarati"),
        _bbc("Hindi", "hindi"),
        _bbc("Marathi", "marathi"),
        _bbc("Nepali", "nepali"),
        _bbc("Pashto", "pashto"),
        _bbc("Punjabi", "punjabi"),
        _bbc("Sinhala", "sinhala"),
        _bbc("Tamil", "tamil"),
        _bbc("Telugu", "telugu"),
        _bbc("Urdu", "urdu"),
    ],
    "Europe": [
        _bbc("Hungarian", "magyarul"),
        _bbc("Polish", "polish"),
        _bbc("Romania", "romania"),
        _bbc("Russian", "russian"),
        _bbc("Serbian", "serbian/lat"),
        _bbc("Ukrainian", "ukrainian"),
    ],
    "Latin America": [
        _bbc("Brasil", "brasil"),
        _bbc("Mundo", "mundo"),
    ],
    "Middle East": [
        _bbc("Arabic", "arabic"),
        _bbc("Persian", "persian"),
        _bbc("Turkce", "turkce"),
    ],
}

DEFAULT_REGION = "Latin America"


def region_names() -> list[str]:
    return list(REGIONS)


def services_for(region: str) -> list[NewsService]:
    """Return the services of *region*, or an empty list for unknown regions."""
    return list(REGIONS.get(region, []))


def find_service(name: str) -> Optional[NewsService]:
    """Look up a service by name (case-insensitive) across all regions."""
    wanted = name.strip().lower()
    for services in REGIONS.values():
        for service in services:
            if service.name.lower() == wanted:
                return service
    return None


def as_dict() -> dict[str, list[dict[str, str]]]:
    """Return the catalogue as JSON-ready data."""
    return {
        region: [{"name": s.name, "url": s.url} for s in services]
        for region, services in REGIONS.items()
    }
