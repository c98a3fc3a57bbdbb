from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

from pydantic import ValidationError

from .normalizer import normalize
from .renderer import render_page
from .sanitize import sanitize_title
from .store import OptionStore, setup_complete_option, theme_data_option
from .theme_data import ThemeData, ThemeRequest

logger = logging.getLogger(__name__)

MENU_NAME = "Primary Menu"
MENU_LOCATION = "primary"
PAGE_TITLES = ("Home", "About", "Services", "Blog", "Contact")

_UNSPLASH = "https://images.unsplash.com/"
PAGE_IMAGES = {
    "Home": _UNSPLASH + "photo-1497366216548-37526070297c?w=1920&h=600&fit=crop",
    "About": _UNSPLASH + "photo-1522071820081-009f0129c71c?w=1920&h=400&fit=crop",
    "Services": _UNSPLASH + "photo-1460925895917-afdab827c52f?w=1920&h=400&fit=crop",
    "Blog": _UNSPLASH + "photo-1499750310107-5fef28a66643?w=1920&h=400&fit=crop",
    "Contact": _UNSPLASH + "photo-1423666639041-f56000c27a9a?w=1920&h=400&fit=crop",
}
TEAM_IMAGE = _UNSPLASH + "photo-1600880292203-757bb62b4baf?w=600&h=800&fit=crop"
SERVICE_IMAGES = (
    _UNSPLASH + "photo-1454165804606-c3d57bc86b40?w=400&h=300&fit=crop",
    _UNSPLASH + "photo-1551434678-e076c223a692?w=400&h=300&fit=crop",
    _UNSPLASH + "photo-1552664730-d307ca884978?w=400&h=300&fit=crop",
    _UNSPLASH + "photo-1553877522-43269d4ea984?w=400&h=300&fit=crop",
)
REASONS = (
    "Professional expertise and experience",
    "Customer-focused approach",
    "Quality results guaranteed",
    "Competitive pricing",
    "Dedicated support team",
)


class SiteContent(Protocol):
    """The slice of the CMS the bootstrap writes to."""

    def find_page(self, title: str) -> Optional[int]: ...

    def insert_page(self, title: str, content: str) -> int: ...

    def set_front_page(self, page_id: int) -> None: ...

    def set_posts_page(self, page_id: int) -> None: ...

    def menu_exists(self, name: str) -> bool: ...

    def create_menu(self, name: str, items: List[Tuple[str, int]]) -> int: ...

    def assign_menu(self, location: str, menu_id: int) -> None: ...


@dataclass
class InMemorySite:
    """SiteContent kept in dicts, for tests and dry runs."""

    pages: Dict[int, Dict[str, str]] = field(default_factory=dict)
    menus: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    locations: Dict[str, int] = field(default_factory=dict)
    front_page: Optional[int] = None
    posts_page: Optional[int] = None
    _next_id: int = 0

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def find_page(self, title: str) -> Optional[int]:
        for pid, page in self.pages.items():
            if page["title"] == title:
                return pid
        return None

    def insert_page(self, title: str, content: str) -> int:
        pid = self._new_id()
        self.pages[pid] = {"title": title, "content": content}
        return pid

    def set_front_page(self, page_id: int) -> None:
        self.front_page = page_id

    def set_posts_page(self, page_id: int) -> None:
        self.posts_page = page_id

    def menu_exists(self, name: str) -> bool:
        return any(m["name"] == name for m in self.menus.values())

    def create_menu(self, name: str, items: List[Tuple[str, int]]) -> int:
        mid = self._new_id()
        self.menus[mid] = {"name": name, "items": list(items)}
        return mid

    def assign_menu(self, location: str, menu_id: int) -> None:
        self.locations[location] = menu_id


def page_bodies(data: ThemeData) -> Dict[str, str]:
    """Block markup for each initial page, keyed by page title."""
    business = data.business_type.lower()
    services = list(zip(data.content.services, SERVICE_IMAGES))
    return {
        "Home": render_page("home", image=PAGE_IMAGES["Home"], hero=data.content.hero),
        "About": render_page(
            "about",
            image=PAGE_IMAGES["About"],
            about=data.content.about,
            business_type=business,
            reasons=REASONS,
            team_image=TEAM_IMAGE,
        ),
        "Services": render_page(
            "services", image=PAGE_IMAGES["Services"], business_type=business, services=services
        ),
        "Blog": render_page("blog", image=PAGE_IMAGES["Blog"]),
        "Contact": render_page(
            "contact",
            image=PAGE_IMAGES["Contact"],
            site_name=data.site_name,
            email=f"info@{sanitize_title(data.site_name, 'example')}.com",
        ),
    }


class InitialContent:
    """One-time pages and menu for a freshly activated generated theme."""

    def __init__(self, store: OptionStore) -> None:
        self.store = store

    def theme_data(self, slug: str, site_name: str = "") -> ThemeData:
        stored = self.store.get_option(theme_data_option(slug))
        if stored:
            try:
                return ThemeData.model_validate(stored)
            except ValidationError as e:
                logger.warning("Stored theme data for %s is unusable: %s", slug, e)
        return normalize(ThemeRequest(site_name=site_name or slug, business_type="Business"))

    def create(self, slug: str, site: SiteContent, site_name: str = "") -> bool:
        """Returns False when this theme was already set up."""
        flag = setup_complete_option(slug)
        if self.store.get_option(flag):
            return False

        data = self.theme_data(slug, site_name)
        page_ids: Dict[str, int] = {}
        for title, body in page_bodies(data).items():
            pid = site.find_page(title)
            if pid is None:
                pid = site.insert_page(title, body)
            page_ids[title] = pid

        site.set_front_page(page_ids["Home"])
        site.set_posts_page(page_ids["Blog"])

        if not site.menu_exists(MENU_NAME):
            menu_id = site.create_menu(MENU_NAME, [(t, page_ids[t]) for t in PAGE_TITLES])
            site.assign_menu(MENU_LOCATION, menu_id)

        self.store.set_option(flag, True)
        logger.info("Created initial pages for %s: %s", slug, ", ".join(page_ids))
        return True
