"""
Scroll-subject location.

The host snapshots the page into a ``PageModel``; locator strategies are
tried in priority order and the first match becomes the ``ScrollSubject``
the capture run scrolls and the stitcher crops to. The subject is returned
to the caller, never cached: re-detecting after the page mutates is the
caller's decision.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence, Tuple
from urllib.parse import urlparse

from longshot.capture.models import ContainerBounds
from longshot.pipeline.geometry import StitchMode, custom_container_mode, whole_page_mode

logger = logging.getLogger(__name__)

# A container must scroll by more than this to count as scrollable.
SCROLL_SLACK = 10

JIRA_ISSUE_PATH = re.compile(r"/browse/[A-Z][A-Z0-9]*-\d+")


@dataclass(frozen=True)
class ElementInfo:
    tag: str
    element_id: str = ""
    classes: Tuple[str, ...] = ()
    overflow_y: str = "visible"
    scroll_height: float = 0.0
    client_height: float = 0.0
    rect: Optional[ContainerBounds] = None

    def is_scrollable(self) -> bool:
        return (
            self.overflow_y in ("auto", "scroll")
            and self.scroll_height > self.client_height + SCROLL_SLACK
        )

    def describe(self) -> str:
        name = self.tag.lower()
        if self.element_id:
            name += f"#{self.element_id}"
        if self.classes:
            name += "." + ".".join(self.classes)
        return name


@dataclass(frozen=True)
class PageModel:
    url: str = ""
    scroll_height: float = 0.0
    client_height: float = 0.0
    viewport_width: float = 0.0
    viewport_height: float = 0.0
    device_pixel_ratio: float = 1.0
    elements: Tuple[ElementInfo, ...] = ()
    meta: dict = field(default_factory=dict)

    def find(self, element_id: str = None, css_class: str = None) -> Optional[ElementInfo]:
        for element in self.elements:
            if element_id is not None and element.element_id != element_id:
                continue
            if css_class is not None and css_class not in element.classes:
                continue
            return element
        return None


@dataclass(frozen=True)
class ScrollSubject:
    """What gets scrolled during capture: the document or one container."""
    kind: str                              # "document" | "container"
    scroll_height: float
    client_height: float
    bounds: Optional[ContainerBounds] = None
    source: str = "document"               # locator that produced it
    description: str = ""

    def stitch_mode(self, overlap_height: float = 75, device_pixel_ratio: float = 1.0) -> StitchMode:
        if self.kind == "container" and self.bounds is not None:
            return custom_container_mode(self.bounds, overlap_height, device_pixel_ratio)
        return whole_page_mode(overlap_height, device_pixel_ratio)


class ScrollLocator(Protocol):
    name: str

    def detect(self, page: PageModel) -> Optional[ScrollSubject]:
        ...


def _container(element: ElementInfo, source: str) -> Optional[ScrollSubject]:
    if element.rect is None:
        return None
    return ScrollSubject(
        kind="container",
        scroll_height=element.scroll_height,
        client_height=element.client_height,
        bounds=element.rect,
        source=source,
        description=element.describe(),
    )


class JiraLocator:
    """Jira issue pages scroll an inner panel instead of the document."""

    name = "jira"

    CONTAINER_CLASSES = ("issue-view",)
    CONTAINER_IDS = ("issue-content",)

    def is_jira(self, page: PageModel) -> bool:
        parsed = urlparse(page.url)
        if (parsed.hostname or "").endswith(".atlassian.net") and JIRA_ISSUE_PATH.search(parsed.path):
            return True
        if page.find(element_id="issue-content") and page.find(css_class="issue-view"):
            return True
        return "jira" in str(page.meta.get("application-name", "")).lower()

    def detect(self, page: PageModel) -> Optional[ScrollSubject]:
        if not self.is_jira(page):
            return None

        candidates = [page.find(css_class=c) for c in self.CONTAINER_CLASSES]
        candidates += [page.find(element_id=i) for i in self.CONTAINER_IDS]
        candidates += [e for e in page.elements if e.is_scrollable()]

        for element in candidates:
            if element is not None and element.is_scrollable():
                return _container(element, self.name)
        return None


class DocumentLocator:
    """The document itself scrolls."""

    name = "document"

    def detect(self, page: PageModel) -> Optional[ScrollSubject]:
        if page.scroll_height > page.client_height + SCROLL_SLACK:
            return ScrollSubject(
                kind="document",
                scroll_height=page.scroll_height,
                client_height=page.client_height,
                source=self.name,
            )
        return None


class OverflowLocator:
    """The scrollable element holding the most content."""

    name = "overflow"

    def detect(self, page: PageModel) -> Optional[ScrollSubject]:
        scrollable = [e for e in page.elements if e.is_scrollable() and e.rect is not None]
        if not scrollable:
            return None
        best = max(scrollable, key=lambda e: e.scroll_height)
        return _container(best, self.name)


DEFAULT_LOCATORS = (JiraLocator(), DocumentLocator(), OverflowLocator())


def locate_scroll_subject(page: PageModel, locators: Sequence[ScrollLocator] = DEFAULT_LOCATORS) -> ScrollSubject:
    """Return the first locator match, falling back to the document."""
    for locator in locators:
        subject = locator.detect(page)
        if subject is not None:
            logger.info(f"Scroll subject found by {locator.name}: {subject.kind} {subject.description}".rstrip())
            return subject

    logger.info("No scrollable container found, falling back to the document")
    return ScrollSubject(
        kind="document",
        scroll_height=page.scroll_height,
        client_height=page.client_height,
        source="fallback",
    )
