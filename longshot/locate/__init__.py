from .locators import (
    DEFAULT_LOCATORS,
    DocumentLocator,
    ElementInfo,
    JiraLocator,
    OverflowLocator,
    PageModel,
    ScrollLocator,
    ScrollSubject,
    locate_scroll_subject,
)

__all__ = [
    "DEFAULT_LOCATORS",
    "DocumentLocator",
    "ElementInfo",
    "JiraLocator",
    "OverflowLocator",
    "PageModel",
    "ScrollLocator",
    "ScrollSubject",
    "locate_scroll_subject",
]
