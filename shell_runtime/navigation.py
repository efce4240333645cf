"""
Navigator abstract interface: the browser history and title binding.

Every call is fire-and-forget; the core never reads anything back.
"""

from abc import ABC, abstractmethod
from typing import List, Tuple


class Navigator(ABC):
    @abstractmethod
    def push_url(self, url: str) -> None:
        ...

    @abstractmethod
    def replace_url(self, url: str) -> None:
        ...

    @abstractmethod
    def set_title(self, title: str) -> None:
        ...


class MemoryNavigator(Navigator):
    """
    History kept in a list, for simulation and tests.

    Fields:
        entries: History entries, oldest first
        title: Last document title written
        log: Every write in order, as (operation, argument)
    """

    def __init__(self, start_url: str = "/"):
        self.entries: List[str] = [start_url]
        self.title = ""
        self.log: List[Tuple[str, str]] = []

    @property
    def current_url(self) -> str:
        return self.entries[-1]

    def push_url(self, url: str) -> None:
        self.entries.append(url)
        self.log.append(("push", url))

    def replace_url(self, url: str) -> None:
        self.entries[-1] = url
        self.log.append(("replace", url))

    def set_title(self, title: str) -> None:
        self.title = title
        self.log.append(("title", title))
