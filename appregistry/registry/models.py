"""Registry data models -- registrations, page windows, and metadata options."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ApplicationType(str, Enum):
    """Kinds of application that can be registered.

    Declaration order defines the natural ordering of registrations.
    """

    APP = "app"
    SOURCE = "source"
    PROCESSOR = "processor"
    SINK = "sink"
    TASK = "task"

    @property
    def ordinal(self) -> int:
        return list(ApplicationType).index(self)


@dataclass
class AppRegistration:
    """A single registered application."""

    name: str
    type: ApplicationType
    uri: str
    metadata_uri: Optional[str] = None

    @property
    def key(self) -> tuple[str, ApplicationType]:
        return (self.name, self.type)

    @property
    def qualified_id(self) -> str:
        return f"{self.type.value}/{self.name}"

    def sort_key(self) -> tuple[int, str]:
        return (self.type.ordinal, self.name)

    def __lt__(self, other: AppRegistration) -> bool:
        if not isinstance(other, AppRegistration):
            return NotImplemented
        return self.sort_key() < other.sort_key()


@dataclass(frozen=True)
class PageRequest:
    """A requested window over an ordered sequence."""

    page: int = 0
    size: int = 20

    def __post_init__(self):
        if self.page < 0:
            raise ValueError("Page index must not be less than zero")
        if self.size < 0:
            raise ValueError("Page size must not be less than zero")

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass
class Page:
    """One page of registrations plus the total they were cut from."""

    content: list[AppRegistration] = field(default_factory=list)
    request: PageRequest = field(default_factory=PageRequest)
    total_elements: int = 0

    @property
    def number(self) -> int:
        return self.request.page

    @property
    def size(self) -> int:
        return self.request.size

    @property
    def total_pages(self) -> int:
        if self.size == 0:
            return 1
        return math.ceil(self.total_elements / self.size)


@dataclass
class ConfigurationProperty:
    """A configuration option exposed by an application's metadata."""

    id: str
    name: str = ""
    type: str = ""
    default_value: object = None
    description: str = ""
    deprecated: bool = False


@dataclass
class DetailedAppRegistration:
    """A registration together with its configuration options."""

    registration: AppRegistration
    options: list[ConfigurationProperty] = field(default_factory=list)

    def add_option(self, option: ConfigurationProperty) -> None:
        self.options.append(option)
