"""Site model returned by the /sites route."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from stackex.codec.values import URL, Convertible


class SiteType(Enum):
    MAIN_SITE = "main_site"
    META_SITE = "meta_site"


class SiteState(Enum):
    NORMAL = "normal"
    CLOSED_BETA = "closed_beta"
    OPEN_BETA = "open_beta"
    LINKED_META = "linked_meta"


@dataclass
class Site(Convertible):
    """A site of the network.

    ``api_site_parameter`` is the value to pass as the ``site`` parameter
    when calling per-site routes.
    """
    api_site_parameter: str | None = None
    name: str | None = None
    audience: str | None = None
    site_url: URL | None = None
    logo_url: URL | None = None
    icon_url: URL | None = None
    favicon_url: URL | None = None
    site_type: SiteType | None = None
    site_state: SiteState | None = None
    launch_date: datetime | None = None
    open_beta_date: datetime | None = None
    closed_beta_date: datetime | None = None
    aliases: list[URL] = field(default_factory=list)
    markdown_extensions: list[str] = field(default_factory=list)
