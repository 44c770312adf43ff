"""
Navigation guard for the signage surface.

Signage content is fixed at deploy time. Any attempt to move the surface to
another origin is treated as a fault or a hostile redirect and denied, and
content may never open an auxiliary window. The policy is the same in
developer mode.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit
from urllib.request import url2pathname

from ..utils.logging import VERBOSE, get_logger
from .session import SessionContext

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


class Verdict(Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class Origin:
    """URL origin: scheme, host and effective port.

    ``file:`` URLs have an origin made of the scheme alone.
    """

    scheme: str
    host: str = ""
    port: Optional[int] = None

    def __str__(self) -> str:
        if self.scheme == "file":
            return "file://"
        if self.port is None:
            return f"{self.scheme}://{self.host}"
        return f"{self.scheme}://{self.host}:{self.port}"


@dataclass(frozen=True)
class NavigationDecision:
    """Verdict for one navigation attempt.

    Attributes:
        target: URL the content tried to reach
        target_origin: Parsed origin of the target (None when unparseable)
        verdict: ALLOW or DENY
        reason: Short explanation, logged on denial
    """

    target: str
    target_origin: Optional[Origin]
    verdict: Verdict
    reason: str

    @property
    def allowed(self) -> bool:
        return self.verdict is Verdict.ALLOW


def parse_origin(url: str) -> Optional[Origin]:
    """Parse the origin of ``url``.

    Returns:
        The origin, or None when the URL has no scheme or an invalid port
    """
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if not scheme:
        return None
    if scheme == "file":
        return Origin(scheme="file")

    host = (parts.hostname or "").lower()
    if port is None:
        port = _DEFAULT_PORTS.get(scheme)
    return Origin(scheme=scheme, host=host, port=port)


def _file_path(url: str) -> Path:
    return Path(url2pathname(urlsplit(url).path)).resolve()


class NavigationGuard:
    """Allow-list navigation policy bound to the bundled content origin."""

    def __init__(self, context: SessionContext) -> None:
        self.context = context
        self.logger = get_logger("kiosk.navigation")

        content_url = context.content_url
        origin = parse_origin(content_url)
        if origin is None:
            raise ValueError(f"Content URL has no origin: {content_url}")

        self.content_origin = origin
        self.content_root = (
            _file_path(content_url).parent if origin.scheme == "file" else None
        )
        self.denied_count = 0

    def evaluate_navigation(self, target: str) -> NavigationDecision:
        """Decide whether the surface may navigate to ``target``."""
        target_origin = parse_origin(target)

        if target_origin is None:
            return self._deny(target, None, "unparseable target")

        if target_origin != self.content_origin:
            return self._deny(
                target, target_origin, f"origin {target_origin} is not {self.content_origin}"
            )

        if (
            self.context.settings.navigation.restrict_to_content_root
            and self.content_root is not None
            and not _file_path(target).is_relative_to(self.content_root)
        ):
            return self._deny(target, target_origin, "outside the content directory")

        self.logger.log(VERBOSE, f"Navigation allowed: {target}")
        return NavigationDecision(target, target_origin, Verdict.ALLOW, "bundled origin")

    def evaluate_auxiliary_surface(self, target: str) -> NavigationDecision:
        """Decide on a request to open a new window; always denied."""
        return self._deny(target, parse_origin(target), "auxiliary surfaces are never created")

    def _deny(
        self, target: str, target_origin: Optional[Origin], reason: str
    ) -> NavigationDecision:
        self.denied_count += 1
        self.logger.warning(f"Navigation denied to {target!r}: {reason}")
        return NavigationDecision(target, target_origin, Verdict.DENY, reason)
