import re
from dataclasses import dataclass, field
from typing import FrozenSet
from urllib.parse import urlsplit

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", flags=re.IGNORECASE)


class UrlNormalizer:
    """Strategy interface."""
    def normalize(self, s: str) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class GuessComUrlNormalizer(UrlNormalizer):
    """
    Turns what people paste into the URL box ("spotify", "x.com/tos",
    "//example.com/legal") into an absolute http(s) URL.
    Returns "" for blank input so callers can raise their own validation error.
    Input with whitespace or "@" is not a bare host and comes back unchanged.
    """
    default_scheme: str = "https"
    guess_com_if_no_dot: bool = True
    no_guess_hosts: FrozenSet[str] = field(default_factory=lambda: frozenset({"localhost"}))

    def normalize(self, s: str) -> str:
        s = (s or "").strip()
        if not s:
            return ""

        if s.startswith("//"):
            s = s[2:]

        if _SCHEME_RE.match(s):
            scheme = urlsplit(s).scheme.lower()
            if scheme not in ("http", "https"):
                raise ValueError(f"Unsupported URL scheme: {scheme}")
            return s

        if "@" in s or re.search(r"\s", s):
            return s

        parts = s.split("/", 1)
        host = parts[0].strip()
        rest = ("/" + parts[1]) if len(parts) > 1 else ""

        # only a bare name is guessed; "acme:8080" is left alone
        no_guess = {h.lower() for h in self.no_guess_hosts}
        if (
            self.guess_com_if_no_dot
            and "." not in host
            and ":" not in host
            and host.lower() not in no_guess
        ):
            host = host + ".com"

        return f"{self.default_scheme}://" + host + rest
