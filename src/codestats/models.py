"""Data types exchanged with the Code::Stats API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from codestats.levels import get_level, get_level_percentage


@dataclass(frozen=True)
class MachineInfo:
    xps: int = 0
    new_xps: int = 0


@dataclass(frozen=True)
class LanguageInfo:
    xps: int = 0
    new_xps: int = 0


def _xp_totals(raw: object, name: str) -> dict:
    """Decode a {name: {"xps": int, "new_xps": int}} map into (xps, new_xps) pairs."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise TypeError(f"{name} must be an object, got {type(raw).__name__}")
    totals = {}
    for key, entry in raw.items():
        if not isinstance(entry, dict):
            raise TypeError(f"{name}[{key!r}] must be an object, got {type(entry).__name__}")
        totals[key] = (_as_int(entry.get("xps", 0)), _as_int(entry.get("new_xps", 0)))
    return totals


def _as_int(value: object) -> int:
    """Accept JSON integers only (bool is rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected integer, got {value!r}")
    return value


@dataclass(frozen=True)
class UserProfile:
    """Public profile of a Code::Stats user."""

    user: str
    total_xp: int = 0
    new_xp: int = 0
    machines: dict[str, MachineInfo] = field(default_factory=dict)
    languages: dict[str, LanguageInfo] = field(default_factory=dict)
    dates: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: object) -> UserProfile:
        """Build a profile from the decoded /api/users/{username} body.

        Missing keys default to zero/empty. Raises TypeError when the body
        has the wrong shape.
        """
        if not isinstance(data, dict):
            raise TypeError(f"profile must be an object, got {type(data).__name__}")
        user = data.get("user", "")
        if not isinstance(user, str):
            raise TypeError(f"user must be a string, got {user!r}")
        dates_raw = data.get("dates") or {}
        if not isinstance(dates_raw, dict):
            raise TypeError(f"dates must be an object, got {type(dates_raw).__name__}")
        return cls(
            user=user,
            total_xp=_as_int(data.get("total_xp", 0)),
            new_xp=_as_int(data.get("new_xp", 0)),
            machines={
                name: MachineInfo(xps, new_xps)
                for name, (xps, new_xps) in _xp_totals(data.get("machines"), "machines").items()
            },
            languages={
                name: LanguageInfo(xps, new_xps)
                for name, (xps, new_xps) in _xp_totals(data.get("languages"), "languages").items()
            },
            dates={day: _as_int(xp) for day, xp in dates_raw.items()},
        )

    @property
    def level(self) -> int:
        return get_level(self.total_xp)

    @property
    def level_percentage(self) -> float:
        return get_level_percentage(self.total_xp)

    def top_languages(self, limit: int = 10) -> list[tuple[str, LanguageInfo]]:
        """Languages sorted by total XP descending, ties broken by name."""
        ranked = sorted(self.languages.items(), key=lambda item: (-item[1].xps, item[0]))
        return ranked[:limit]


@dataclass
class LanguageXP:
    language: str
    xp: int

    def to_dict(self) -> dict:
        return {"language": self.language, "xp": self.xp}


@dataclass
class Pulse:
    """A batch of XP gains per language, stamped with when the code was written.

    A naive coded_at is taken as local time.
    """

    coded_at: datetime
    xps: list[LanguageXP] = field(default_factory=list)

    @classmethod
    def now(cls, xps: list[LanguageXP]) -> Pulse:
        return cls(coded_at=datetime.now().astimezone(), xps=list(xps))

    @property
    def aware_coded_at(self) -> datetime:
        if self.coded_at.tzinfo is None:
            return self.coded_at.astimezone()
        return self.coded_at

    def to_dict(self) -> dict:
        return {
            "coded_at": self.aware_coded_at.isoformat(),
            "xps": [entry.to_dict() for entry in self.xps],
        }


def parse_language_xp(text: str) -> LanguageXP:
    """Parse a 'LANGUAGE=XP' string, e.g. 'Python=12'.

    The split happens on the last '=' so language names may contain '='.
    Raises ValueError on malformed input.
    """
    language, sep, amount = text.rpartition("=")
    language = language.strip()
    if not sep or not language:
        raise ValueError(f"Expected LANGUAGE=XP, got {text!r}")
    try:
        xp = int(amount.strip())
    except ValueError:
        raise ValueError(f"XP for {language!r} must be an integer, got {amount!r}") from None
    return LanguageXP(language=language, xp=xp)
