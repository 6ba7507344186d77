"""Identity and dismissal patterns for auto-generated alerts.

Auto-generated ids have the shape ``auto-<sessionId>-<kind>-<generation>``
where ``generation`` is the synthesis time in epoch milliseconds, so the
same (session, kind) yields a fresh id on every pass. The dismissal
pattern drops the generation: ``auto-<sessionId>-<kind>``.

Parsing anchors on the closed set of alert kinds rather than on a
trailing-digits heuristic, so a session id that itself ends in digits
(``auto-run-42-error``) is not mistaken for a generation stamp.
"""

import re
from dataclasses import dataclass

from fleetwatch.alerts.schemas import VALID_ALERT_KINDS

AUTO_PREFIX = "auto-"

_KIND_ALTERNATION = "|".join(sorted(VALID_ALERT_KINDS, key=len, reverse=True))
_AUTO_ID_RE = re.compile(
    rf"^auto-(?P<session>.+)-(?P<kind>{_KIND_ALTERNATION})(?:-(?P<generation>\d+))?$"
)


@dataclass(frozen=True)
class AutoAlertIdentity:
    """Decomposed auto-generated alert id."""

    session_id: str
    kind: str
    generation: int | None = None

    @property
    def pattern(self) -> str:
        return dismissal_pattern(self.session_id, self.kind)


def auto_alert_id(session_id: str, kind: str, generation: int) -> str:
    """Build the id of a synthesised alert."""
    return f"{AUTO_PREFIX}{session_id}-{kind}-{generation}"


def dismissal_pattern(session_id: str, kind: str) -> str:
    """The suppressible pattern for a (session, kind) pair."""
    return f"{AUTO_PREFIX}{session_id}-{kind}"


def parse_auto_alert_id(alert_id: str) -> AutoAlertIdentity | None:
    """Decompose an auto-generated id.

    Returns:
        AutoAlertIdentity, or None if the id is not of the
        ``auto-<session>-<kind>[-<generation>]`` shape.
    """
    match = _AUTO_ID_RE.match(alert_id)
    if match is None:
        return None
    generation = match.group("generation")
    return AutoAlertIdentity(
        session_id=match.group("session"),
        kind=match.group("kind"),
        generation=int(generation) if generation is not None else None,
    )


def pattern_for_alert_id(alert_id: str) -> str | None:
    """Dismissal pattern for an id, or None for regular persisted ids."""
    identity = parse_auto_alert_id(alert_id)
    return identity.pattern if identity is not None else None


def is_auto_alert_id(alert_id: str) -> bool:
    return parse_auto_alert_id(alert_id) is not None
