"""Multi-session expansion for rehearsalplan."""

from dataclasses import replace

from rehearsalplan.errors import InvalidInput
from rehearsalplan.models import Event, Performance, Response, SessionKey

# Expanded ids are original_id * SESSION_ID_BASE + session_index.
SESSION_ID_BASE = 100
MAX_SESSIONS = SESSION_ID_BASE - 1


def encode_session_id(key: SessionKey) -> int:
    """Wire id for one session of a performance."""
    if not 1 <= key.session_index <= MAX_SESSIONS:
        raise InvalidInput(f"Session index out of range: {key.session_index}")
    return key.original_id * SESSION_ID_BASE + key.session_index


def decode_session_id(expanded_id: int) -> SessionKey:
    """Inverse of encode_session_id."""
    original_id, session_index = divmod(expanded_id, SESSION_ID_BASE)
    if session_index == 0:
        raise InvalidInput(f"Not an expanded session id: {expanded_id}")
    return SessionKey(original_id=original_id, session_index=session_index)


def session_title(title: str, session_index: int) -> str:
    return f"{title} (Session {session_index})"


def expand_sessions(event: Event, sessions: int) -> Event:
    """
    Replace every performance by `sessions` independent copies.

    Each participant of an original performance becomes a member of all of
    its copies; availability is unchanged. With sessions == 1 the event is
    returned as is.
    """
    if not 1 <= sessions <= MAX_SESSIONS:
        raise InvalidInput(f"sessions must be between 1 and {MAX_SESSIONS}, got {sessions}")
    if sessions == 1:
        return event

    performances: list[Performance] = []
    for perf in event.performances:
        for s in range(1, sessions + 1):
            performances.append(
                Performance(
                    id=encode_session_id(SessionKey(perf.id, s)),
                    title=session_title(perf.title, s),
                    description=perf.description,
                )
            )

    responses: list[Response] = []
    for response in event.responses:
        expanded_ids = tuple(
            encode_session_id(SessionKey(perf_id, s))
            for perf_id in response.performances
            for s in range(1, sessions + 1)
        )
        responses.append(replace(response, performances=expanded_ids))

    return replace(event, performances=tuple(performances), responses=tuple(responses))
