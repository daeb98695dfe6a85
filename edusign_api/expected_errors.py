"""Remote error messages that call sites treat as normal outcomes.

Edusign reports business conditions only through English message text, so
these strings are matched verbatim. A call site whose entry is ``ANY_MESSAGE``
treats every error envelope as "entity absent". Transport failures
(``NetworkError``) are never expected.
"""
from typing import Dict, FrozenSet

from .exceptions import NetworkError, RemoteError

ALREADY_LOCKED_ERROR_MESSAGE = "Course already locked"
STUDENT_ALREADY_ADDED_TO_COURSE_ERROR_MESSAGE = "Student already in the list"
COURSE_NOT_FOUND_ERROR_MESSAGE = "No course with this ID found"
PROFESSOR_NOT_FOUND_ERROR_MESSAGE = "professor not found"
PROFESSOR_DELETED_ERROR_MESSAGE = "professor was deleted"

ANY_MESSAGE = "*"

# call site -> сообщения, которые не считаются ошибкой
EXPECTED_ERRORS: Dict[str, FrozenSet[str]] = {
    "group": frozenset({ANY_MESSAGE}),
    "course": frozenset({COURSE_NOT_FOUND_ERROR_MESSAGE}),
    "lock_course": frozenset({ALREADY_LOCKED_ERROR_MESSAGE}),
    "add_student_to_course": frozenset({STUDENT_ALREADY_ADDED_TO_COURSE_ERROR_MESSAGE}),
    "student_lookup": frozenset({ANY_MESSAGE}),
    "professor_lookup": frozenset({
        PROFESSOR_NOT_FOUND_ERROR_MESSAGE,
        PROFESSOR_DELETED_ERROR_MESSAGE,
    }),
}


def is_expected(call_site: str, error: RemoteError) -> bool:
    """True если ошибка входит в белый список для call_site."""
    if isinstance(error, NetworkError):
        return False
    messages = EXPECTED_ERRORS.get(call_site, frozenset())
    return ANY_MESSAGE in messages or error.message in messages
