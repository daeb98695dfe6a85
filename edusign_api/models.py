"""Data models for Edusign API responses."""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Union

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


@dataclass
class Envelope:
    """The {status, message, result} wrapper around every Edusign response."""
    status: str
    message: Optional[str] = None
    result: Any = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS

    @property
    def error(self) -> bool:
        return self.status == STATUS_ERROR


def envelope_from_payload(payload: dict) -> Envelope:
    """Собирает Envelope из распарсенного JSON-ответа."""
    return Envelope(
        status=payload["status"],
        message=payload.get("message"),
        result=payload.get("result"),
    )


# ============================================================================
# ПРОВЕРКИ СОСТОЯНИЯ СУЩНОСТЕЙ
# ============================================================================

def is_student_hidden(student: dict) -> bool:
    """Студент скрыт в Edusign (soft-delete): HIDDEN == 1."""
    return student.get("HIDDEN") == 1


def is_professor_hidden(professor: dict) -> bool:
    """
    Преподаватель скрыт в Edusign.

    У преподавателей HIDDEN это список ID, а не флаг: запись считается удалённой,
    если её собственный ID есть в этом списке.
    """
    hidden = professor.get("HIDDEN") or []
    if not isinstance(hidden, (list, tuple)):
        return False
    return professor.get("ID") in hidden


def pending_signers(course: dict) -> list:
    """ID студентов курса, у которых ещё нет подписи (state пустой)."""
    return [
        student.get("studentId")
        for student in course.get("STUDENTS") or []
        if not student.get("state")
    ]


def merge_uids(existing: Optional[list], new: Optional[list]) -> list:
    """Объединяет списки ID без дублей, сохраняя порядок (сначала существующие)."""
    return list(dict.fromkeys(list(existing or []) + list(new or [])))


def to_iso(value: Union[date, datetime, str, None]) -> Optional[str]:
    """ISO-8601 для дат, которые уходят в Edusign."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    return value.isoformat()
