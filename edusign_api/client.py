"""Main Edusign API client: обёртка над REST API ext.edusign.fr."""
import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import aiohttp

from . import endpoints
from .cache import GroupCache
from .classifier import classify_response
from .config import Settings
from .exceptions import (
    DataNotFoundError, InvalidArgumentError, MissingCredentialError,
    NetworkError, RemoteError,
)
from .expected_errors import (
    PROFESSOR_DELETED_ERROR_MESSAGE, PROFESSOR_NOT_FOUND_ERROR_MESSAGE, is_expected,
)
from .models import (
    Envelope, is_professor_hidden, is_student_hidden, merge_uids,
    pending_signers, to_iso,
)

logger = logging.getLogger(__name__)

# Методы без тела запроса
_BODYLESS_METHODS = ("GET", "DELETE")


def _require(value: Any, name: str) -> Any:
    """Пустой идентификатор: ошибка вызывающего кода, а не Edusign."""
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{name} must not be blank")
    return value


class EdusignClient:
    """Async client for the Edusign API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        settings: Optional[Settings] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Args:
            api_key: API-ключ аккаунта Edusign (приоритетнее settings)
            settings: Настройки клиента; по умолчанию читаются из окружения
            session: Готовая aiohttp-сессия (клиент её не закрывает)
        """
        self.settings = settings or Settings()
        self.api_key = api_key or self.settings.EDUSIGN_API_KEY
        if not self.api_key:
            raise MissingCredentialError("Please provide an Edusign account API key")

        self.base_url = self.settings.EDUSIGN_BASE_URL.rstrip("/")
        self.strict = self.settings.EDUSIGN_STRICT_ERRORS
        self.groups = GroupCache(max_size=self.settings.EDUSIGN_GROUP_CACHE_SIZE)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "EdusignClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ========================================================================
    # TRANSPORT
    # ========================================================================

    def _headers(self) -> Dict[str, str]:
        headers = dict(endpoints.DEFAULT_HEADERS)
        headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.EDUSIGN_TIMEOUT)
            )
            self._owns_session = True
        return self._session

    async def _send(
        self,
        method: str,
        path: str,
        payload: Optional[dict] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Tuple[int, bytes]:
        """Один HTTP-запрос к Edusign. Возвращает (код ответа, сырое тело)."""
        kwargs: Dict[str, Any] = {"headers": self._headers()}
        if params:
            kwargs["params"] = params
        if method not in _BODYLESS_METHODS:
            kwargs["json"] = payload if payload is not None else {}

        logger.debug("Edusign %s %s", method, path)
        try:
            async with self._get_session().request(
                method, f"{self.base_url}{path}", **kwargs
            ) as resp:
                return resp.status, await resp.read()
        except asyncio.TimeoutError:
            logger.error("Таймаут запроса Edusign: %s %s", method, path)
            raise NetworkError(f"Edusign request timed out: {method} {path}")
        except aiohttp.ClientError as e:
            logger.error("Ошибка сети Edusign: %s %s: %s", method, path, e)
            raise NetworkError(str(e) or e.__class__.__name__)

    async def _api(
        self,
        method: str,
        path: str,
        payload: Optional[dict] = None,
        params: Optional[Dict[str, str]] = None,
        strict: Optional[bool] = None,
    ) -> Envelope:
        """Отправляет запрос и классифицирует ответ (strict=None: режим клиента)."""
        status, body = await self._send(method, path, payload, params)
        return classify_response(status, body, strict=self.strict if strict is None else strict)

    async def close(self):
        """Закрыть собственную aiohttp-сессию."""
        if self._owns_session and self._session is not None:
            if not self._session.closed:
                await self._session.close()
            self._session = None

    # ========================================================================
    # GROUP
    # ========================================================================

    async def group(self, group_uid: Optional[str]) -> Optional[dict]:
        """
        Получить группу по ID.

        Returns:
            Группа Edusign или None, если её нет (или ID пустой)
        """
        if group_uid is None or not str(group_uid).strip():
            return None

        cached = self.groups.get(group_uid)
        if cached is not None:
            return cached

        try:
            envelope = await self._api("GET", endpoints.GROUP.format(group_uid=group_uid))
        except RemoteError as e:
            if not is_expected("group", e):
                raise
            logger.warning("Группа %s не найдена в Edusign: %s", group_uid, e.message)
            return None

        if envelope.result is not None:
            self.groups.set(group_uid, envelope.result)
        return envelope.result

    def clear_group_cache(self) -> None:
        """Сбросить кэш групп (например, после изменений в интерфейсе Edusign)."""
        self.groups.clear()

    async def create_or_update_group(
        self,
        name: str,
        student_uids: Optional[List[str]] = None,
        group_uid: Optional[str] = None,
        merge: bool = False,
    ) -> Any:
        """
        Создать группу (без group_uid) или обновить существующую.

        Args:
            name: Название группы
            student_uids: ID студентов группы
            group_uid: ID группы в Edusign; если задан, то PATCH, иначе POST
            merge: При обновлении объединить с текущими студентами группы
                вместо перезаписи списка

        Returns:
            result из ответа Edusign
        """
        students = list(student_uids or [])
        payload = {"group": {"NAME": name, "STUDENTS": students}}

        if not group_uid:
            envelope = await self._api("POST", endpoints.GROUPS, payload, strict=True)
            return envelope.result

        if merge:
            self.groups.invalidate(group_uid)
            existing = await self.group(group_uid) or {}
            payload["group"]["STUDENTS"] = merge_uids(existing.get("STUDENTS"), students)
        payload["group"]["ID"] = group_uid

        try:
            envelope = await self._api("PATCH", endpoints.GROUPS, payload, strict=True)
        finally:
            self.groups.invalidate(group_uid)
        return envelope.result

    async def add_students_to_group(self, group_uid: str, student_uids: List[str]) -> Any:
        """Добавить студентов в группу (без дублей)."""
        _require(group_uid, "group_uid")
        self.groups.invalidate(group_uid)

        group = await self.group(group_uid)
        if group is None:
            raise DataNotFoundError(f"Group {group_uid} not found in Edusign")

        group["STUDENTS"] = merge_uids(group.get("STUDENTS"), student_uids)
        try:
            envelope = await self._api("PATCH", endpoints.GROUPS, {"group": group})
        finally:
            self.groups.invalidate(group_uid)
        return envelope.result

    async def delete_group(self, group_uid: str) -> Any:
        _require(group_uid, "group_uid")
        try:
            envelope = await self._api("DELETE", endpoints.GROUP.format(group_uid=group_uid))
        finally:
            self.groups.invalidate(group_uid)
        return envelope.result

    # ========================================================================
    # COURSE
    # ========================================================================

    async def course(self, course_uid: str) -> Optional[dict]:
        """Получить курс по ID; None, если Edusign его не знает."""
        _require(course_uid, "course_uid")
        try:
            envelope = await self._api("GET", endpoints.COURSE.format(course_uid=course_uid))
        except RemoteError as e:
            if not is_expected("course", e):
                raise
            logger.warning("Курс %s не найден в Edusign", course_uid)
            return None
        return envelope.result

    async def courses(self, group_uid: Optional[str] = None) -> Any:
        """Список курсов, опционально только для одной группы."""
        params = {"groupId": group_uid} if group_uid else None
        envelope = await self._api("GET", endpoints.COURSES, params=params)
        return envelope.result

    @staticmethod
    def _course_payload(
        group_uid: str,
        name: str,
        starts_at: date,
        ends_at: date,
        teacher_uid: str,
        description: Optional[str],
        api_id: Optional[str],
    ) -> dict:
        return {
            "NAME": name,
            "START": to_iso(starts_at),
            "END": to_iso(ends_at),
            "DESCRIPTION": description,
            "PROFESSOR": teacher_uid,
            "SCHOOL_GROUP": [group_uid],
            "ZOOM": False,
            "API_ID": api_id,
        }

    async def create_course(
        self,
        group_uid: str,
        name: str,
        starts_at: date,
        ends_at: date,
        teacher_uid: str,
        description: Optional[str] = None,
        api_id: Optional[str] = None,
    ) -> Any:
        course = self._course_payload(
            group_uid, name, starts_at, ends_at, teacher_uid, description, api_id
        )
        envelope = await self._api("POST", endpoints.COURSES, {"course": course})
        return envelope.result

    async def update_course(
        self,
        course_uid: str,
        group_uid: str,
        name: str,
        starts_at: date,
        ends_at: date,
        teacher_uid: str,
        description: Optional[str] = None,
        api_id: Optional[str] = None,
    ) -> Any:
        _require(course_uid, "course_uid")
        course = {"ID": course_uid}
        course.update(self._course_payload(
            group_uid, name, starts_at, ends_at, teacher_uid, description, api_id
        ))
        envelope = await self._api("PATCH", endpoints.COURSES, {"course": course})
        return envelope.result

    async def delete_course(self, course_uid: str) -> Any:
        _require(course_uid, "course_uid")
        envelope = await self._api("DELETE", endpoints.COURSE.format(course_uid=course_uid))
        return envelope.result

    async def signature_links_for_course(
        self, course_uid: str, student_uids: Optional[List[str]] = None
    ) -> Any:
        """Ссылки на подпись для студентов курса (всех или только перечисленных)."""
        _require(course_uid, "course_uid")
        params = {"studentids": ",".join(student_uids)} if student_uids else None
        envelope = await self._api(
            "GET", endpoints.COURSE_SIGNATURE_LINKS.format(course_uid=course_uid), params=params
        )
        return envelope.result

    async def lock_course(self, course_uid: str) -> Optional[str]:
        """
        Закрыть курс.

        Returns:
            Ссылка на подпись после блокировки; если курс уже закрыт,
            ранее сгенерированный лист присутствия; None, если курса нет
            или Edusign ответил "Course already locked"
        """
        try:
            course = await self.course(course_uid)
            if course is None:
                return None

            if course.get("LOCKED"):
                return course.get("ATTENDANCE_LIST_GENERATED")

            envelope = await self._api("GET", endpoints.COURSE_LOCK.format(course_uid=course_uid))
            result = envelope.result
            return result.get("link") if isinstance(result, dict) else None
        except RemoteError as e:
            if not is_expected("lock_course", e):
                raise
            logger.info("Курс %s уже закрыт", course_uid)
            return None

    async def add_student_to_course(self, course_uid: str, student_uid: str) -> Any:
        _require(course_uid, "course_uid")
        _require(student_uid, "student_uid")
        try:
            envelope = await self._api(
                "PUT",
                endpoints.COURSE_ATTENDANCE.format(course_uid=course_uid),
                {"studentId": student_uid},
            )
        except RemoteError as e:
            if not is_expected("add_student_to_course", e):
                raise
            logger.info("Студент %s уже записан на курс %s", student_uid, course_uid)
            return None
        return envelope.result

    async def send_signature_email(self, course_uid: str) -> Any:
        """Разослать письма на подпись студентам курса, которые ещё не расписались."""
        course = await self.course(course_uid)
        if course is None:
            raise DataNotFoundError(f"Course {course_uid} not found in Edusign")

        students = pending_signers(course)
        if not students:
            logger.info("Курс %s: все студенты уже расписались, письма не нужны", course_uid)
            return None

        envelope = await self._api(
            "POST",
            endpoints.COURSE_SEND_SIGN_EMAILS,
            {"course": course_uid, "students": students},
        )
        return envelope.result

    # ========================================================================
    # STUDENT
    # ========================================================================

    @staticmethod
    def _student_payload(
        first_name: str, last_name: str, email: str, group_uids: Optional[List[str]]
    ) -> dict:
        return {
            "FIRSTNAME": first_name,
            "LASTNAME": last_name,
            "EMAIL": email,
            "SEND_EMAIL_CREDENTIALS": False,
            "GROUPS": list(group_uids or []),
        }

    async def create_student(
        self,
        first_name: str,
        last_name: str,
        email: str,
        group_uids: Optional[List[str]] = None,
    ) -> Any:
        student = self._student_payload(first_name, last_name, email, group_uids)
        envelope = await self._api("POST", endpoints.STUDENTS, {"student": student})
        return envelope.result

    async def update_student(
        self,
        student_uid: str,
        first_name: str,
        last_name: str,
        email: str,
        group_uids: Optional[List[str]] = None,
    ) -> Any:
        _require(student_uid, "student_uid")
        student = {"ID": student_uid}
        student.update(self._student_payload(first_name, last_name, email, group_uids))
        envelope = await self._api("PATCH", endpoints.STUDENTS, {"student": student})
        return envelope.result

    async def create_or_update_student(
        self,
        first_name: str,
        last_name: str,
        email: str,
        student_uid: Optional[str] = None,
        group_uids: Optional[List[str]] = None,
    ) -> Any:
        """
        Обновить студента, найденного по ID (или по email, если ID не задан).

        Если студента нет или он скрыт в Edusign, создаётся новый.
        """
        try:
            if student_uid:
                student = await self.student_by_uid(student_uid)
            else:
                student = await self.student_by_email(email)
        except RemoteError as e:
            if not is_expected("student_lookup", e):
                raise
            logger.info("Студент %s не найден в Edusign (%s), создаём", student_uid or email, e.message)
            student = None

        if not student or is_student_hidden(student):
            return await self.create_student(first_name, last_name, email, group_uids)

        return await self.update_student(student["ID"], first_name, last_name, email, group_uids)

    async def student_by_uid(self, student_uid: str) -> Any:
        _require(student_uid, "student_uid")
        envelope = await self._api(
            "GET", endpoints.STUDENT.format(student_uid=student_uid), strict=True
        )
        return envelope.result

    async def student_by_email(self, email: str) -> Any:
        _require(email, "email")
        envelope = await self._api(
            "GET", endpoints.STUDENT_BY_EMAIL.format(email=quote(email, safe="@")), strict=True
        )
        return envelope.result

    async def declare_absence(
        self,
        student_uid: str,
        course_uid: str,
        absence_type: Any,
        comment: Optional[str] = None,
    ) -> Any:
        """Оформить уважительное отсутствие студента на курсе."""
        _require(student_uid, "student_uid")
        _require(course_uid, "course_uid")
        payload = {
            "STUDENT_ID": student_uid,
            "COURSE_ID": course_uid,
            "TYPE": absence_type,
            "COMMENT": comment,
        }
        envelope = await self._api("POST", endpoints.JUSTIFIED_ABSENCE, payload)
        return envelope.result

    # ========================================================================
    # TEACHER
    # ========================================================================

    async def teacher_by_uid(self, teacher_uid: str) -> Any:
        _require(teacher_uid, "teacher_uid")
        envelope = await self._api(
            "GET", endpoints.PROFESSOR.format(teacher_uid=teacher_uid), strict=True
        )
        return envelope.result

    async def create_professor(self, first_name: str, last_name: str, email: str) -> Any:
        payload = {
            "professor": {
                "FIRSTNAME": first_name,
                "LASTNAME": last_name,
                "EMAIL": email,
            },
            "dontSendCredentials": True,
        }
        envelope = await self._api("POST", endpoints.PROFESSORS, payload)
        return envelope.result

    async def find_or_create_professor(self, first_name: str, last_name: str, email: str) -> Any:
        """
        Найти преподавателя по email, при отсутствии создать.

        Скрытый (удалённый) в Edusign преподаватель считается отсутствующим.
        """
        _require(email, "email")
        try:
            envelope = await self._api(
                "GET", endpoints.PROFESSOR_BY_EMAIL.format(email=quote(email, safe="@")), strict=True
            )
        except RemoteError as e:
            if not is_expected("professor_lookup", e):
                raise
            reason = e.message
        else:
            professor = envelope.result
            if envelope.message == PROFESSOR_NOT_FOUND_ERROR_MESSAGE or not professor:
                reason = PROFESSOR_NOT_FOUND_ERROR_MESSAGE
            elif is_professor_hidden(professor):
                reason = PROFESSOR_DELETED_ERROR_MESSAGE
            else:
                return professor

        logger.info("Преподаватель %s: %s, создаём", email, reason)
        return await self.create_professor(first_name, last_name, email)

    async def teacher_signature_link_for_course(self, course_uid: str) -> Optional[Any]:
        _require(course_uid, "course_uid")
        envelope = await self._api(
            "GET", endpoints.COURSE_PROFESSOR_SIGNATURE_LINKS.format(course_uid=course_uid)
        )
        links = envelope.result
        if not isinstance(links, list) or not links:
            return None
        return links[0]

    # ========================================================================
    # DOCUMENT
    # ========================================================================

    async def student_individual_attendance_sheet_pdf(
        self, student_uid: str, start_date: date, end_date: date
    ) -> Optional[str]:
        """
        Сгенерировать индивидуальный лист присутствия студента за период.

        Returns:
            Имя PDF-файла, сгенерированного Edusign
        """
        _require(student_uid, "student_uid")
        payload = {
            "STUDENT_ID": student_uid,
            "DATE_START": to_iso(start_date),
            "DATE_END": to_iso(end_date),
        }
        envelope = await self._api("POST", endpoints.STUDENT_ATTENDANCE_SHEET, payload)
        result = envelope.result
        return result.get("filename") if isinstance(result, dict) else None
