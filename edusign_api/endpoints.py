"""Edusign API endpoints and default headers."""

BASE_URL = "https://ext.edusign.fr/v1"

# Заголовки по умолчанию; Authorization добавляет клиент
DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

# GROUP
GROUPS = "/group"
GROUP = "/group/{group_uid}"

# COURSE
COURSES = "/course"
COURSE = "/course/{course_uid}"
COURSE_LOCK = "/course/lock/{course_uid}"
COURSE_ATTENDANCE = "/course/attendance/{course_uid}"
COURSE_SIGNATURE_LINKS = "/course/get-signature-links/{course_uid}"
COURSE_PROFESSOR_SIGNATURE_LINKS = "/course/get-professors-signature-links/{course_uid}"
COURSE_SEND_SIGN_EMAILS = "/course/send-sign-emails"

# STUDENT
STUDENTS = "/student"
STUDENT = "/student/{student_uid}"
STUDENT_BY_EMAIL = "/student/by-email/{email}"
JUSTIFIED_ABSENCE = "/justified-absence"

# TEACHER
PROFESSORS = "/professor"
PROFESSOR = "/professor/{teacher_uid}"
PROFESSOR_BY_EMAIL = "/professor/by-email/{email}"

# DOCUMENT
STUDENT_ATTENDANCE_SHEET = "/document/student/courses-between-dates"
