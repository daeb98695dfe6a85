"""Classification of raw Edusign HTTP responses."""
import json
import logging
from typing import Union

from .exceptions import (
    BadGatewayError, GatewayTimeoutError, InvalidResponseError, RemoteError
)
from .models import Envelope, envelope_from_payload

logger = logging.getLogger(__name__)

_GATEWAY_ERRORS = {
    502: BadGatewayError,
    504: GatewayTimeoutError,
}


def classify_response(status_code: int, body: Union[bytes, str], strict: bool = True) -> Envelope:
    """
    Превращает HTTP-ответ Edusign в Envelope или типизированную ошибку.

    Args:
        status_code: HTTP-код ответа
        body: Тело ответа (байты или текст, кодировка не гарантирована)
        strict: Бросать RemoteError на конверте со status == "error"

    Returns:
        Envelope ответа

    Raises:
        BadGatewayError, GatewayTimeoutError: 502/504, тело не читается
        InvalidResponseError: Тело не является JSON-конвертом
        RemoteError: Конверт с ошибкой (только при strict)
    """
    gateway_error = _GATEWAY_ERRORS.get(status_code)
    if gateway_error:
        logger.error("Edusign gateway error: HTTP %d", status_code)
        raise gateway_error(f"Edusign responded with HTTP {status_code}")

    # Тело декодируется только после проверки 502/504
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidResponseError(
                f"Edusign returned a non-UTF-8 body (HTTP {status_code}): {body[:200]!r}"
            )

    try:
        payload = json.loads(body)
    except (TypeError, ValueError):
        raise InvalidResponseError(
            f"Edusign returned a non-JSON body (HTTP {status_code}): {str(body)[:200]!r}"
        )

    if not isinstance(payload, dict) or "status" not in payload:
        raise InvalidResponseError(
            f"Edusign returned a body without an envelope (HTTP {status_code})"
        )

    envelope = envelope_from_payload(payload)
    if envelope.error:
        if strict:
            raise RemoteError(envelope.message, status_code=status_code)
        logger.warning("Edusign error envelope ignored (HTTP %d): %s", status_code, envelope.message)

    return envelope
