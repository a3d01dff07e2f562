"""HTTP idempotency middleware for booking writes."""

import json
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from backend.app.bookings.errors import BookingError
from backend.app.db.repositories import IdempotencyStatus, IdempotencyStore, StoredResponse

IDEMPOTENT_REPLAY_HEADER = "X-Idempotent-Replay"


def _in_progress() -> tuple[int, dict[str, Any], dict[str, str]]:
    return (
        409,
        {
            "code": "idempotency_in_progress",
            "detail": "Request with this idempotency key is still in progress",
        },
        {},
    )


class IdempotencyMiddleware:
    """Middleware for HTTP-level idempotency.

    - Reads the Idempotency-Key header on write endpoints
    - Stores the full response envelope (status, headers, body)
    - Replays completed responses exactly, adding X-Idempotent-Replay
    - Returns 409 while a request with the same key is in flight
    - Releases the key when the handler rejects the request with a
      booking error, so the client may fix the request and retry
    """

    def __init__(self, store: IdempotencyStore, ttl_seconds: int = 24 * 3600) -> None:
        """Initialize idempotency middleware.

        Args:
            store: Idempotency store implementation
            ttl_seconds: TTL for idempotency records (default 24h)
        """
        self._store = store
        self._ttl_seconds = ttl_seconds

    def wrap_handler(
        self,
        handler: Callable[[dict[str, Any]], dict[str, Any]],
        user_id: str,
        status_code: int = 200,
    ) -> Callable[[dict[str, Any], str | None], tuple[int, dict[str, Any], dict[str, str]]]:
        """Wrap a handler function with idempotency logic.

        Args:
            handler: Handler that returns a JSON-ready dict body
            user_id: User ID from auth; keys are scoped per user
            status_code: Status code of a successful response

        Returns:
            Wrapped handler that takes (request, idempotency_key) and returns
            (status_code, body, headers)
        """

        def wrapped_handler(
            request: dict[str, Any], idempotency_key: str | None
        ) -> tuple[int, dict[str, Any], dict[str, str]]:
            if idempotency_key is None:
                return (status_code, handler(request), {})

            ttl_until = datetime.now() + timedelta(seconds=self._ttl_seconds)
            if self._store.set_pending(idempotency_key, user_id, ttl_until):
                return self._execute(handler, request, idempotency_key, user_id, ttl_until, status_code)

            record = self._store.get(idempotency_key, user_id)
            if record is None:
                # Expired between claim and read; another request may claim it first
                if self._store.set_pending(idempotency_key, user_id, ttl_until):
                    return self._execute(
                        handler, request, idempotency_key, user_id, ttl_until, status_code
                    )
                return _in_progress()

            if record.status == IdempotencyStatus.completed and record.response is not None:
                stored = record.response
                replay_headers = dict(stored.headers)
                replay_headers[IDEMPOTENT_REPLAY_HEADER] = "true"
                return (stored.status_code, json.loads(stored.body.decode("utf-8")), replay_headers)

            if record.status == IdempotencyStatus.pending:
                return _in_progress()

            # Previous attempt failed unexpectedly; do not replay its details
            return (
                500,
                {
                    "code": "idempotency_failed",
                    "detail": "Previous request with this idempotency key failed",
                    "key": idempotency_key,
                },
                {},
            )

        return wrapped_handler

    def _execute(
        self,
        handler: Callable[[dict[str, Any]], dict[str, Any]],
        request: dict[str, Any],
        key: str,
        user_id: str,
        ttl_until: datetime,
        status_code: int,
    ) -> tuple[int, dict[str, Any], dict[str, str]]:
        try:
            body = handler(request)
        except BookingError:
            self._store.release(key, user_id)
            raise
        except Exception:
            self._store.set_error(key, user_id, ttl_until)
            raise

        headers = {"Content-Type": "application/json"}
        self._store.set_completed(
            key,
            user_id,
            ttl_until,
            StoredResponse(
                status_code=status_code,
                headers=headers,
                body=json.dumps(body).encode("utf-8"),
            ),
        )
        return (status_code, body, headers)
