"""Outbound email: subscriber notifications through SparkPost, or a no-op."""

from __future__ import annotations

import datetime as dt
import html
from typing import Protocol

from getback.config.settings import GetBackSettings
from getback.infrastructure.logging import get_logger
from getback.security.http_client import SecureHttpClient
from getback.shared.exceptions import KeyMissingError


class Emailer(Protocol):
    def is_send_active(self) -> bool: ...

    def subscriber_notification(
        self,
        recipients: list[str],
        origin: str,
        destination: str,
        trip_date: dt.date,
        trip_hour: int,
        trip_quarter_hour: int,
        contact_email: str,
    ) -> None: ...


def format_trip_time(trip_hour: int, trip_quarter_hour: int) -> str:
    """12-hour clock rendering, e.g. ``1:15 PM``."""
    display_hour = trip_hour % 12 or 12
    suffix = "PM" if trip_hour >= 12 else "AM"
    return f"{display_hour}:{trip_quarter_hour:02d} {suffix}"


class DisabledEmailer:
    def __init__(self) -> None:
        self._log = get_logger("disabled-emailer")

    def is_send_active(self) -> bool:
        return False

    def subscriber_notification(
        self,
        recipients: list[str],
        origin: str,
        destination: str,
        trip_date: dt.date,
        trip_hour: int,
        trip_quarter_hour: int,
        contact_email: str,
    ) -> None:
        self._log.info("notification_skipped", "Not notifying subscribers", recipients=len(recipients))


class SparkPostEmailer:
    def __init__(
        self,
        *,
        api_key: str,
        from_address: str,
        endpoint: str,
        http_client: SecureHttpClient | None = None,
    ) -> None:
        if not api_key.strip():
            raise KeyMissingError("SPARKPOST_API_KEY")
        self._api_key = api_key
        self._from_address = from_address
        self._endpoint = endpoint
        self._http = http_client or SecureHttpClient(timeout=10.0, max_retries=1, service_name="sparkpost")
        self._log = get_logger("production-emailer")

    def is_send_active(self) -> bool:
        return True

    def subscriber_notification(
        self,
        recipients: list[str],
        origin: str,
        destination: str,
        trip_date: dt.date,
        trip_hour: int,
        trip_quarter_hour: int,
        contact_email: str,
    ) -> None:
        if not recipients:
            self._log.debug("notification_no_recipients", "No recipients for notifications")
            return

        when = f"{trip_date.isoformat()} at {format_trip_time(trip_hour, trip_quarter_hour)}"
        body = (
            f"<p>A shared trip from {origin} to {destination} on {when} is now available. "
            f"Contact {html.escape(contact_email)} to ride along.</p>"
        )
        response = self._http.post_json(
            self._endpoint,
            payload={
                "content": {
                    "from": self._from_address,
                    "subject": "GetBack Notification",
                    "html": body,
                },
                "recipients": [{"address": recipient} for recipient in recipients],
            },
            headers={"Authorization": self._api_key},
        )
        accepted = (response.get("results") or {}).get("total_accepted_recipients")
        if accepted != len(recipients):
            self._log.error(
                "notification_partial",
                "Failed to send all notifications to subscribers",
                accepted=accepted,
                requested=len(recipients),
            )


def get_emailer(settings: GetBackSettings) -> Emailer:
    if settings.mail_enabled:
        return SparkPostEmailer(
            api_key=settings.sparkpost_api_key or "",
            from_address=settings.mail_from,
            endpoint=settings.sparkpost_url,
        )
    return DisabledEmailer()


__all__ = ["DisabledEmailer", "Emailer", "SparkPostEmailer", "format_trip_time", "get_emailer"]
