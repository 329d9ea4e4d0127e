"""
Email sending for sync summaries and failures.
"""

import logging
import traceback

from msgraph.generated.models.body_type import BodyType
from msgraph.generated.models.email_address import EmailAddress
from msgraph.generated.models.item_body import ItemBody
from msgraph.generated.models.message import Message
from msgraph.generated.models.recipient import Recipient
from msgraph.generated.users.item.send_mail.send_mail_post_request_body import (
    SendMailPostRequestBody,
)

from core.config import SYNC_FROM_EMAIL, SYNC_REPORT_EMAIL
from core.graph_client import get_graph_client
from services.sync import SyncSummary, format_summary

logger = logging.getLogger(__name__)


def build_message(subject: str, body_text: str, to_email: str) -> SendMailPostRequestBody:
    message = Message(
        subject=subject,
        body=ItemBody(content_type=BodyType.Text, content=body_text),
        to_recipients=[Recipient(email_address=EmailAddress(address=to_email))],
    )
    return SendMailPostRequestBody(message=message, save_to_sent_items=True)


def summary_subject(summary: SyncSummary) -> str:
    status = "with errors" if summary.failed or summary.unresolved else "OK"
    prefix = "Time Sync (dry run)" if summary.dry_run else "Time Sync"
    return f"{prefix} {summary.start_date} to {summary.end_date}: {status}"


async def send_summary_email(
    summary: SyncSummary, from_email: str = SYNC_FROM_EMAIL, to_email: str = SYNC_REPORT_EMAIL
):
    """Send the run summary."""
    graph = get_graph_client()
    request_body = build_message(summary_subject(summary), format_summary(summary), to_email)
    await graph.users.by_user_id(from_email).send_mail.post(request_body)
    logger.info("Sent summary email to %s", to_email)


async def send_error_email(
    error: Exception, from_email: str = SYNC_FROM_EMAIL, to_email: str = SYNC_REPORT_EMAIL
):
    """Send error notification email. Failures to send are logged, not raised."""
    graph = get_graph_client()
    body_text = (
        "An error occurred while syncing calendar events to the time tracker:\n\n"
        f"{''.join(traceback.format_exception(error))}"
    )
    request_body = build_message("Time Sync - Script Error", body_text, to_email)

    try:
        await graph.users.by_user_id(from_email).send_mail.post(request_body)
        logger.info("Sent error email to %s", to_email)
    except Exception as e:
        logger.error("Failed to send error email: %s", e)
