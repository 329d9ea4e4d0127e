from services.email import build_message, summary_subject
from services.sync import DaySummary, SyncSummary


def test_summary_subject():
    summary = SyncSummary("2025-11-01", "2025-11-24")
    assert summary_subject(summary) == "Time Sync 2025-11-01 to 2025-11-24: OK"

    summary.days["2025-11-24"] = DaySummary(date="2025-11-24", failed=1)
    summary.dry_run = True
    assert summary_subject(summary) == "Time Sync (dry run) 2025-11-01 to 2025-11-24: with errors"


def test_build_message():
    request_body = build_message("Time Sync", "✓ Added: 3 entries", "me@example.com")

    assert request_body.save_to_sent_items is True
    assert request_body.message.subject == "Time Sync"
    assert request_body.message.body.content == "✓ Added: 3 entries"
    assert request_body.message.to_recipients[0].email_address.address == "me@example.com"
