"""
analytics/email_campaign.py

Email campaign analyzer.

Expected file
-------------
Email_Campaign_Performance.csv
    One row per campaign send with counts (sent, opened, clicked, bounces,
    unsubscribes), optional rate columns, and a campaign name.

Formulas
--------
Open Rate        = opened / sent * 100
Click Rate       = clicked / sent * 100
Not Opened       = sent - opened
Opened/No Click  = opened - clicked
Clicked          = clicked

The three funnel segments always sum to ``sent`` exactly because they are
computed from the same integer totals.
"""

from __future__ import annotations

from typing import Any

from analytics.base import (
    BasePlatformAnalyzer,
    Datasets,
    rate,
    snapshot_metrics,
    sum_metric,
    top_n,
)
from app.domain.date_range import DateRangeSelection
from app.mappers.field_resolver import find_field, resolve, resolve_text
from app.manifest import SOCIAL_DATE_FIELDS
from app.parsing.scalars import to_float, to_int
from app.services.csv_loader import RawRow, RawRowSet

EMAIL_FILE = "Email_Campaign_Performance.csv"
TOP_CAMPAIGNS = 5

SENT_FIELDS = ("Emails sent", "emails sent", "Total sent")
OPENED_FIELDS = ("Email opened (MPP excluded)", "Email opened", "opened")
CLICKED_FIELDS = ("Email clicked", "clicked")
BOUNCE_FIELDS = ("Email bounces", "bounces")
UNSUBSCRIBE_FIELDS = ("Email unsubscribes", "unsubscribes")
OPEN_RATE_FIELDS = ("Email open rate (MPP excluded)", "Email open rate", "Open rate")
CLICK_RATE_FIELDS = ("Email click rate", "Click rate")
CAMPAIGN_FIELDS = ("Campaign", "Campaign name", "campaign")


def _totals(rows: RawRowSet) -> dict[str, Any]:
    sent = sum_metric(rows, SENT_FIELDS)
    opened = sum_metric(rows, OPENED_FIELDS)
    clicked = sum_metric(rows, CLICKED_FIELDS)
    return {
        "sent": sent,
        "opened": opened,
        "clicked": clicked,
        "bounces": sum_metric(rows, BOUNCE_FIELDS),
        "unsubscribes": sum_metric(rows, UNSUBSCRIBE_FIELDS),
        "open_rate": rate(opened, sent),
        "click_rate": rate(clicked, sent),
    }


def _funnel(totals: dict[str, Any]) -> dict[str, int]:
    return {
        "not_opened": totals["sent"] - totals["opened"],
        "opened_not_clicked": totals["opened"] - totals["clicked"],
        "clicked": totals["clicked"],
    }


def _rate_column(row: RawRow, candidates: tuple[str, ...], numerator: int, sent: int) -> float:
    """
    Exported rate columns are fractions unless they carry a ``%`` sign.
    Without a rate column the rate is derived from the counts.
    """
    key = find_field(row, candidates)
    if key is None:
        return rate(numerator, sent)
    raw = row[key]
    if isinstance(raw, str) and "%" in raw:
        return to_float(raw)
    return to_float(raw) * 100


def _campaign(row: RawRow) -> dict[str, Any]:
    sent = resolve(row, SENT_FIELDS, coerce=to_int)
    opened = resolve(row, OPENED_FIELDS, coerce=to_int)
    clicked = resolve(row, CLICKED_FIELDS, coerce=to_int)
    return {
        "name": resolve_text(row, CAMPAIGN_FIELDS, "Untitled campaign"),
        "sent": sent,
        "opened": opened,
        "clicked": clicked,
        "unsubscribes": resolve(row, UNSUBSCRIBE_FIELDS, coerce=to_int),
        "open_rate": _rate_column(row, OPEN_RATE_FIELDS, opened, sent),
        "click_rate": _rate_column(row, CLICK_RATE_FIELDS, clicked, sent),
    }


class EmailAnalyzer(BasePlatformAnalyzer):
    """
    Campaign totals, open-rate ranking, and the engagement funnel.
    """

    platform = "email"

    def analyze(self, datasets: Datasets, selection: DateRangeSelection) -> dict[str, Any]:
        current_rows = self.scope(datasets, EMAIL_FILE, selection.current, SOCIAL_DATE_FIELDS)
        comparison_rows = self.scope_comparison(datasets, EMAIL_FILE, selection, SOCIAL_DATE_FIELDS)

        current = _totals(current_rows)
        previous = _totals(comparison_rows) if comparison_rows is not None else None

        engagement = _funnel(current)
        sent = current["sent"]
        return {
            **snapshot_metrics(current, previous),
            "top_campaigns": top_n(
                (_campaign(row) for row in current_rows),
                key=lambda campaign: campaign["open_rate"],
                limit=TOP_CAMPAIGNS,
            ),
            "engagement": engagement,
            "engagement_share": {name: rate(count, sent) for name, count in engagement.items()},
            "comparison_engagement": _funnel(previous) if previous is not None else None,
        }
