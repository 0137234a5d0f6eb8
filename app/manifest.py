"""
app/manifest.py

Fixed manifest of the CSV exports the dashboard knows how to analyze.

Each entry records the load batch the file belongs to and the documented
date columns used both by the range filter and by the bounds extractor.
"""

from __future__ import annotations

from dataclasses import dataclass

CORE_BATCH = "core"
EXTENDED_BATCH = "extended"

SOCIAL_DATE_FIELDS: tuple[str, ...] = ("Date", "Publish time", "publish_time", "date")
WEB_DATE_FIELDS: tuple[str, ...] = ("Date", "date", "Date Range")
UTM_DATE_FIELDS: tuple[str, ...] = ("Date + hour (YYYYMMDDHH)", "Date", "date")
YOUTUBE_CONTENT_DATE_FIELDS: tuple[str, ...] = ("Video publish time", "Date", "date")


@dataclass(frozen=True)
class DatasetSpec:
    """
    One known CSV export.
    """

    filename: str
    platform: str
    batch: str
    date_fields: tuple[str, ...]


DATASET_MANIFEST: tuple[DatasetSpec, ...] = (
    DatasetSpec("Email_Campaign_Performance.csv", "email", CORE_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("FB_Videos.csv", "facebook", CORE_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("FB_Posts.csv", "facebook", CORE_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("IG_Posts.csv", "instagram", CORE_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("YouTube_Age.csv", "youtube", CORE_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("YouTube_Gender.csv", "youtube", CORE_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("YouTube_Geography.csv", "youtube", CORE_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("YouTube_Subscription_Status.csv", "youtube", CORE_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("YouTube_Content.csv", "youtube", CORE_BATCH, YOUTUBE_CONTENT_DATE_FIELDS),
    DatasetSpec("GA_Demographics.csv", "web", CORE_BATCH, WEB_DATE_FIELDS),
    DatasetSpec("GA_Traffic_Acquisition.csv", "web", CORE_BATCH, WEB_DATE_FIELDS),
    DatasetSpec("GA_Pages_And_Screens.csv", "web", CORE_BATCH, WEB_DATE_FIELDS),
    DatasetSpec("FB_Follows.csv", "facebook", EXTENDED_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("FB_Reach.csv", "facebook", EXTENDED_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("FB_Visits.csv", "facebook", EXTENDED_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("FB_Interactions.csv", "facebook", EXTENDED_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("IG_Follows.csv", "instagram", EXTENDED_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("IG_Reach.csv", "instagram", EXTENDED_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("IG_Visits.csv", "instagram", EXTENDED_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("IG_Interactions.csv", "instagram", EXTENDED_BATCH, SOCIAL_DATE_FIELDS),
    DatasetSpec("GA_UTMs.csv", "utm", EXTENDED_BATCH, UTM_DATE_FIELDS),
)

MANIFEST_BY_FILENAME: dict[str, DatasetSpec] = {spec.filename: spec for spec in DATASET_MANIFEST}


def filenames_for_batch(batch: str) -> tuple[str, ...]:
    """
    Return manifest filenames belonging to *batch*, in manifest order.
    """

    return tuple(spec.filename for spec in DATASET_MANIFEST if spec.batch == batch)


def known_date_fields() -> dict[str, tuple[str, ...]]:
    """
    Return the documented date columns keyed by filename.
    """

    return {spec.filename: spec.date_fields for spec in DATASET_MANIFEST}
