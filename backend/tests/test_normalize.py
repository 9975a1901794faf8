from __future__ import annotations
from datetime import datetime, timezone

import pytest

from jobhub.crawlers.base import SourceTag
from jobhub.crawlers.normalize import RawJob, normalize, normalize_canonical

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)

MALFORMED = [
    {},
    {"job_title": None, "employer_name": {"nested": True}, "job_min_salary": "100k"},
    {"title": 12345, "company": None, "location": None, "salary_min": True},
    {"title": ["list"], "owner": None, "descriptionBreakdown": "oops", "createdAt": "not a date"},
    {"slug": None, "created_at": -5, "tags": "python"},
]


@pytest.mark.parametrize("source", list(SourceTag))
@pytest.mark.parametrize("payload", MALFORMED)
def test_normalize_is_total(source, payload):
    job = normalize(RawJob(source, payload), now=NOW)

    assert job.id
    assert job.title
    assert job.employer_name
    assert job.apply_url
    assert job.posted_at.tzinfo is not None
    if job.min_salary is not None and job.max_salary is not None:
        assert job.min_salary <= job.max_salary


@pytest.mark.parametrize("payload", [None, "string", 42, ["a"]])
def test_normalize_accepts_non_mapping_payloads(payload):
    job = normalize(payload, SourceTag.PRIMARY, now=NOW)

    assert job.title == "Job"
    assert job.employer_name == "Unknown"
    assert job.apply_url == "#"
    assert job.posted_at == NOW


def test_missing_fields_get_documented_defaults():
    job = normalize(RawJob(SourceTag.FIREHOSE_B, {"company_name": "  "}), now=NOW)

    assert job.title == "Job"
    assert job.employer_name == "Unknown"
    assert job.apply_url == "#"
    assert job.description == ""
    assert job.posted_at_utc == "2026-10-17T12:00:00Z"
    assert job.id.startswith("arbeitnow:")


def test_reversed_salary_bounds_are_swapped():
    job = normalize(
        RawJob(SourceTag.PRIMARY, {"job_id": "x", "job_min_salary": 150000, "job_max_salary": 90000.0}),
        now=NOW,
    )

    assert (job.min_salary, job.max_salary) == (90000, 150000)
    assert job.salary_label() == "$90k - $150k"


@pytest.mark.parametrize("bad", ["120000", True, float("nan"), -10, None, {"amount": 1}])
def test_non_numeric_salary_is_absent(bad):
    job = normalize(RawJob(SourceTag.REGIONAL, {"salary_min": bad, "salary_max": 80000}), now=NOW)

    assert job.min_salary is None
    assert job.max_salary == 80000
    assert job.salary_label() == "Competitive"


def test_primary_pass_through_revalidates_fields():
    raw = {
        "job_id": "j-1",
        "job_title": "  Product Manager ",
        "employer_name": "Acme",
        "employer_logo": "",
        "job_description": None,
        "job_apply_link": "https://acme.example/apply",
        "job_city": "Pune",
        "job_state": None,
        "job_country": "IN",
        "job_posted_at_datetime_utc": "2026-10-15T09:30:00+05:30",
        "job_highlights": {"Responsibilities": ["Own roadmap", 7, ""], "Benefits": "none"},
    }

    job = normalize(RawJob(SourceTag.PRIMARY, raw), now=NOW)

    assert job.id == "jsearch:j-1"
    assert job.title == "Product Manager"
    assert job.employer_logo_url is None
    assert job.description == ""
    assert job.location_label() == "Pune, IN"
    assert job.posted_at_utc == "2026-10-15T04:00:00Z"
    assert job.highlights == {"Responsibilities": ("Own roadmap", "7")}


def test_epoch_milliseconds_are_understood():
    job = normalize(RawJob(SourceTag.FIREHOSE_A, {"createdAt": 1791100000000}), now=NOW)

    assert job.posted_at == datetime.fromtimestamp(1791100000, tz=timezone.utc)


def test_canonical_round_trip_keeps_identity():
    job = normalize(RawJob(SourceTag.PRIMARY, {"job_id": "j-2", "job_title": "QA", "job_min_salary": 10}), now=NOW)

    again = normalize_canonical(job.to_dict())

    assert again == job


def test_canonical_job_is_immutable():
    job = normalize(RawJob(SourceTag.PRIMARY, {"job_id": "j-3"}), now=NOW)

    with pytest.raises(AttributeError):
        job.title = "changed"  # type: ignore[misc]


def test_unknown_source_tag_uses_canonical_shape():
    job = normalize({"title": "Welder", "employer_name": "Forge"}, "bogus", now=NOW)

    assert job.title == "Welder"
    assert job.employer_name == "Forge"
    assert job.source == SourceTag.WAREHOUSE.value
    assert job.posted_at == NOW
