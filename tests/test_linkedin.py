"""Tests for LinkedIn URL identity."""

import pytest

from postcredit.core.linkedin import normalize_linkedin_url


def test_strips_query_and_normalizes_host_and_protocol():
    normalized = normalize_linkedin_url(
        "http://linkedin.com/feed/update/urn:li:activity:7345667788990011223/?utm_source=foo&tracking=bar"
    )
    assert normalized == "https://www.linkedin.com/feed/update/urn:li:activity:7345667788990011223"


@pytest.mark.parametrize(
    "raw",
    [
        "https://www.linkedin.com/posts/jane-doe_pricing-activity-123",
        "https://WWW.LinkedIn.com/posts/jane-doe_pricing-activity-123/",
        "linkedin.com/posts/jane-doe_pricing-activity-123?trk=public_post",
        "www.linkedin.com/posts/jane-doe_pricing-activity-123#comments",
        "  http://linkedin.com/posts/jane-doe_pricing-activity-123//  ",
    ],
)
def test_equivalent_forms_share_one_key(raw):
    assert normalize_linkedin_url(raw) == (
        "https://www.linkedin.com/posts/jane-doe_pricing-activity-123"
    )


def test_accepts_article_and_activity_listing_paths():
    assert normalize_linkedin_url("https://www.linkedin.com/pulse/why-roi-matters-jane") == (
        "https://www.linkedin.com/pulse/why-roi-matters-jane"
    )
    assert normalize_linkedin_url("https://linkedin.com/in/jane-doe/recent-activity/all/") == (
        "https://www.linkedin.com/in/jane-doe/recent-activity/all"
    )


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        None,
        42,
        "not a url",
        "https://example.com/posts/abc",
        "https://linkedin.com.evil.io/posts/abc",
        "ftp://linkedin.com/posts/abc",
        "https://www.linkedin.com/in/jane-doe",
        "https://www.linkedin.com/in/jane-doe/recent-activity/all/extra",
        "https://www.linkedin.com/company/acme",
        "https://[::1/posts/abc",
    ],
)
def test_rejects_non_content_urls_without_raising(raw):
    assert normalize_linkedin_url(raw) is None


def test_path_case_is_preserved():
    assert normalize_linkedin_url("https://linkedin.com/posts/Jane-Doe_ABC") == (
        "https://www.linkedin.com/posts/Jane-Doe_ABC"
    )

