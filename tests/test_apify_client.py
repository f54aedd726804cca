"""
Tests for Apify acquisition: provider normalizers, de-duplication and the
client's stage logic (HTTP calls are mocked).

Usage:
    pytest tests/test_apify_client.py -v
"""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from leadminer.data.apify_client import (
    MAX_REVIEWS_PER_BUSINESS,
    ApifyReviewClient,
    deduplicate_leads,
    is_bad_rating,
    normalize_google_maps,
    normalize_tripadvisor,
)
from leadminer.data.config import ApifyConfig
from leadminer.data.data_models import LeadSource
from leadminer.data.record_schema import parse_record
from leadminer.errors import ApifyError


SCRAPED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_google_place(place_id="abc", title="Harbor Grill", score=2.4, reviews=3, **overrides):
    place = {
        "placeId": place_id,
        "title": title,
        "totalScore": score,
        "reviewsCount": 140,
        "categoryName": "Seafood restaurant",
        "address": "500 Broadway, Nashville, TN",
        "phoneUnformatted": "+16155550100",
        "website": "https://harborgrill.com",
        "url": "https://maps.google.com/?cid=1",
        "reviews": [
            {
                "stars": 1,
                "text": "Rude staff",
                "publishedAtDate": "2026-02-20T10:00:00.000Z",
                "responseFromOwnerText": "Sorry!" if i == 0 else None,
            }
            for i in range(reviews)
        ],
    }
    place.update(overrides)
    return place


def make_tripadvisor_place(place_id="77", name="Copper Cafe", rating=2.0):
    return {
        "id": place_id,
        "name": name,
        "rating": rating,
        "numberOfReviews": 55,
        "category": "restaurant",
        "address": "12 Pine St, Denver, CO",
        "phone": "+1 303 555 0199",
        "url": "https://tripadvisor.com/x",
        "reviews": [
            {"rating": 2, "title": "Cold food", "publishedDate": "2026-02-11"},
            {"rating": 1, "text": "Never again", "title": "Awful", "publishedDate": "2026-02-01"},
        ],
    }


class TestNormalizeGoogleMaps:

    def test_fields(self):
        raw = normalize_google_maps(make_google_place(), SCRAPED_AT)

        assert raw["id"] == "gm_abc"
        assert raw["source"] == "google_maps"
        assert raw["name"] == "Harbor Grill"
        assert raw["rating"] == 2.4
        assert raw["totalReviews"] == 140
        assert raw["category"] == "Seafood restaurant"
        assert raw["phone"] == "+16155550100"
        assert raw["scrapedAt"] == "2026-03-01T12:00:00Z"
        assert raw["reviews"][0] == {
            "rating": 1,
            "text": "Rude staff",
            "date": "2026-02-20T10:00:00.000Z",
            "ownerResponse": "Sorry!",
        }

    def test_category_fallbacks(self):
        place = make_google_place(categoryName=None, categories=["Diner", "Bar"])
        assert normalize_google_maps(place, SCRAPED_AT)["category"] == "Diner"

        place = make_google_place(categoryName=None)
        assert normalize_google_maps(place, SCRAPED_AT)["category"] == "Business"

    def test_keeps_at_most_ten_reviews(self):
        raw = normalize_google_maps(make_google_place(reviews=25), SCRAPED_AT)
        assert len(raw["reviews"]) == MAX_REVIEWS_PER_BUSINESS

    def test_validates_into_business_record(self):
        record = parse_record(normalize_google_maps(make_google_place(), SCRAPED_AT))

        assert record.source == LeadSource.GOOGLE_MAPS
        assert len(record.reviews) == 3
        assert record.reviews[0].owner_response is True
        assert record.reviews[1].owner_response is False
        assert record.reviews[0].date == datetime(2026, 2, 20, 10, 0, tzinfo=timezone.utc)


class TestNormalizeTripAdvisor:

    def test_fields(self):
        raw = normalize_tripadvisor(make_tripadvisor_place(), SCRAPED_AT)

        assert raw["id"] == "ta_77"
        assert raw["source"] == "tripadvisor"
        assert raw["totalReviews"] == 55
        assert raw["reviews"][0]["text"] == "Cold food"       # title fallback
        assert raw["reviews"][1]["text"] == "Never again"

    def test_location_id_fallback(self):
        place = make_tripadvisor_place()
        del place["id"]
        place["locationId"] = "d123"
        assert normalize_tripadvisor(place, SCRAPED_AT)["id"] == "ta_d123"

    def test_date_only_strings_parse(self):
        record = parse_record(normalize_tripadvisor(make_tripadvisor_place(), SCRAPED_AT))
        assert record.reviews[0].date == datetime(2026, 2, 11, tzinfo=timezone.utc)


class TestFiltersAndDedupe:

    def test_is_bad_rating(self):
        assert is_bad_rating(3.0, 3.0)
        assert is_bad_rating(1.2, 3.0)
        assert not is_bad_rating(3.1, 3.0)
        assert not is_bad_rating(0, 3.0)
        assert not is_bad_rating(None, 3.0)

    def test_dedupe_keeps_more_reviews_at_first_position(self):
        leads = [
            {"name": "Harbor Grill", "address": "500 Broadway, Nashville", "totalReviews": 40, "id": "gm_1"},
            {"name": "Copper Cafe", "address": "12 Pine St", "totalReviews": 10, "id": "gm_2"},
            {"name": "HARBOR GRILL", "address": "500 Broadway, Nashville TN", "totalReviews": 90, "id": "ta_1"},
        ]
        unique = deduplicate_leads(leads)

        assert [lead["id"] for lead in unique] == ["ta_1", "gm_2"]

    def test_dedupe_keeps_first_on_equal_reviews(self):
        leads = [
            {"name": "A", "address": "1 Main", "totalReviews": 5, "id": "first"},
            {"name": "a", "address": "1 Main", "totalReviews": 5, "id": "second"},
        ]
        assert [lead["id"] for lead in deduplicate_leads(leads)] == ["first"]

    def test_different_addresses_kept(self):
        leads = [
            {"name": "Harbor Grill", "address": "500 Broadway", "totalReviews": 1},
            {"name": "Harbor Grill", "address": "9 Ocean Dr", "totalReviews": 1},
        ]
        assert len(deduplicate_leads(leads)) == 2


class TestApifyReviewClient:

    def make_client(self):
        config = ApifyConfig(token="test-token", bad_rating_threshold=3.0, max_results=10)
        return ApifyReviewClient(config=config, poll_interval=0)

    def test_missing_token_raises(self):
        with pytest.raises(ApifyError):
            ApifyReviewClient(config=ApifyConfig(token=None))

    def test_explicit_token_wins(self):
        client = ApifyReviewClient(token="abc", config=ApifyConfig(token=None))
        assert client.token == "abc"

    def test_google_maps_filters_good_ratings(self):
        client = self.make_client()
        items = [
            make_google_place("bad", score=2.1),
            make_google_place("good", score=4.6),
            make_google_place("unrated", score=None),
        ]
        with patch.object(client, "_run_actor", return_value="run-1"), \
                patch.object(client, "_poll_run", return_value=items):
            leads = client.scrape_google_maps("restaurants", "Nashville, TN", 10, SCRAPED_AT)

        assert [lead["id"] for lead in leads] == ["gm_bad"]

    def test_provider_failure_yields_empty_list(self):
        client = self.make_client()
        with patch.object(client, "_run_actor", side_effect=ApifyError("Invalid Apify token")):
            assert client.scrape_tripadvisor("restaurants", "Denver, CO", 10) == []

    def test_scrape_all_merges_and_validates(self):
        client = self.make_client()
        gm = [normalize_google_maps(make_google_place(), SCRAPED_AT)]
        ta = [
            normalize_tripadvisor(make_tripadvisor_place(), SCRAPED_AT),
            normalize_tripadvisor(make_tripadvisor_place("88", name=None), SCRAPED_AT),
        ]
        with patch.object(client, "scrape_google_maps", return_value=gm), \
                patch.object(client, "scrape_tripadvisor", return_value=ta):
            records = client.scrape_all()

        # nameless TripAdvisor item is skipped
        assert [r.id for r in records] == ["gm_abc", "ta_77"]
        assert records[1].source == LeadSource.TRIPADVISOR

    def test_run_actor_submits_run(self):
        client = self.make_client()
        with patch("leadminer.data.apify_client.requests.post") as post:
            post.return_value.status_code = 201
            post.return_value.json.return_value = {"data": {"id": "run-9"}}
            run_id = client._run_actor("some~actor", {"q": 1})

        assert run_id == "run-9"
        assert post.call_args.kwargs["params"] == {"token": "test-token"}
        assert client.get_stats() == {"requests_made": 1}

    def test_run_actor_rejects_bad_token(self):
        client = self.make_client()
        with patch("leadminer.data.apify_client.requests.post") as post:
            post.return_value.status_code = 401
            with pytest.raises(ApifyError, match="Invalid Apify token"):
                client._run_actor("some~actor", {})

    def test_poll_run_fetches_dataset(self):
        client = self.make_client()
        with patch("leadminer.data.apify_client.requests.get") as get:
            run_response = get.return_value
            run_response.status_code = 200
            run_response.json.side_effect = [
                {"data": {"status": "RUNNING"}},
                {"data": {"status": "SUCCEEDED", "defaultDatasetId": "ds-1"}},
                [{"placeId": "x"}],
            ]
            items = client._poll_run("run-1")

        assert items == [{"placeId": "x"}]
        assert get.call_count == 3

    def test_poll_run_failed_status_raises(self):
        client = self.make_client()
        with patch("leadminer.data.apify_client.requests.get") as get:
            get.return_value.status_code = 200
            get.return_value.json.return_value = {"data": {"status": "FAILED"}}
            with pytest.raises(ApifyError, match="FAILED"):
                client._poll_run("run-1")
