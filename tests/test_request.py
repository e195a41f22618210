"""Tests for journey request URLs and POST bodies."""

from dataclasses import replace
from datetime import datetime

import pytest

from hafas.profiles import DEFAULT_PROFILE, get_profile
from hafas.request import (
    JourneyQuery,
    fix_additional_query,
    journeys_post_data,
    journeys_url,
    product_bit_string,
)

QUERY = JourneyQuery("8011160", "8000152", datetime(2024, 3, 15, 8, 5))


def test_journeys_url_for_db() -> None:
    url = journeys_url(get_profile("db"), QUERY)

    assert url == (
        "http://reiseauskunft.bahn.de/bin/query.exe/dn?"
        "S=8011160!&Z=8000152!&date=15.03.24&time=08:05"
        "&REQ0HafasSearchForw=1"
        "&REQ0JourneyProduct_prod_list_1=11111111111111"
        "&start=yes&sortConnections=minDeparture&h2g-direct=11"
    )


def test_arrivals_and_non_binary() -> None:
    url = journeys_url(get_profile("db"), replace(QUERY, arrivals=True), binary=False)

    assert "REQ0HafasSearchForw=0" in url
    assert "h2g-direct" not in url


def test_profile_formats_and_program() -> None:
    url = journeys_url(get_profile("resrobot"), QUERY)
    assert url.startswith("http://reseplanerare.resrobot.se/bin/query.exe/sn?")
    assert "date=2024-03-15" in url

    url = journeys_url(get_profile("bvg"), QUERY)
    assert url.startswith("http://www.fahrinfo-berlin.de/Fahrinfo/bin/query.bin/dn?")
    assert "prod_list_1=11111111&" in url


def test_additional_items_and_encoding() -> None:
    profile = replace(
        get_profile("db"), additional_url_query="L=vs_java3", encode_url_query=True
    )

    url = journeys_url(profile, QUERY)

    query = url.split("?", 1)[1]
    assert "&" not in query
    assert query.endswith("%26L%3Dvs_java3")


def test_profile_without_base_url() -> None:
    with pytest.raises(ValueError, match="no base URL"):
        journeys_url(DEFAULT_PROFILE, QUERY)


def test_post_data() -> None:
    body = journeys_post_data(get_profile("oebb"), replace(QUERY, max_count=3))

    assert body.startswith('<?xml version="1.0" encoding="iso-8859-1"?><ReqC')
    assert '<Station externalId="8011160" />' in body
    assert f'prod="{"1" * 16}"' in body
    assert '<ReqT a="0" date="2024.03.15" time="08:05" />' in body
    assert 'f="6"' in body


def test_post_data_keeps_larger_counts() -> None:
    body = journeys_post_data(get_profile("db"), replace(QUERY, max_count=12, arrivals=True))

    assert 'f="12"' in body
    assert '<ReqT a="1"' in body


def test_product_bit_string() -> None:
    assert product_bit_string(3) == "111"
    assert product_bit_string(0) == ""


@pytest.mark.parametrize(
    ("items", "expected"), [("", ""), ("a=1", "&a=1"), ("&a=1", "&a=1")]
)
def test_fix_additional_query(items: str, expected: str) -> None:
    assert fix_additional_query(items) == expected
