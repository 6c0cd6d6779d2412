import pytest

from utils.str_utils import camel_to_snake, generate_slug, humanize_field, unique_slug


@pytest.mark.parametrize("title, slug", [
    ("Top 10 Tips: Buying in 2024!", "top-10-tips-buying-in-2024"),
    ("  Sea   View  ", "sea-view"),
    ("Already-hyphenated title", "already-hyphenated-title"),
    ("₹ Prices & Offers", "prices-offers"),
    ("", ""),
])
def test_generate_slug(title, slug):
    assert generate_slug(title) == slug


def test_camel_to_snake():
    assert camel_to_snake("startingPrice") == "starting_price"
    assert camel_to_snake("title") == "title"


def test_humanize_field():
    assert humanize_field("projectName") == "Project Name"
    assert humanize_field("podium_levels") == "Podium Levels"
    assert humanize_field("") == ""


def test_unique_slug_skips_taken_candidates():
    taken = {"sea-view", "sea-view-2"}
    assert unique_slug("sea-view", taken.__contains__) == "sea-view-3"
    assert unique_slug("hilltop", taken.__contains__) == "hilltop"
