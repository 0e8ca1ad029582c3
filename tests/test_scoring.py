import pytest

from playstore_agent.core.scoring import categorize, parse_installs, score_app


def test_top_scores_are_excellent():
    result = score_app(4.6, 150000, "10,000,000+")

    assert result.score == 100
    assert result.category == "excellent"
    assert result.insights == [
        "Excellent user rating",
        "Large user base with extensive feedback",
        "Widely installed app",
    ]


def test_bottom_scores_are_poor():
    result = score_app(2.0, 10, "")

    assert result.score == 20
    assert result.category == "poor"
    assert result.insights[-1] == "Emerging app"


@pytest.mark.parametrize(
    "rating, count, installs, expected",
    [
        (4.5, 100000, "10,000,000+", 100),
        (4.49, 99999, "9,999,999+", 70),
        (4.0, 10000, "1,000,000+", 70),
        (3.5, 1000, "100,000+", 40),
        (3.49, 999, "99,999+", 20),
    ],
)
def test_component_boundaries(rating, count, installs, expected):
    assert score_app(rating, count, installs).score == expected


@pytest.mark.parametrize(
    "installs, expected",
    [("10,000,000+", 10_000_000), ("500+", 500), ("Unknown", 0), ("", 0), ("over 1,000 installs", 1000)],
)
def test_parse_installs(installs, expected):
    assert parse_installs(installs) == expected


@pytest.mark.parametrize("score, category", [(80, "excellent"), (79, "good"), (60, "good"), (40, "average"), (39, "poor")])
def test_categorize(score, category):
    assert categorize(score) == category
