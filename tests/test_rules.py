import pytest

from webtoepub.rules import DEFAULT_RULES, SITE_RULES, normalize_hostname, rules_for, rules_for_url


@pytest.mark.parametrize("hostname, expected", [
    ("www.RoyalRoad.com", "royalroad.com"),
    ("royalroad.com", "royalroad.com"),
    ("WWW.example.org", "example.org"),
    ("blog.www.example.org", "blog.www.example.org"),
    ("", ""),
])
def test_normalize_hostname(hostname, expected):
    assert normalize_hostname(hostname) == expected


def test_known_site_uses_its_own_rules():
    assert rules_for("www.royalroad.com") is SITE_RULES["royalroad.com"]
    assert rules_for("NovelUpdates.com") is SITE_RULES["novelupdates.com"]


def test_lookup_is_exact_match_only():
    assert rules_for("m.royalroad.com") is DEFAULT_RULES
    assert rules_for("royalroad.com.evil.net") is DEFAULT_RULES


def test_unknown_site_falls_back_to_default_chains():
    rules = rules_for("some-novel-site.net")

    assert rules is DEFAULT_RULES
    assert len(rules.chapter_selectors) > 1
    assert len(rules.content_selectors) > 1
    assert len(rules.title_selectors) > 1


def test_rules_for_url_uses_hostname():
    assert rules_for_url("https://www.wuxiaworld.com/novel/foo") is SITE_RULES["wuxiaworld.com"]
    assert rules_for_url("not a url") is DEFAULT_RULES
