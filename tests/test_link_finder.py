import pytest

from linkpreview.link_finder import LinkCandidate, find_link


def test_finds_link_in_sentence():
    link = find_link("check this http://example.com foo")
    assert link == LinkCandidate("http", "http://example.com")


def test_https_with_path_and_query():
    link = find_link("docs at https://docs.python.org/3/library/re.html?highlight=search#re.search now")
    assert link.protocol == "https"
    assert link.url == "https://docs.python.org/3/library/re.html?highlight=search#re.search"
    assert link.url.startswith(link.protocol + "://")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "nothing to see here",
        "ftp://example.com/file",
        "example.com without scheme",
        "http://localhost/no-dot",
        "HTTP://EXAMPLE.COM",
    ],
)
def test_no_link(text):
    assert find_link(text) is None


@pytest.mark.parametrize(
    "text, url",
    [
        ("see https://example.com/a.", "https://example.com/a"),
        ("see https://example.com/a, and more", "https://example.com/a"),
        ("look: https://example.com/a:", "https://example.com/a"),
        ("<https://example.com/x>", "https://example.com/x"),
        ('"https://example.com/q"', "https://example.com/q"),
        ("`https://example.com/code`", "https://example.com/code"),
        ("(https://example.com/paren)", "https://example.com/paren"),
    ],
)
def test_punctuation_is_not_part_of_link(text, url):
    assert find_link(text).url == url


def test_leftmost_link_wins():
    link = find_link("first https://one.example.org then http://two.example.org")
    assert link == LinkCandidate("https", "https://one.example.org")


def test_host_with_dashes_and_underscores():
    link = find_link("http://my-host_name.example.co.uk/path")
    assert link.url == "http://my-host_name.example.co.uk/path"
