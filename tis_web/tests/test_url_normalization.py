import pytest

from tis_web.services.url_normalization import GuessComUrlNormalizer


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", ""),
        ("   ", ""),
        ("spotify.com", "https://spotify.com"),
        ("spotify.com/legal/end-user-agreement", "https://spotify.com/legal/end-user-agreement"),
        ("spotify", "https://spotify.com"),
        ("spotify/legal", "https://spotify.com/legal"),
        ("localhost", "https://localhost"),                  # no .com appended
        ("localhost:5000", "https://localhost:5000"),        # port kept, no .com
        ("127.0.0.1:5000/tos", "https://127.0.0.1:5000/tos"),
        ("//x.com/en/tos", "https://x.com/en/tos"),          # protocol-relative
        ("https://x.com/en/tos", "https://x.com/en/tos"),    # already absolute -> unchanged
        ("HTTP://Example.com", "HTTP://Example.com"),
    ],
)
def test_normalize_default_behavior(raw, expected):
    norm = GuessComUrlNormalizer()
    assert norm.normalize(raw) == expected


def test_port_is_kept_without_guessing_com():
    assert GuessComUrlNormalizer().normalize("acme:8080/terms") == "https://acme:8080/terms"


@pytest.mark.parametrize("raw", ["mailto:legal@x.com", "legal@acme", "Spotify terms", "acme terms of use"])
def test_non_host_input_comes_back_unchanged(raw):
    assert GuessComUrlNormalizer().normalize("  " + raw + " ") == raw


def test_guess_com_disabled():
    norm = GuessComUrlNormalizer(guess_com_if_no_dot=False)
    assert norm.normalize("acme") == "https://acme"


def test_default_scheme_respected():
    norm = GuessComUrlNormalizer(default_scheme="http")
    assert norm.normalize("acme") == "http://acme.com"


def test_no_guess_hosts_case_insensitive():
    norm = GuessComUrlNormalizer(no_guess_hosts=frozenset({"IntraNet"}))
    assert norm.normalize("intranet/terms") == "https://intranet/terms"


@pytest.mark.parametrize("raw", ["ftp://example.com/tos", "javascript://alert(1)", "file:///etc/passwd"])
def test_non_http_schemes_rejected(raw):
    with pytest.raises(ValueError):
        GuessComUrlNormalizer().normalize(raw)
