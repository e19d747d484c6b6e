from reelchef.services.fingerprint import fingerprint, normalize_url


def test_known_fnv1a_vectors():
    assert fingerprint("") == "811c9dc5"
    assert fingerprint("a") == "e40c292c"
    assert fingerprint("foobar") == "bf9cf968"


def test_trailing_slashes_are_ignored():
    assert fingerprint("https://youtube.com/watch?v=ABC/") == fingerprint("https://youtube.com/watch?v=ABC")
    assert fingerprint("https://tiktok.com/@chef/video/1///") == fingerprint("https://tiktok.com/@chef/video/1")


def test_case_is_ignored():
    assert fingerprint("HTTPS://YouTube.com/watch?v=abc") == fingerprint("https://youtube.com/watch?v=abc")


def test_different_urls_differ():
    assert fingerprint("https://youtube.com/watch?v=abc") != fingerprint("https://youtube.com/watch?v=abd")


def test_output_is_lowercase_hex():
    fp = fingerprint("https://www.instagram.com/reel/Cx123/")
    assert 1 <= len(fp) <= 8
    assert fp == fp.lower()
    int(fp, 16)


def test_normalize_url():
    assert normalize_url("HTTPS://Example.com/Path//") == "https://example.com/path"


def test_astral_characters_hash_as_surrogate_pairs():
    # U+1F355 is two UTF-16 code units
    assert fingerprint("\U0001F355") != fingerprint("\uD83C")
    assert fingerprint("\U0001F355") == fingerprint("\U0001F355/")
