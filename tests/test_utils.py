import pytest

from utils import clean_path, is_font, is_hash, is_image, is_ip, is_number, is_uuid

MD5 = "d41d8cd98f00b204e9800998ecf8427e"
SHA1 = "da39a3ee5e6b4b0d3255bfef95601890afd80709"
SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


@pytest.mark.parametrize("segment", [MD5, SHA1, SHA256])
def test_is_hash_accepts_digests(segment):
    assert is_hash(segment)


@pytest.mark.parametrize("segment", [MD5[:-1], MD5 + "0", "z" * 32, "users", MD5.upper(), SHA1.upper()])
def test_is_hash_rejects_other_lengths_and_chars(segment):
    assert not is_hash(segment)


@pytest.mark.parametrize("segment", ["42", "007", "deadbeef", "CAFE", "a"])
def test_is_number_accepts_decimal_and_hex(segment):
    assert is_number(segment)


@pytest.mark.parametrize("segment", ["-1", "1.5", "12a-", "users", "0x1f", "42\n"])
def test_is_number_rejects_everything_else(segment):
    assert not is_number(segment)


def test_is_uuid():
    assert is_uuid("550e8400-e29b-41d4-a716-446655440000")
    assert not is_uuid("550E8400-E29B-41D4-A716-446655440000")
    assert is_uuid("00000000-0000-0000-0000-000000000000")
    assert not is_uuid("550e8400e29b41d4a716446655440000")
    assert not is_uuid("550e8400-e29b-41d4-a716-44665544000")


@pytest.mark.parametrize("segment", ["10.0.0.1", "255.255.255.255", "::1", "2001:db8::8a2e:370:7334"])
def test_is_ip_accepts_literals(segment):
    assert is_ip(segment)


@pytest.mark.parametrize("segment", ["12345", "10.0.0", "256.1.1.1", "host.local", "", "fe80::1%eth0", "fe80::1%25eth0"])
def test_is_ip_rejects_non_literals(segment):
    assert not is_ip(segment)


def test_asset_extensions():
    for name in ("logo.png", "a.JPG", "x.jpeg", "icon.svg", "s.tif", "s.tiff", "anim.gif", "favicon.ico"):
        assert is_image(name), name
    assert is_font("font.ttf")
    assert is_font("font.WOFF")
    assert not is_image("png")
    assert not is_image("logo.png.bak")
    assert not is_font("font.woff2")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("/", "/"),
        ("/users/", "/users"),
        ("/x/./y/../z//w/", "/x/z/w"),
        ("//double//slash", "/double/slash"),
        ("/..", "/"),
        ("/../../etc", "/etc"),
        ("relative/path", "relative/path"),
        ("", "."),
    ],
)
def test_clean_path(raw, expected):
    assert clean_path(raw) == expected
