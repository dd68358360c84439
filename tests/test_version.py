import pytest

from launcher_core.version import Version


def test_version_new():
    version = Version(0, 0, 0)

    assert version == "0.0.0"
    assert "0.0.0" == version
    assert Version.from_str("0.0.0") == version
    assert version.to_plain_string() == "000"


def test_version_from_str():
    version = Version.from_str("0.0.0")

    assert version is not None
    assert version == "0.0.0"
    assert version == Version(0, 0, 0)
    assert version.to_plain_string() == "000"


def test_version_long():
    version = Version.from_str("100.0.255")

    assert version is not None
    assert version == "100.0.255"
    assert version == Version(100, 0, 255)
    assert version.to_plain_string() == "1000255"


@pytest.mark.parametrize("text", ["", "..0", "0.0."])
def test_incorrect_versions(text):
    assert Version.from_str(text) is None


@pytest.mark.parametrize("text", ["256.0.0", "1.2", "1.2.3.4", "a.b.c", "-1.0.0", " 1.0.0"])
def test_rejected_strings(text):
    assert Version.from_str(text) is None


def test_str_round_trip():
    version = Version(1, 10, 2)
    assert Version.from_str(str(version)) == version
    assert str(version) == "1.10.2"


def test_ordering_is_numeric_per_part():
    assert Version(1, 2, 3) < Version(1, 10, 0)
    assert Version(2, 0, 0) > Version(1, 255, 255)
    assert max(Version(1, 0, 0), Version(0, 9, 9)) == Version(1, 0, 0)


def test_hash_matches_equality():
    assert len({Version(1, 2, 3), Version.from_str("1.2.3")}) == 1


def test_out_of_range_parts_raise():
    with pytest.raises(ValueError):
        Version(256, 0, 0)
    with pytest.raises(ValueError):
        Version(0, -1, 0)


def test_not_equal_to_other_strings():
    assert (Version(1, 2, 3) == "1.2.4") is False