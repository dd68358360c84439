import json
import uuid
from pathlib import Path

import pytest
import responses

from launcher_core.star_rail.repair import (
    get_integrity_file,
    get_integrity_files,
    get_unused_files,
    parse_integrity_lines,
)

BASE_URL = "https://cdn.example.com/game"
INDEX_URL = f"{BASE_URL}/pkg_version"

INDEX_LINES = [
    {"remoteName": "UnityPlayer.dll", "md5": "8c8c3d845b957e4cb84c662bed44d072", "fileSize": 33466104},
    {"remoteName": "StarRail_Data/level0", "md5": "8c8c3d845b957e4cb84c662bed44d072", "fileSize": 1},
]


def _index_text():
    return "\n".join(json.dumps(line) for line in INDEX_LINES) + "\n"


def _payload():
    return {
        "retcode": 0,
        "message": "OK",
        "data": {
            "web_url": "https://example.com",
            "game": {
                "latest": {
                    "name": "game.zip",
                    "version": "1.0.5",
                    "path": "https://cdn.example.com/game.zip",
                    "size": "1000",
                    "md5": "8c8c3d845b957e4cb84c662bed44d072",
                    "entry": "StarRail.exe",
                    "package_size": "2000",
                    "decompressed_path": BASE_URL,
                    "voice_packs": [],
                },
                "diffs": [],
            },
            "pre_download_game": None,
        },
    }


@pytest.fixture
def api_uri():
    return f"https://api.example.com/{uuid.uuid4().hex}"


def _mock(rsps, api_uri):
    rsps.add(responses.GET, api_uri, json=_payload())
    rsps.add(responses.GET, INDEX_URL, body=_index_text())


def test_parse_lines_skips_non_json():
    text = "garbage\r\n" + json.dumps(INDEX_LINES[0]) + "\r\n\n" + json.dumps(INDEX_LINES[1])
    files = parse_integrity_lines(text, BASE_URL)
    assert [file.path for file in files] == [Path("UnityPlayer.dll"), Path("StarRail_Data/level0")]
    assert files[0].md5 == "8c8c3d845b957e4cb84c662bed44d072"
    assert files[0].size == 33466104
    assert all(file.base_url == BASE_URL for file in files)


def test_parse_lines_empty_text():
    assert parse_integrity_lines("", BASE_URL) == []


@pytest.mark.parametrize(
    "line",
    [
        '{"md5": "00", "fileSize": 1}',
        '{"remoteName": "a", "md5": "00", "fileSize": -1}',
        '{"remoteName": "a", "md5": "00", "fileSize": "1"}',
        "5",
    ],
)
def test_parse_lines_invalid_entry_raises(line):
    with pytest.raises(ValueError):
        parse_integrity_lines(line, BASE_URL)


def test_get_integrity_files(api_uri):
    with responses.RequestsMock() as rsps:
        _mock(rsps, api_uri)
        files = get_integrity_files(api_uri)
    assert files == parse_integrity_lines(_index_text(), BASE_URL)


def test_get_integrity_files_cached(api_uri):
    with responses.RequestsMock() as rsps:
        _mock(rsps, api_uri)
        first = get_integrity_files(api_uri)
        second = get_integrity_files(api_uri)
        assert len(rsps.calls) == 2
    assert first == second


def test_get_integrity_file_found_and_missing(api_uri):
    with responses.RequestsMock() as rsps:
        _mock(rsps, api_uri)
        found = get_integrity_file(api_uri, "StarRail_Data/level0")
        missing = get_integrity_file(api_uri, "StarRail_Data/absent")
    assert found.path == Path("StarRail_Data/level0")
    assert missing is None


def test_get_integrity_file_none_when_api_fails(api_uri):
    with responses.RequestsMock(assert_all_requests_are_fired=False):
        assert get_integrity_file(api_uri, "UnityPlayer.dll") is None


def test_get_unused_files(api_uri, tmp_path):
    for name in [
        "UnityPlayer.dll",
        "StarRail_Data/level0",
        "StarRail_Data/old.bin",
        "extra.txt",
        "webCaches/cache.dat",
        "StarRail_Data/ScreenShot/shot.png",
    ]:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x")
    with responses.RequestsMock() as rsps:
        _mock(rsps, api_uri)
        result = get_unused_files(tmp_path, api_uri)
    assert sorted(result) == sorted([tmp_path / "StarRail_Data/old.bin", tmp_path / "extra.txt"])