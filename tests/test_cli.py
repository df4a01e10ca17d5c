import json

import pytest

from spotistats import cli
from spotistats import client as client_module
from spotistats.client import Spotistats
from spotistats.utils import parse_playlist_id
from tests.stubs import OAuthStub, SpotipyStub, make_artist, make_features, make_track


@pytest.mark.parametrize("value", [
    "37i9dQZF1DXcBWIGoYBM5M",
    "spotify:playlist:37i9dQZF1DXcBWIGoYBM5M",
    "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=abc123",
])
def test_parse_playlist_id(value):
    assert parse_playlist_id(value) == "37i9dQZF1DXcBWIGoYBM5M"


@pytest.fixture
def stubbed(monkeypatch):
    sp = SpotipyStub(
        items=[{"track": make_track("t1", artists=[{"id": "a1", "name": "Alpha"}])}],
        features={"t1": make_features("t1")},
        artists={"a1": make_artist("a1", name="Alpha", genres=["indie"])},
    )
    oauth = OAuthStub()
    monkeypatch.setattr(cli, "build_oauth", lambda settings: oauth)
    monkeypatch.setattr(client_module, "build_oauth", lambda settings: oauth)
    monkeypatch.setattr(Spotistats, "from_token",
                        classmethod(lambda cls, token, settings=None, progress=False: cls(sp)))
    return sp, oauth


def test_analyze_requires_refresh_token(capsys):
    assert cli.main(["analyze", "pl1"]) == 1
    assert "SPOTIPY_REFRESH_TOKEN" in capsys.readouterr().out


def test_analyze_json(monkeypatch, stubbed, capsys):
    monkeypatch.setenv("SPOTIPY_REFRESH_TOKEN", "refresh-env")
    sp, oauth = stubbed

    assert cli.main(["analyze", "https://open.spotify.com/playlist/pl1", "--json"]) == 0

    out = capsys.readouterr().out
    body = json.loads(out[out.index("{"):])
    assert body["playlist"]["total_tracks"] == 1
    assert body["analysis"]["top_genres"] == [{"genre": "indie", "count": 1}]
    assert oauth.refresh_calls == ["refresh-env"]
    assert sp.calls[0] == ("playlist", "pl1")


def test_analyze_report(monkeypatch, stubbed, capsys):
    monkeypatch.setenv("SPOTIPY_REFRESH_TOKEN", "refresh-env")

    assert cli.main(["analyze", "pl1"]) == 0

    out = capsys.readouterr().out
    assert "Road Trip" in out
    assert "Alpha (1)" in out
    assert "indie (1)" in out


def test_analyze_upstream_error_exit_code(monkeypatch, stubbed, capsys):
    monkeypatch.setenv("SPOTIPY_REFRESH_TOKEN", "refresh-env")
    sp, _ = stubbed
    sp.fail_on = "playlist"

    assert cli.main(["analyze", "pl1"]) == 2
    assert "upstream_fetch_failed" in capsys.readouterr().out


def test_missing_client_credentials_exit_code(monkeypatch, capsys):
    monkeypatch.delenv("SPOTIPY_CLIENT_ID")

    assert cli.main(["analyze", "pl1"]) == 1
    assert "SPOTIPY_CLIENT_ID" in capsys.readouterr().out


def test_analyze_refresh_failure_exit_code(monkeypatch, stubbed, capsys):
    monkeypatch.setenv("SPOTIPY_REFRESH_TOKEN", "revoked")
    sp, oauth = stubbed
    oauth.fail = True

    assert cli.main(["analyze", "pl1"]) == 2

    out = capsys.readouterr().out
    assert "ERROR (not_authenticated): Could not refresh Spotify access token" in out
    assert "stage=" not in out
    assert sp.calls == []


def test_analyze_upstream_error_reports_stage(monkeypatch, stubbed, capsys):
    monkeypatch.setenv("SPOTIPY_REFRESH_TOKEN", "refresh-env")
    sp, _ = stubbed
    sp.fail_on = "artists"

    assert cli.main(["analyze", "pl1"]) == 2
    assert "stage=fetch_artists" in capsys.readouterr().out


def test_playlists(monkeypatch, stubbed, capsys):
    monkeypatch.setenv("SPOTIPY_REFRESH_TOKEN", "refresh-env")
    sp, oauth = stubbed

    assert cli.main(["playlists"]) == 0

    assert "pl1  Road Trip  (3 tracks)" in capsys.readouterr().out
    assert oauth.refresh_calls == ["refresh-env"]
    assert ("current_user_playlists", 50) in sp.calls


def test_playlists_requires_refresh_token(stubbed, capsys):
    assert cli.main(["playlists"]) == 1
    assert "SPOTIPY_REFRESH_TOKEN" in capsys.readouterr().out


def test_playlists_upstream_error_exit_code(monkeypatch, stubbed, capsys):
    monkeypatch.setenv("SPOTIPY_REFRESH_TOKEN", "refresh-env")
    sp, _ = stubbed
    sp.fail_on = "current_user_playlists"

    assert cli.main(["playlists"]) == 2
    assert "upstream_fetch_failed" in capsys.readouterr().out
