#!/usr/bin/env python3
"""
Command-line playlist analysis.

Usage:
    spotistats token                          # one-time: print a refresh token
    spotistats analyze <playlist id or URL>   # summary report
    spotistats analyze <playlist> --json      # full result as JSON

Environment Variables (set in .env file or environment):
    Required:
        SPOTIPY_CLIENT_ID       - Spotify app client ID
        SPOTIPY_CLIENT_SECRET   - Spotify app client secret
        SPOTIPY_REFRESH_TOKEN   - Refresh token for headless auth (analyze only)

    Optional:
        SPOTIPY_REDIRECT_URI    - Redirect URI (default: http://localhost:8888/callback)
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from typing import List, Optional

from tqdm import tqdm

from .analysis import PlaylistAnalyzer
from .auth import TokenProvider, build_oauth
from .client import Spotistats
from .config import Settings
from .errors import SpotistatsError
from .utils import parse_playlist_id


def log(msg: str) -> None:
    """Print message with timestamp without breaking tqdm progress bars."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    tqdm.write(f"[{timestamp}] {msg}")


def print_report(result: dict) -> None:
    pl = result["playlist"]
    an = result["analysis"]
    print("\n" + "=" * 50)
    print(f"  {pl['name']}  (by {pl['owner'] or 'unknown'})")
    print("=" * 50)
    print(f"🎵 Tracks: {pl['total_tracks']:,}")
    print(f"⏱  Duration: {pl['duration_human']}")
    print(f"📊 Tracks with audio features: {an['features_count']:,}")

    if an["avg_features"]:
        print("\nAverage audio features:")
        for k, v in an["avg_features"].items():
            print(f"   • {k}: {v}")

    print("\nTop artists:")
    for i, a in enumerate(an["top_artists"], 1):
        print(f"   {i:>2}. {a['name']} ({a['count']})")

    print("\nTop tracks by popularity:")
    for i, t in enumerate(an["top_tracks"], 1):
        print(f"   {i:>2}. {t['name']} - {t['artists']} [{t['popularity']}]")

    print("\nTop genres:")
    for i, g in enumerate(an["top_genres"], 1):
        print(f"   {i:>2}. {g['genre']} ({g['count']})")
    print("=" * 50 + "\n")


def cmd_analyze(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    if not settings.refresh_token:
        log("ERROR: SPOTIPY_REFRESH_TOKEN is not set. Run `spotistats token` first.")
        return 1

    playlist_id = parse_playlist_id(args.playlist)
    session = {"refresh_token": settings.refresh_token}
    provider = TokenProvider(build_oauth(settings))
    analyzer = PlaylistAnalyzer(provider, settings=settings, progress=args.progress)

    log(f"Analyzing playlist {playlist_id}...")
    try:
        # headless: trade the stored refresh token for an access token first
        provider.refresh(session)
        result = analyzer.analyze(playlist_id, session)
    except SpotistatsError as e:
        where = f", stage={e.stage}" if e.stage else ""
        log(f"ERROR ({e.code}{where}): {e.message}")
        if e.detail is not None:
            log(f"Detail: {e.detail}")
        return 2

    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        print_report(result)
    return 0


def cmd_token(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    oauth = build_oauth(settings)

    print(f"Open this URL and authorize the app:\n\n  {oauth.get_authorize_url()}\n")
    response_url = input("Paste the FULL redirect URL here: ").strip()

    code = oauth.parse_response_code(response_url)
    if not code or code == response_url:
        log("ERROR: Could not extract authorization code from URL")
        return 1

    token_info = oauth.get_access_token(code, as_dict=True, check_cache=False)
    refresh_token = token_info.get("refresh_token")
    if not refresh_token:
        log("ERROR: No refresh token received")
        return 1

    print("\nAdd this to your .env file:")
    print(f"  SPOTIPY_REFRESH_TOKEN={refresh_token}\n")
    return 0


def cmd_playlists(args: argparse.Namespace) -> int:
    try:
        client = Spotistats.from_env()
        page = client.playlists()
    except SpotistatsError as e:
        log(f"ERROR ({e.code}): {e.message}")
        return 2
    for p in page.get("items") or []:
        if not p:
            continue
        total = (p.get("tracks") or {}).get("total")
        print(f"{p.get('id')}  {p.get('name')}  ({total} tracks)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spotistats", description="Spotify playlist statistics")
    sub = parser.add_subparsers(dest="command", required=True)

    p_analyze = sub.add_parser("analyze", help="Analyze a playlist")
    p_analyze.add_argument("playlist", help="Playlist id, spotify: URI or open.spotify.com URL")
    p_analyze.add_argument("--json", action="store_true", help="Print the full result as JSON")
    p_analyze.add_argument("--progress", action="store_true", help="Show batch progress bars")
    p_analyze.set_defaults(func=cmd_analyze)

    p_list = sub.add_parser("playlists", help="List your playlists (first 50)")
    p_list.set_defaults(func=cmd_playlists)

    p_token = sub.add_parser("token", help="Obtain a refresh token interactively")
    p_token.set_defaults(func=cmd_token)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except RuntimeError as e:
        log(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
