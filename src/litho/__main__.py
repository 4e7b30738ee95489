"""
Entry point for running litho as a module.

Usage:
    python -m litho
    python -m litho 100 --config /path/to/config.yaml
    python -m litho --clear-token
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from litho.config import Settings
from litho.date_cursor import sync_window
from litho.errors import LithoError
from litho.google_photos import PageFetcher, TokenAuthority, get_access_token
from litho.pipeline import run_pipeline
from litho.token_store import TokenStore, default_account
from litho.writer import MediaWriter


def load_settings(config: Path | None) -> Settings:
    if config is None:
        return Settings()
    return Settings.from_yaml(config)


def build_authority(settings: Settings) -> TokenAuthority:
    oauth = settings.oauth
    return TokenAuthority(
        oauth.client_id,
        oauth.client_secret,
        oauth.token_endpoint,
        auth_endpoint=oauth.auth_endpoint,
        scope=oauth.scope,
        host=oauth.callback_host,
        port=oauth.callback_port,
        timeout=settings.sync.request_timeout_seconds,
        open_browser=oauth.open_browser,
    )


def sync(settings: Settings, limit: int | None = None, clear_token: bool = False) -> int:
    """Authorize, then download new items. Returns total bytes written."""
    logger = logging.getLogger(__name__)
    photos_dir = settings.sync.photos_dir
    photos_dir.mkdir(parents=True, exist_ok=True)

    store = TokenStore(settings.oauth.token_service)
    access_token = get_access_token(
        build_authority(settings),
        store,
        default_account(),
        clear=clear_token,
        wait_timeout=settings.oauth.auth_timeout_seconds,
    )

    date_range = sync_window(photos_dir)
    logger.info(f"Syncing items created {date_range.start} .. {date_range.end} into {photos_dir}")

    fetcher = PageFetcher(
        access_token,
        date_range,
        base_url=settings.sync.api_base_url,
        page_size=settings.sync.page_size,
        pause=settings.sync.fetch_pause_seconds,
        timeout=settings.sync.request_timeout_seconds,
    )
    writer = MediaWriter(
        photos_dir,
        pause=settings.sync.write_pause_seconds,
        timeout=settings.sync.request_timeout_seconds,
    )
    return run_pipeline(fetcher, writer, limit)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Download new Google Photos items into a year/month/day tree"
    )
    parser.add_argument(
        "number",
        nargs="?",
        type=int,
        default=None,
        help="Maximum number of items to download (default: no limit)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: LITHO_* environment variables only)",
    )
    parser.add_argument(
        "--clear-token",
        action="store_true",
        default="CLEAR_TOKEN" in os.environ,
        help="Forget the cached refresh token and authorize again",
    )
    args = parser.parse_args(argv)

    if args.number is not None and args.number < 0:
        parser.error("number must not be negative")

    # Load and validate configuration
    try:
        settings = load_settings(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        print("Create a config.yaml file based on config.example.yaml", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger(__name__)

    try:
        written = sync(settings, args.number, args.clear_token)
    except LithoError as e:
        logger.error(f"Sync aborted: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    logger.info(f"Sync complete: {written} bytes written")
    return 0


if __name__ == "__main__":
    sys.exit(main())
