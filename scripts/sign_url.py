#!/usr/bin/env python
"""Print a signed proxy URL (or srcset) for a source image."""
from __future__ import annotations

import argparse
import sys

from dotenv import load_dotenv

from image_proxy.config import load_settings
from image_proxy.errors import ConfigError
from image_proxy.services.url_builder import build_signed_url, build_srcset


def main() -> None:
    parser = argparse.ArgumentParser(description="Sign an image proxy URL")
    parser.add_argument("--url", required=True, help="Absolute URL of the source image")
    parser.add_argument("--width", type=int)
    parser.add_argument("--quality", type=int)
    parser.add_argument(
        "--srcset-width",
        type=int,
        action="append",
        dest="srcset_widths",
        help="Emit a srcset instead; repeat for each width",
    )
    parser.add_argument("--base-url", help="Proxy origin (default: IMAGE_PROXY_PUBLIC_BASE_URL)")
    args = parser.parse_args()

    load_dotenv()
    try:
        settings = load_settings()
    except ConfigError as exc:
        sys.exit(exc.message)

    base_url = args.base_url or settings.public_base_url
    if args.srcset_widths:
        print(build_srcset(base_url, args.url, args.srcset_widths, quality=args.quality, settings=settings))
    else:
        print(build_signed_url(base_url, args.url, width=args.width, quality=args.quality, settings=settings))


if __name__ == "__main__":
    main()
