import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import json
import os

from dotenv import load_dotenv

from sync_cleaning.network.ical import fetch_ical
from sync_cleaning.normalizers.ical import parse_ical

load_dotenv()

FIXTURE_DIR = "tests/fixtures"


def save_fixture(text: str, filename: str) -> None:
    os.makedirs(FIXTURE_DIR, exist_ok=True)
    path = f"{FIXTURE_DIR}/{filename}"
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    print(f"✅ Saved {path} ({len(text)} bytes)")


def main() -> None:
    parser = argparse.ArgumentParser(description="Download an iCal feed as a test fixture.")
    parser.add_argument("url", help="Feed URL")
    parser.add_argument("filename", help="Fixture file name, e.g. airbnb_feed.ics")
    parser.add_argument("--platform", help="Platform label to use when previewing")
    args = parser.parse_args()

    text = fetch_ical(args.url)
    save_fixture(text, args.filename)

    # Preview what the parser makes of it
    result = parse_ical(text, ical_url=args.url, platform=args.platform)
    print(json.dumps({"accepted": result.accepted, "rejected": result.rejected}, indent=2))


if __name__ == "__main__":
    main()
