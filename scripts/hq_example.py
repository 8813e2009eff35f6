#!/usr/bin/env python
"""Index a company headquarter, fetch it back and search it by country."""
from __future__ import annotations

import argparse
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

# Make repo importable when executed directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from docmapper import (  # noqa: E402
    Engine,
    Location,
    MappingBuilder,
    MappingType,
    QueryBuilder,
)
from docmapper.config import logger  # noqa: E402


@dataclass
class HQ:
    company: str = ""
    country: int = 0
    location: Location = field(default_factory=lambda: Location(0, 0))

    def key(self) -> str:
        return f"{self.company}_{self.country}"

    @staticmethod
    def build_path() -> str:
        return "hq/"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", default="http://localhost:9200/hq", help="Engine URL with index path")
    parser.add_argument("--company", default="Go Tsunami")
    parser.add_argument("--country", type=int, default=33)
    parser.add_argument("--lat", type=float, default=48.865618)
    parser.add_argument("--lon", type=float, default=2.370985)
    args = parser.parse_args(argv)

    engine = Engine.from_url(args.url)
    mb = (
        MappingBuilder()
        .add_mapping("location", MappingType.GEO_POINT)
        .add_mapping("company", MappingType.STRING)
    )
    engine.set_mapping(HQ, mb)

    engine.insert(HQ(args.company, args.country, Location(args.lat, args.lon)))
    # let the engine refresh before reading back
    time.sleep(1)

    hq = HQ(company=args.company, country=args.country)
    if not engine.get(hq):
        logger.error("Inserted object not found")
        return 1
    print(f"{hq.company} HQ inserted at GPS coordinates {hq.location}")

    results = engine.search(HQ, QueryBuilder().set_term("country", str(args.country)))
    for match in results.hits:
        print(f"An HQ was found for country code {args.country}: {match.object.company} {match.object.location}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
