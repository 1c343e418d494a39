#!/usr/bin/env python3
"""Helper script to check and create the .env file for the route planner."""

import os
import sys
from pathlib import Path

ENV_TEMPLATE = """# Supabase Configuration (required to read claims and save routes)
FIELDROUTE_SUPABASE_URL=https://your-project-id.supabase.co
FIELDROUTE_SUPABASE_KEY=your-service-role-key-here

# Geocoding (any Nominatim-compatible endpoint)
FIELDROUTE_GEOCODER_BASE_URL=https://nominatim.openstreetmap.org
FIELDROUTE_GEOCODER_USER_AGENT=fieldroute/0.1 (ops@example.com)

# Travel assumptions
FIELDROUTE_AVERAGE_SPEED_KMH=40
FIELDROUTE_DWELL_MINUTES=30

# Exports
FIELDROUTE_DATA_ROOT=./data
"""


def _mask(value: str) -> str:
    return value[:20] + "..." + value[-6:] if len(value) > 30 else value


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Route planner environment checker")
    print("=" * 60)

    if not env_file.exists():
        env_file.write_text(ENV_TEMPLATE, encoding="utf-8")
        print(f"Created template .env at {env_file}; edit it and run again.")
        return 1

    print(f"Found .env file at: {env_file}")
    for name in ("FIELDROUTE_SUPABASE_URL", "FIELDROUTE_SUPABASE_KEY"):
        value = os.getenv(name)
        print(f"  {name} (environment): {_mask(value) if value else 'not set'}")

    sys.path.insert(0, str(project_root / "src"))
    try:
        from fieldroute.config import settings
    except Exception as e:
        print(f"Error loading config: {e}")
        return 1

    print(f"  geocoder: {settings.geocoder_base_url}")
    print(f"  speed: {settings.average_speed_kmh} km/h, dwell: {settings.dwell_minutes} min")
    if settings.supabase_url and settings.supabase_key:
        print("Supabase is configured.")
        return 0
    print("Supabase is NOT configured: variables must use the FIELDROUTE_ prefix.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
