"""
Test data seeder — populates ``user_profiles`` with sample users for development.

Usage:
    python scripts/seed_profiles.py

Creates 8 profiles with overlapping interests so two browser tabs can
be matched without going through Clerk. Idempotent: rows are upserted
by user id.
"""

import asyncio
from collections import Counter

from mingle.matching_engine.interests import normalize_interests
from mingle.services.profile_service import profile_service

SAMPLE_PROFILES: list[dict] = [
    {
        "user_id": "user_seed_asha",
        "first_name": "Asha",
        "last_name": "Verma",
        "interests": "Music, Travel; Photography",
        "gender": "Female",
        "location": "Mumbai",
        "date_of_birth": "1996-03-14",
    },
    {
        "user_id": "user_seed_ravi",
        "first_name": "Ravi",
        "last_name": "Kumar",
        "interests": "travel, cricket, music",
        "gender": "Male",
        "location": "Pune",
        "date_of_birth": "1994-11-02",
    },
    {
        "user_id": "user_seed_meera",
        "display_name": "Meera K",
        "interests": "Books; Art; Photography",
        "gender": "Female",
        "location": "Bengaluru",
        "date_of_birth": "1999-07-21",
    },
    {
        "user_id": "user_seed_kabir",
        "username": "kabir_plays",
        "interests": "Gaming, Chess, music",
        "gender": "Male",
        "location": "Delhi",
    },
    {
        "user_id": "user_seed_zoya",
        "first_name": "Zoya",
        "interests": "art, cooking",
        "gender": "Female",
        "location": "Hyderabad",
        "date_of_birth": "2001-01-30",
    },
    {
        "user_id": "user_seed_dev",
        "first_name": "Dev",
        "last_name": "Shah",
        "interests": "Chess; Books",
        "gender": "Male",
        "location": "Ahmedabad",
        "date_of_birth": "1990-05-09",
    },
    # Nothing to match on: hits the incomplete-profile path
    {
        "user_id": "user_seed_empty",
        "first_name": "Sam",
        "interests": "",
    },
    # No name fields at all, falls back to the generic label
    {
        "user_id": "user_seed_anon9",
        "interests": "cooking, travel",
    },
]


async def seed() -> None:
    for fields in SAMPLE_PROFILES:
        user_id = fields["user_id"]
        await profile_service.upsert(user_id, fields)
        print(f"  Upserted {user_id}")
    _print_summary()


def _print_summary() -> None:
    """Print which interests are shared by more than one seeded user."""
    counts = Counter(
        interest
        for fields in SAMPLE_PROFILES
        for interest in normalize_interests(fields.get("interests"))
    )
    print("\n  Seed complete!")
    print(f"  Total profiles: {len(SAMPLE_PROFILES)}")
    for interest, count in counts.most_common():
        if count > 1:
            print(f"    {interest}: {count} users")


if __name__ == "__main__":
    asyncio.run(seed())
