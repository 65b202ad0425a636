"""
Reset the study database.

DANGEROUS: This deletes all card studies, sessions and phrases!
Only use when you want to start fresh for testing.

Usage:
    python -m scripts.maintenance.reset_learning_db
"""

import asyncio

from legendas.fsrs.database import get_database_url, get_engine, is_test_mode, reset_db


async def _reset():
    engine = get_engine()
    try:
        await reset_db(engine)
    finally:
        await engine.dispose()


def main():
    print("=" * 60)
    print("WARNING: Reset Study Database")
    print("=" * 60)
    print()
    print(f"Database: {get_database_url()}" + ("  [TEST MODE]" if is_test_mode() else ""))
    print()
    print("This will DELETE:")
    print("  - All card studies (stability, difficulty, due dates, etc.)")
    print("  - All study sessions")
    print("  - All imported phrases and extractions")
    print()

    response = input("Are you sure you want to reset? (type 'yes' to confirm): ")

    if response.lower() == "yes":
        print("\nResetting database...")
        asyncio.run(_reset())
        print("✓ Database reset complete!")
        print("\nThe database now has empty tables. Import phrases to start studying.")
    else:
        print("\nCancelled. No changes made.")


if __name__ == "__main__":
    main()
