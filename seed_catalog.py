# seed_catalog.py
# Create the schema if needed and seed the assembly/bundle catalog for COMPANY_ID
from estimating.db.auto_init import auto_init


def seed():
    try:
        auto_init()
        print("✅ Catalog ready")
    except Exception as e:
        print(f"❌ Seeding failed: {e}")
        raise


if __name__ == "__main__":
    seed()
