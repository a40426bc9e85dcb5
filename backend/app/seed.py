"""
Seed script for the system categories the recurring detector keys on.
"""

from typing import Optional
import uuid

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models import Category


# Parent label -> child labels
SYSTEM_CATEGORIES = {
    "Bills and Utilities": [
        "Gas and Electricity",
        "Water",
        "Internet",
        "Home Phone",
        "Mobile Phone",
        "Cable",
    ],
    "Insurance": [],
    "Food and Drink": [
        "Coffee",
        "Fast Food",
        "Restaurants",
        "Groceries",
    ],
    "Shopping": [
        "Convenience Stores",
        "Discount Stores",
        "Online Marketplaces",
    ],
    "Transportation": [
        "Gas",
        "Taxis and Ride Shares",
        "Parking",
    ],
    "Entertainment": [
        "Streaming Services",
        "Games",
    ],
    "Transfers": [
        "Transfer",
        "Account Transfer",
        "Credit Card Payment",
        "Investment and Retirement Funds",
    ],
    "Income": [],
    "Other": [],
}


def seed_categories(db: Optional[Session] = None) -> int:
    """Seed system categories. Returns the number created (0 if already seeded)."""
    owns_session = db is None
    if owns_session:
        db = SessionLocal()

    try:
        existing_count = db.query(Category).count()
        if existing_count > 0:
            print(f"Categories already seeded ({existing_count} categories exist)")
            return 0

        created = 0
        for parent_label, child_labels in SYSTEM_CATEGORIES.items():
            parent = Category(id=str(uuid.uuid4()), label=parent_label)
            db.add(parent)
            db.flush()  # Get the parent ID
            created += 1

            for child_label in child_labels:
                db.add(Category(id=str(uuid.uuid4()), label=child_label, parent_id=parent.id))
                created += 1

        db.commit()
        print(f"Successfully seeded {created} categories")
        return created

    except Exception:
        db.rollback()
        raise
    finally:
        if owns_session:
            db.close()


if __name__ == "__main__":
    seed_categories()
