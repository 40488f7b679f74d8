import os
import sys
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlmodel import Session, select

from fintrack.config import settings
from fintrack.core.logs import configure_logging
from fintrack.core.security import hash_password
from fintrack.database import engine, init_db
from fintrack.models.user import User
from fintrack.seed import seed_demo_transactions


DEMO_EMAIL = "default@fintrack.local"


def main():
    configure_logging()
    print(f"Database URL: {settings.database_url}")
    init_db()

    password = os.getenv("DEMO_PASSWORD", "fintrack-demo")
    with Session(engine) as session:
        user = session.exec(select(User).where(User.email == DEMO_EMAIL)).first()
        if user is None:
            user = User(email=DEMO_EMAIL, hashed_password=hash_password(password))
            session.add(user)
            session.commit()
            session.refresh(user)
            print(f"Created demo user {DEMO_EMAIL}")

        created = seed_demo_transactions(session, user.id)
        print(f"Seeded {len(created)} demo transactions.")


if __name__ == "__main__":
    main()
