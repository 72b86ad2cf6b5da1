from __future__ import annotations

import argparse
from datetime import date, timedelta

from sqlalchemy import create_engine
from sqlalchemy.dialects.mysql import insert
from sqlalchemy.engine import make_url

from coaching_api.infrastructure.db.models import AvailabilityDayModel, UserProfileModel
from coaching_api.infrastructure.db.session import build_database_url
from coaching_api.shared.config.settings import settings

DEFAULT_SLOTS = ["10:00", "11:00", "14:00", "15:00", "16:00"]


def _sync_database_url() -> str:
    url = make_url(build_database_url(settings))
    drivername = url.drivername.replace("aiomysql", "pymysql")
    return url.set(drivername=drivername).render_as_string(hide_password=False)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed development availability and an admin profile.")
    parser.add_argument("--days", type=int, default=14, help="Number of upcoming weekdays to open.")
    parser.add_argument("--admin-user-id", default="dev-admin", help="Caller id granted the admin role.")
    return parser.parse_args()


def upcoming_weekdays(start: date, count: int) -> list[str]:
    days: list[str] = []
    current = start
    while len(days) < count:
        current += timedelta(days=1)
        if current.weekday() < 5:
            days.append(current.isoformat())
    return days


def main() -> None:
    args = parse_args()
    availability_table = AvailabilityDayModel.__table__
    profiles_table = UserProfileModel.__table__

    engine = create_engine(_sync_database_url(), pool_pre_ping=True)
    try:
        with engine.begin() as connection:
            for slot_date in upcoming_weekdays(date.today(), args.days):
                statement = insert(availability_table).values(slot_date=slot_date, time_slots=DEFAULT_SLOTS)
                connection.execute(
                    statement.on_duplicate_key_update(time_slots=statement.inserted.time_slots)
                )
            statement = insert(profiles_table).values(
                user_id=args.admin_user_id,
                name="Development Admin",
                roles=["admin", "user"],
            )
            connection.execute(statement.on_duplicate_key_update(roles=statement.inserted.roles))
    finally:
        engine.dispose()

    print("Seed data applied successfully.")


if __name__ == "__main__":
    main()
