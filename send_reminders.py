#!/usr/bin/env python
"""Send "Task Due Today" push reminders; run once a day (e.g. from cron at 09:00)."""
import logging
from datetime import date

from taskflow.config import DATABASE_URL, LOG_LEVEL
from taskflow.database import create_db_engine, session_scope
from taskflow.services.push import send_due_date_reminders

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL)
    engine = create_db_engine(DATABASE_URL)
    with session_scope(engine) as db:
        sent = send_due_date_reminders(db, date.today())
    print(f"Sent {sent} due date reminder notifications")
