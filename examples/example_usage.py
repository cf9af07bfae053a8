"""Example: talk to a running TaskPulse API with the bundled client.

Start the server (``python app.py``) and seed the demo users first
(``python scripts/seed_db.py``).
"""

import os
from pathlib import Path

from src.taskpulse.taskpulse.client.api import ApiError, TaskPulseClient
from src.taskpulse.taskpulse.client.session import AuthSession


def main():
    base_url = os.getenv("TASKPULSE_URL", "http://localhost:5000")
    session = AuthSession(Path.home() / ".taskpulse" / "session.json").load()
    client = TaskPulseClient(base_url, session)

    if not session.is_authenticated:
        client.login("employee@taskpulse.local", "employee123")

    report = client.today_report()
    if report is None:
        try:
            report = client.create_report(
                workSummary="Wrote the weekly summary and triaged support tickets",
                hoursWorked=7.5,
                tasksCompleted=[{"title": "Weekly summary", "category": "documentation"}],
            )
        except ApiError as e:
            print(f"Could not submit report: {e.message}")
            return

    print(f"{report['reportId']} {report['date']} status={report['status']} hours={report['hoursWorked']}")


if __name__ == "__main__":
    main()
