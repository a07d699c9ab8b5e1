import logging

from league_tracker.config import Settings
from league_tracker_app import LeagueTracker

settings = Settings.from_env()
logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s")

# Starts the schedule sync thread on import, like the dev server does
tracker = LeagueTracker(settings=settings)
app = tracker.app

if __name__ == "__main__":
    tracker.run()
