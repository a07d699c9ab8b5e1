"""
European League Football Tracker
================================
Web front end for the league tracker:
- Schedule with live scores, refreshed from the league API every 5 minutes
- Division standings with strength of schedule and strength of victory
- htmx fragments for the dashboard, JSON for everything else
"""

import logging
from typing import Optional

from flask import Flask, jsonify, render_template_string, request

from league_tracker.config import Settings
from league_tracker.errors import StoreError
from league_tracker.service import LeagueService

logger = logging.getLogger(__name__)


DASHBOARD_TEMPLATE = """
        <!DOCTYPE html>
        <html lang="en">
        <head>
            <meta charset="UTF-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
            <title>{{ title }}</title>
            <script src="https://unpkg.com/htmx.org@1.9.12"></script>
            <style>
                body {
                    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', system-ui, sans-serif;
                    background: #f5f5f5;
                    color: #333;
                    margin: 0;
                }

                .header {
                    background: white;
                    border-bottom: 1px solid #ddd;
                    padding: 24px 20px;
                    text-align: center;
                    box-shadow: 0 2px 4px rgba(0, 0, 0, 0.1);
                }

                .container {
                    max-width: 1000px;
                    margin: 0 auto;
                    padding: 24px 20px;
                }

                .toggle-btn {
                    padding: 10px 20px;
                    border: 1px solid #ddd;
                    background: white;
                    border-radius: 4px;
                    cursor: pointer;
                }

                table {
                    width: 100%;
                    border-collapse: collapse;
                    background: white;
                    margin-bottom: 24px;
                }

                th, td {
                    padding: 8px 10px;
                    text-align: left;
                    border-bottom: 1px solid #ddd;
                }

                th {
                    background-color: #f8f8f8;
                }

                .upcoming {
                    color: #888;
                }
            </style>
        </head>
        <body>
            <div class="header">
                <h1>{{ title }}</h1>
                <button class="toggle-btn" hx-get="/api/refresh" hx-target="#refresh-status">Refresh data</button>
                <span id="refresh-status"></span>
            </div>
            <div class="container">
                <h2>Standings</h2>
                <div hx-get="/api/scoreboard" hx-trigger="load, every 60s">Loading standings...</div>
                <h2>Schedule</h2>
                <div hx-get="/api/schedule" hx-trigger="load, every 60s">Loading schedule...</div>
            </div>
        </body>
        </html>
"""

SCHEDULE_TEMPLATE = """
<table class="schedule">
    <thead>
        <tr><th>Week</th><th>Date</th><th>Time</th><th>Home</th><th>Score</th><th>Away</th><th>Location</th></tr>
    </thead>
    <tbody>
        {% for game in games %}
        <tr class="{{ '' if game.played else 'upcoming' }}">
            <td>{{ game.week }}</td>
            <td>{{ game.date }}</td>
            <td>{{ game.time }}</td>
            <td>{{ game.home_team }}</td>
            <td>{% if game.played %}{{ game.home_score }} - {{ game.away_score }}{% else %}vs{% endif %}</td>
            <td>{{ game.away_team }}</td>
            <td>{{ game.location }}</td>
        </tr>
        {% else %}
        <tr><td colspan="7">No games scheduled yet.</td></tr>
        {% endfor %}
    </tbody>
</table>
"""

SCOREBOARD_TEMPLATE = """
{% for division in standings %}
<h3>{{ division.division }}</h3>
<table class="standings">
    <thead>
        <tr><th>#</th><th>Team</th><th>Record</th><th>SoS</th><th>SoV</th></tr>
    </thead>
    <tbody>
        {% for team in division.teams %}
        <tr>
            <td>{{ team.position }}</td>
            <td>{{ team.team_name }}</td>
            <td>{{ team.record }}</td>
            <td>{{ "%.3f"|format(team.sos) }}</td>
            <td>{{ "%.3f"|format(team.sov) }}</td>
        </tr>
        {% endfor %}
    </tbody>
</table>
{% else %}
<p>No games have been played yet.</p>
{% endfor %}
"""

REFRESH_TEMPLATE = """<span class="refresh-message">{{ message }}</span>"""


def is_htmx_request() -> bool:
    return request.headers.get("HX-Request") == "true"


class LeagueTracker:
    """Flask wrapper around the shared LeagueService."""

    TITLE = "European League Football"

    def __init__(self, service: Optional[LeagueService] = None, settings: Optional[Settings] = None, start_sync: bool = True):
        self.settings = settings or Settings.from_env()
        self.service = service or LeagueService.from_settings(self.settings)
        self.app = Flask(__name__)

        self._setup_routes()
        if start_sync:
            self.service.start()

    # ------------------------------------------------------------------ #
    # Routes
    # ------------------------------------------------------------------ #
    def _setup_routes(self):
        @self.app.after_request
        def add_header(response):
            response.cache_control.no_cache = True
            response.cache_control.must_revalidate = True
            response.cache_control.no_store = True
            return response

        @self.app.errorhandler(StoreError)
        def store_error(exc):
            logger.error("Store error while serving %s: %s", request.path, exc)
            return jsonify({"error": str(exc)}), 500

        @self.app.route("/")
        def dashboard():
            return render_template_string(DASHBOARD_TEMPLATE, title=self.TITLE)

        @self.app.route("/api/schedule")
        def api_schedule():
            games = self.service.get_snapshot()
            if is_htmx_request():
                return render_template_string(SCHEDULE_TEMPLATE, games=games)
            return jsonify([game.to_feed() for game in games])

        @self.app.route("/api/scoreboard")
        def api_scoreboard():
            standings = self.service.get_standings()
            if is_htmx_request():
                return render_template_string(SCOREBOARD_TEMPLATE, standings=standings)
            return jsonify([division.as_dict() for division in standings])

        @self.app.route("/api/refresh")
        def api_refresh():
            return self._acknowledge(self.service.trigger_refresh())

        @self.app.route("/api/mock")
        def api_mock():
            return self._acknowledge(self.service.seed_fallback())

        @self.app.route("/api/status")
        def api_status():
            return jsonify(self.service.status())

    def _acknowledge(self, payload):
        if is_htmx_request():
            return render_template_string(REFRESH_TEMPLATE, message=payload["message"])
        return jsonify(payload)

    def run(self, host="0.0.0.0", port: Optional[int] = None, debug: bool = False):
        if port is None:
            port = self.settings.port
        logger.info("Server starting on :%d", port)
        self.app.run(host=host, port=port, debug=debug, use_reloader=False)


if __name__ == "__main__":
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s")
    tracker = LeagueTracker(settings=settings)
    tracker.run()
