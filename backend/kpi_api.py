"""Read-only HTTP view over the KPI log."""

import logging
import sqlite3

from flask import Flask, jsonify, request

from config import CONFIG
from persistence import latest_kpis

logger = logging.getLogger(__name__)


def create_app(db_path=None):
    app = Flask(__name__)
    app.config["DATABASE"] = db_path or CONFIG.persistence.db_path

    @app.route("/api/latest_stats")
    def latest_stats():
        """Provides the most recent KPI row."""
        try:
            rows = latest_kpis(1, app.config["DATABASE"])
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}")
            return jsonify({"error": "Database error occurred"}), 500

        if rows:
            return jsonify(rows[0])
        return jsonify({"error": "No data found in kpis table"}), 404

    @app.route("/api/history")
    def history():
        """The last N days of KPIs, oldest first (?limit=, default 30)."""
        limit = request.args.get("limit", default=CONFIG.time.history_length, type=int)
        if limit is None or limit <= 0:
            return jsonify({"error": "limit must be a positive integer"}), 400
        try:
            rows = latest_kpis(limit, app.config["DATABASE"])
        except sqlite3.Error as e:
            logger.error(f"Database error: {e}")
            return jsonify({"error": "Database error occurred"}), 500
        return jsonify(list(reversed(rows)))

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting Flask server at http://127.0.0.1:5000/api/latest_stats")
    create_app().run(debug=True, port=5000)
