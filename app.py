"""Development entrypoint: `python app.py` or `flask --app app run`."""

import os

from src.center_attendance.center_attendance.main import create_app

app = create_app()


if __name__ == "__main__":
    app.run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5000")),
        debug=bool(app.config.get("DEBUG")),
        # Scheduler threads must not start twice under the reloader.
        use_reloader=False,
        threaded=True,
    )
