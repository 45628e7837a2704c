"""
Dashboard ASGI entry point.

Run with:
    uvicorn main:app --host 0.0.0.0 --port 3000
Or:
    python main.py
"""

import dotenv

dotenv.load_dotenv()

import uvicorn  # noqa: E402

from dashboard.app import create_app  # noqa: E402

app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=3000, log_config=None)
