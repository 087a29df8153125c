# run.py
"""
Dev launcher for the assistant API.
Uses watchfiles.run_process to restart on code / corpus changes.
"""
import sys


HOST = "127.0.0.1"
PORT = 8000


def _server():
    """Worker function — runs in each spawned subprocess."""
    import uvicorn
    from shopbot.config import settings

    uvicorn.run(
        "shopbot.main:app",
        host=HOST,
        port=PORT,
        reload=False,       # watchfiles handles restarts, not uvicorn
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    # Hot-reload: watchfiles watches shopbot/ and respawns _server() on changes
    if "--no-reload" in sys.argv:
        _server()
    else:
        try:
            from watchfiles import run_process
            print("🔄  Hot-reload active — watching shopbot/")
            print(f"📡  Server → http://{HOST}:{PORT}")
            run_process(
                "shopbot",
                target=_server,
                watch_filter=lambda _, p: p.endswith((".py", ".yaml", ".json")),
            )
        except ImportError:
            # watchfiles not installed — fallback to no-reload
            print("⚠ watchfiles not found — running without hot-reload")
            _server()
