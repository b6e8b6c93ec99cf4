from shortlink.core.config import EXIT_FLUSH_SIGNALS, HOST, PORT
from shortlink.core.logging_config import setup_logging
from shortlink.main import create_app

setup_logging()
app = create_app(shutdown_signals=EXIT_FLUSH_SIGNALS)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
