import uvicorn
from constants import HOST, LOG_FILE, LOG_LEVEL, PORT
from logging_config import setup_logging

# Setup logging before importing app
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)

from app import app
from logging_config import get_logger

logger = get_logger(__name__)

if __name__ == "__main__":
    logger.info(f"Server running on port {PORT}")
    logger.info(f"Publisher: http://localhost:{PORT}/publisher")
    logger.info(f"Viewer: http://localhost:{PORT}/viewer")
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())
