"""Main FastAPI application for the Display Hub."""

import logging
import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv('.env')

# Configure logging BEFORE importing any modules that use logger
log_level = os.getenv('LOG_LEVEL', 'INFO')
logging.basicConfig(
    level=getattr(logging, log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Import after logging is configured
from hub.constants import DEFAULT_HOST, DEFAULT_PORT
from hub.server import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host=DEFAULT_HOST, port=DEFAULT_PORT)
