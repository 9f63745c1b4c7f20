#!/usr/bin/env python3
"""
Picking Tracker Backend Startup Script
Checks the environment before handing over to uvicorn
"""

import os
import sys
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

REQUIRED_VARS = ["DATABASE_URL", "SECRET_KEY"]

def check_environment():
    """Check if all required environment variables are set"""
    missing_vars = [var for var in REQUIRED_VARS if not os.getenv(var)]

    if missing_vars:
        logger.error(f"❌ Missing environment variables: {missing_vars}")
        return False

    logger.info("✅ All required environment variables are set")
    return True

def start_server():
    """Start the FastAPI server"""
    try:
        import uvicorn
        from config import settings
        from main import app

        logger.info(f"🚀 Starting Picking Tracker Backend on {settings.HOST}:{settings.PORT}")

        uvicorn.run(
            app,
            host=settings.HOST,
            port=settings.PORT,
            log_level="info"
        )

    except Exception as e:
        logger.error(f"❌ Failed to start server: {e}")
        sys.exit(1)

def main():
    """Main startup function"""
    logger.info("📦 Picking Tracker Backend - Starting Up...")

    # The signing secret has no fallback value
    if not check_environment():
        logger.error("❌ Environment check failed")
        sys.exit(1)

    start_server()

if __name__ == "__main__":
    main()
