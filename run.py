#!/usr/bin/env python
"""
Entry point for running Vigil.

This script sets up the Python path and runs the Vigil tool server.
"""

import sys
import os
from pathlib import Path

# Add src directory to Python path
project_root = Path(__file__).parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

from dotenv import load_dotenv
import uvicorn

# Load environment variables
load_dotenv()

# Configure logging before importing application modules
from vigil.logging_config import configure_logging
configure_logging()

# Import and run the application
from vigil import __version__
from vigil.config import Settings
from vigil.main import app, tool_executor


def main():
    """Run the Vigil server."""
    settings = Settings.from_env()

    print("""
╔══════════════════════════════════════════════════════════════╗
║                    Vigil v{:<34}║
║            Repository Incident Tools for Agents              ║
╚══════════════════════════════════════════════════════════════╝

📋 Configuration:
   - GitHub API: {}
   - Raw host: {}
   - Tools: {}

🌐 Starting server...
    """.format(
        __version__,
        settings.github_api_url,
        settings.github_raw_host,
        ", ".join(tool_executor.get_tool_names())
    ))

    # Check for required environment variables
    missing_vars = settings.missing_variables()

    if missing_vars:
        print(f"⚠️  Warning: Missing environment variables: {', '.join(missing_vars)}")
        print("   Please set them in your .env file\n")

    # Get host and port from environment or use defaults
    host = os.getenv("VIGIL_HOST", "127.0.0.1")
    port = int(os.getenv("VIGIL_PORT", "8000"))

    print(f"🚀 Server starting on http://{host}:{port}")
    print(f"🧰 Tool list: http://{host}:{port}/tools")
    print(f"💚 Health check: http://{host}:{port}/health\n")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )


if __name__ == "__main__":
    main()
