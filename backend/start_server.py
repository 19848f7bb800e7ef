#!/usr/bin/env python3
"""
Startup script for the Smart Warehouse backend
"""
import os
import sys
from pathlib import Path

# Get the directory where this script is located
backend_dir = Path(__file__).parent.absolute()

# Change to backend directory
os.chdir(backend_dir)

# Add backend directory to Python path
sys.path.insert(0, str(backend_dir))


def main():
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5055"))
    print(f"🚀 Starting server on http://{host}:{port}")

    uvicorn.run(
        "app:app",  # Import string instead of app instance for reload
        host=host,
        port=port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
