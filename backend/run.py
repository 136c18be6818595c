#!/usr/bin/env python3
"""
WeatherHub Backend - Run Script
This script starts the FastAPI backend server
"""

import os
import sys
import subprocess
from pathlib import Path

def print_colored(message, color="blue"):
    """Print colored output"""
    colors = {
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "blue": "\033[94m",
        "reset": "\033[0m"
    }
    print(f"{colors.get(color, '')}{message}{colors['reset']}")

def check_file_exists(filepath, error_message):
    """Check if a file exists"""
    if not Path(filepath).exists():
        print_colored(f"❌ Error: {error_message}", "red")
        sys.exit(1)

def main():
    print_colored("🚀 Starting WeatherHub Backend...", "blue")

    # Check if we're in the backend directory
    check_file_exists("weatherhub/main.py", "weatherhub/main.py not found. Please run this script from the backend directory.")

    # The API key may come from the environment or from a .env file
    has_env_file = Path(".env").exists() or Path("../.env").exists()
    if not has_env_file and not os.environ.get("WEATHER_API_KEY"):
        print_colored("⚠️  Warning: no .env file found and WEATHER_API_KEY is not set.", "yellow")
        print("Please create a .env file with the following variables:")
        print("  WEATHER_API_KEY=your_weatherapi_com_key")
        print("  DATABASE_URL=sqlite+aiosqlite:///./weatherhub.db")
        print("  LOGGER=20")
        sys.exit(1)

    # Check if virtual environment is activated
    if not os.environ.get('VIRTUAL_ENV'):
        print_colored("⚠️  Virtual environment not activated.", "yellow")
        print("Please activate your virtual environment first:")
        print("  source venv/bin/activate  # On macOS/Linux")
        print("  venv\\Scripts\\activate     # On Windows")
        sys.exit(1)

    # Start the server
    print_colored("✅ All checks passed!", "green")
    print_colored("🌐 Starting Uvicorn server...", "blue")
    print("📍 Backend will be available at: http://localhost:8000")
    print("📍 API Health check: http://localhost:8000/health")
    print("📍 API Documentation: http://localhost:8000/docs")
    print()
    print("Press Ctrl+C to stop the server")
    print()

    # Run uvicorn with auto-reload for development
    try:
        subprocess.run([
            sys.executable, "-m", "uvicorn",
            "weatherhub.main:app",
            "--reload",
            "--host", "0.0.0.0",
            "--port", "8000"
        ], check=True)
    except KeyboardInterrupt:
        print_colored("\n👋 Backend server stopped.", "yellow")
    except subprocess.CalledProcessError as e:
        print_colored(f"\n❌ Error starting server: {e}", "red")
        sys.exit(1)

if __name__ == "__main__":
    main()
