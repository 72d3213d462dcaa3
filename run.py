#!/usr/bin/env python3
"""
Bank Ledger Entry Point

Starts the FastAPI server with an in-memory ledger. Host and port come
from LEDGER_API_HOST / LEDGER_API_PORT (defaults 0.0.0.0:8090).
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from bank_ledger.api import run_server


if __name__ == "__main__":
    print("🏦 Starting Bank Ledger...")
    print("💰 All amounts use Decimal precision")
    print("📚 Documentation at: http://localhost:8090/docs")
    print()

    try:
        run_server(debug=False)
    except KeyboardInterrupt:
        print("\n👋 Shutting down Bank Ledger...")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
