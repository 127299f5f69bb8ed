"""
Stellar AR - Command line entry point.

Run with:
    python -m stellar_ar run --source simulated
"""

from .cli import main

if __name__ == "__main__":
    main()
