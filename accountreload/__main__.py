#!/usr/bin/env python3
"""
Enable running accountreload commands via: python -m accountreload

Usage:
    python -m accountreload doctor [--json] [--service NAME]
"""

import sys


def main():
    """Route to the requested command."""
    if len(sys.argv) > 1 and sys.argv[1] == "doctor":
        from accountreload.doctor import main as doctor_main

        sys.exit(doctor_main(sys.argv[2:]))

    from accountreload.__version__ import __version__

    print(f"accountreload {__version__}")
    print("usage: python -m accountreload doctor [--json] [--service NAME]")
    sys.exit(2)


if __name__ == "__main__":
    main()
