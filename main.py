#!/usr/bin/env python3
"""
Rancher Scriba - Rancher metadata collector

Main entry point. Runs one collection pass and exits non-zero if it failed.
"""

from rancher_scriba.cli import main


if __name__ == "__main__":
    main()
