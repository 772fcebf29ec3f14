#!/usr/bin/env python3
"""
Project-level CLI launcher.

Usage:
    python bookshelf_cli.py [--db PATH] [--user NAME --password PW] <command> [options]
"""

from bookshelf.cli.main import cli


if __name__ == "__main__":
    raise SystemExit(cli())
