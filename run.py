#!/usr/bin/env python3
"""
runmark - inline markdown to styled terminal text

Simple usage:
    python run.py render "This is **bold** and *italic*"
    python run.py runs "a [link](https://example.com) b" --json
    echo "`code` here" | python run.py render
"""

import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from runmark.cli import app

if __name__ == "__main__":
    app()
