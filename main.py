#!/usr/bin/env python3
"""
memdbgvis - main entrypoint
Runs the memdbgvis command line tools without installing the package.

Usage:
    python main.py listen --agent /opt/agent/inspector.so
    python main.py metrics
    python main.py trigger --agent /opt/agent/inspector.so --line 42
"""

import sys
import os

# Add project root directory to the import path
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)

from memdbgvis.cli import main_cli


if __name__ == "__main__":
    sys.exit(main_cli())
