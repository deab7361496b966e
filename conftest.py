"""
Pytest configuration for leasecore.

Ensures the project root is on sys.path so tests can import the package
without an editable install.
"""
import sys
from pathlib import Path

project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
