"""Shared pytest setup for all tests.

FIXTURE PHILOSOPHY:
- Put INFRASTRUCTURE in tests/mocks (Firestore doubles, fake learner data)
- Keep TEST DATA in test files (criteria, trees, completion records)
"""

from pathlib import Path
import sys


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
