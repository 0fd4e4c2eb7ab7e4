#!/usr/bin/env python3
"""
Convenience script to run the amendment engine test suite.
Run this from the project root directory.
"""

import subprocess
import sys
from pathlib import Path


def run_test_suite(extra_args):
    """Run pytest on the tests directory."""
    project_root = Path(__file__).parent
    tests_dir = project_root / "tests"

    if not tests_dir.exists():
        print(f"❌ Tests directory not found at: {tests_dir}")
        return False

    print("🚀 Running amendment engine tests...")
    print(f"📍 Tests: {tests_dir}")
    print("=" * 60)

    try:
        subprocess.run(
            [sys.executable, "-m", "pytest", str(tests_dir), *extra_args],
            cwd=project_root,
            check=True,
        )
        print("=" * 60)
        print("✅ All tests passed!")
        return True

    except subprocess.CalledProcessError as e:
        print("=" * 60)
        print(f"❌ Tests failed with exit code: {e.returncode}")
        return False


def main():
    """Main entry point; extra arguments are passed to pytest."""
    print("🔬 Amendment Engine Test Runner")
    print("=" * 60)

    success = run_test_suite(sys.argv[1:])
    if not success:
        print("\n🔧 Install the test extra first: pip install -e '.[test]'")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
