#!/usr/bin/env python3
"""Test runner script for the SoapBox Bible verse store."""
import subprocess
import sys
import os

UNIT_ARGS = ["tests/", "-m", "not integration", "--tb=short"]
INTEGRATION_ARGS = ["tests/integration/", "-m", "integration", "--tb=short"]
COVERAGE_ARGS = [
    "tests/", "-m", "not integration",
    "--cov=soapbox_bible",
    "--cov-report=term-missing",
    "--cov-report=html:htmlcov",
]


def _pytest(title, args):
    print(f"🧪 {title}")
    print("=" * (len(title) + 3))
    return subprocess.run([sys.executable, "-m", "pytest", "-v", *args]).returncode


def run_unit_tests():
    return _pytest("Unit Tests (mocked database)", UNIT_ARGS)


def run_integration_tests():
    """Integration tests need PostgreSQL via DATABASE_URL or .env.test."""
    if not os.getenv("DATABASE_URL") and not os.path.exists(".env.test"):
        print("⚠️  No DATABASE_URL and no .env.test; integration tests will skip")
    return _pytest("Integration Tests (PostgreSQL)", INTEGRATION_ARGS)


def run_all_tests():
    unit_result = run_unit_tests()
    if unit_result != 0:
        print("❌ Unit tests failed, skipping integration tests")
        return unit_result

    integration_result = run_integration_tests()
    if integration_result != 0:
        print(f"\n❌ Integration tests failed ({integration_result})")
        return 1
    print("\n🎉 All tests passed!")
    return 0


def run_coverage():
    result = _pytest("Unit Tests with Coverage", COVERAGE_ARGS)
    if result == 0:
        print("\n📊 Coverage report: htmlcov/index.html")
    return result


MODES = {
    "unit": (run_unit_tests, "unit tests only (fast)"),
    "integration": (run_integration_tests, "integration tests against PostgreSQL"),
    "all": (run_all_tests, "unit tests, then integration tests"),
    "coverage": (run_coverage, "unit tests with coverage report"),
}


def main():
    if len(sys.argv) < 2 or sys.argv[1].lower() not in MODES:
        print(f"Usage: python run_tests.py [{'|'.join(MODES)}]")
        for name, (_, description) in MODES.items():
            print(f"  {name:<12}{description}")
        sys.exit(1)

    os.chdir(os.path.dirname(os.path.abspath(__file__)))
    runner, _ = MODES[sys.argv[1].lower()]
    sys.exit(runner())


if __name__ == "__main__":
    main()
