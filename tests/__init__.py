"""
NIGHTPLAN Test Suite

Test Organization:
    tests/
    ├── __init__.py          # This file
    ├── conftest.py          # Shared fixtures (site, night window, clock)
    ├── fixtures/            # Fake oracles and clocks
    └── unit/                # Unit tests (no network, no ephemeris files)

Running Tests:
    # Run all tests
    pytest tests/

    # Run with coverage
    pytest tests/ --cov=services --cov=nightplan --cov-report=html

Requirements:
    pip install -e ".[test]"
"""
