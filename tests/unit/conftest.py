"""
Unit Test Layer Configuration

Structure:
    tests/unit/
    └── frame/       Frame service: primitives, models, file store,
                     schedule, playlist engine, device protocol

Usage:
    pytest tests/unit -v
    pytest tests/unit -m unit -v
"""
import os
import sys

import pytest

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def pytest_collection_modifyitems(config, items):
    """Mark everything under tests/unit as a unit test"""
    unit_dir = os.path.dirname(os.path.abspath(__file__))
    for item in items:
        if str(item.fspath).startswith(unit_dir):
            item.add_marker(pytest.mark.unit)
