"""
Component Test Layer Configuration

Structure:
    tests/component/
    └── frame/       FastAPI app with a temp data dir and recorded device calls

Usage:
    pytest tests/component -v
    pytest tests/component -m component -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def pytest_collection_modifyitems(config, items):
    """Mark everything under tests/component as a component test"""
    component_dir = os.path.dirname(os.path.abspath(__file__))
    for item in items:
        if str(item.fspath).startswith(component_dir):
            item.add_marker(pytest.mark.component)
