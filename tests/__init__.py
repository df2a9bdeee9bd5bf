"""
Test suite for TeleMed Connect.

The hosted backend is replaced by an in-process stub (see backend_stub.py).
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
