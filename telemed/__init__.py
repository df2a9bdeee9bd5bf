"""
TeleMed Connect

Browser-facing part of a telemedicine scheduling platform: sign-in and
registration, role-based dashboards for patients and doctors, backed by a
hosted database service that owns persistence, auth and authorization.
"""

__version__ = "1.0.0"
