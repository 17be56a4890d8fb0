"""
HealthConnect+

FastAPI service for booking appointments and online consultations, with
session-based login, medical-report lookup and best-effort email/SMS
confirmations.
"""

__version__ = "1.0.0"
