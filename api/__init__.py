"""
FastAPI application for the company overview import system.

This package contains the REST API and WebSocket server for uploading
buyer company overview spreadsheets and tracking background import jobs.
"""

__version__ = "1.0.0"
