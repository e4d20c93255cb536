"""Attendance engine package.

Organized by feature modules (attendance, leaves, settings, summary, ...)
with a thin Flask controller layer over service/repository layers.
Check-in/check-out admission is decided from one trusted clock.
"""
