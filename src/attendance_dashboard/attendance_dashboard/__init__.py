"""Attendance dashboard engine.

The package is organized by feature modules (attendance, reports) with a thin
Flask controller on top of async service objects talking to the remote
time-sheets API.
"""
