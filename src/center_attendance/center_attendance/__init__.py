"""Center Attendance package.

Organized by feature modules (codes, attendance, notifications, staff, ...)
with a thin Flask controller layer over service/repository layers.
"""
