"""TaskPulse package.

This package is organized by feature modules (users, otp, reports, ...)
with a thin Flask controller layer and service/repository layers.
"""
