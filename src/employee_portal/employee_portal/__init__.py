"""Employee Portal package.

Organized by feature modules (roles, employees, notifications, ...) with a thin
Flask controller layer on top of service/repository layers.
"""
