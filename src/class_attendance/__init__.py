"""Class Attendance package.

Organized by feature modules (roster, sessions, statistics, reports) with a
thin Flask controller layer on top of service/repository layers.
"""
