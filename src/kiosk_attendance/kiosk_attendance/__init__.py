"""Kiosk Attendance package.

Feature modules (employees, credentials, identity, attendance, leave, ...) keep their
business rules in services and talk to the document store through repositories.
A thin Flask controller layer sits on top for the kiosk and admin clients.
"""
