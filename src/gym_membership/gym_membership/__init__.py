"""Gym membership package.

Organized by feature modules (members, payments, freeze, checkin, attendance, ...)
with a thin Flask controller layer over service/repository layers. The lifecycle
engine (status, ledger, freeze, check-in gates, absence sweep) never talks to a
concrete store directly.
"""
