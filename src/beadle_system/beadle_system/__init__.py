"""Electronic Beadle Slip system package.

This package is organized by feature modules (users, roles, sessions, access,
slips) with a thin Flask controller layer and service/repository layers.
"""
