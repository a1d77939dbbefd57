"""Core client logic, independent of any interface.

Module Structure:
    - okta/ : Okta API client (transport, models, groups and users services)
"""
