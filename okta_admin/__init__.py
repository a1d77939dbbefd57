"""Okta admin client package.

To use the Okta services:
    from okta_admin.core.okta import OktaClient, GroupService, UserService

To load configuration from the environment:
    from okta_admin.config import load_settings
"""

__version__ = "0.3.0"
