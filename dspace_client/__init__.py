"""
Async data-access client for DSpace 7.x REST APIs.
"""

from dspace_client.repository import DSpaceRepository

__all__ = ["DSpaceRepository"]
