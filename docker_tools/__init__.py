"""
docker-tools — install, upgrade and remove a container engine and its
companion tools from prioritized network mirrors.
"""

__version__ = "0.1.0"
