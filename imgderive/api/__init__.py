"""
HTTP API for imgderive: routers, dependencies and error handling.
"""
