"""
HTTP preview service.
"""
