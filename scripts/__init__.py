"""
Command-line tools for the ZEDLY client.
"""
