"""
Mock ZEDLY API.
"""
