"""
Mock servers used by integration tests and local development.
"""
