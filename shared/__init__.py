"""
Shared utilities for the ZEDLY client gateway.

This package aggregates common building blocks consumed by the client
packages, the CLI and the mock API:

- config: Client configuration via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- test_helpers: Factories for users, tokens and canned responses

Any cross-package logic should live here to avoid import cycles. Do not
import from client_gateway into shared/.
"""
