"""
ZEDLY client gateway.

The client side of a ZEDLY session: an authenticated request gateway that
injects bearer credentials into same-origin API calls and renews an expired
access credential once per call, sharing a single in-flight renewal across
concurrent callers.

Structure:
- app.main: ZedlyClient composition root.
- app.gateway: Endpoint rules, renewal and the gateway itself.
- app.transport: Request descriptor and httpx transport.
- app.storage: Credential storage backends.
- app.session: Login, password change, logout and navigation.
"""
