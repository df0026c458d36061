# portal/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- authorization: Fallback policy middleware and allowlist
- bootstrap: Admin account reseed at startup
- db: Database configuration, connection management and storage retry
- errors: Error taxonomy
- key_ring: Persisted signing keys for session cookies
- security: Password hashing and redirect target validation
- session_codec: Session cookie encoding and validation
"""
