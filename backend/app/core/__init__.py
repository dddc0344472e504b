"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and init-once connection management
- errors: Error taxonomy and the {success, message} response envelope
- security: Password hashing, verification codes, session tokens
"""
