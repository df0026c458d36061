"""
Services Module

- auth_service: Login workflow (credential check, principal, session issuance)
- user_store: User record persistence
"""
