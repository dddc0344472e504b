"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: account, verification state and inbox preference (aggregate root)
- Message: anonymous message owned by a User
"""
from .user import User
from .message import Message
