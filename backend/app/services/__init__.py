"""
Services Module

Business operations and clients for external services:
- accounts: registration, verification, authentication
- inbox: anonymous submission and owner dashboard operations
- mailer: verification email (Resend)
- suggestions: streamed message ideas (OpenAI-compatible completion API)
"""
