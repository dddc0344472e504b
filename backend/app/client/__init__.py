"""
Async Python client for the Whisper Box API.

- FeedbackClient: one coroutine per endpoint (httpx)
- UsernameChecker: debounced, latest-wins availability check
- AcceptToggle: optimistic accepting-messages switch
"""
from .api import ApiError, CheckResult, FeedbackClient
from .state import AcceptToggle, UsernameChecker

__all__ = ["ApiError", "CheckResult", "FeedbackClient", "AcceptToggle", "UsernameChecker"]
