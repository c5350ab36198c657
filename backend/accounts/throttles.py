# accounts/throttles.py
"""
Rate limiting classes for authentication endpoints.

These throttles protect against:
- Bot signups (registration)
- Brute force attacks (login)
"""

from rest_framework.throttling import AnonRateThrottle


class RegistrationRateThrottle(AnonRateThrottle):
    """
    Rate limit registration attempts.

    Configured via settings.REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['registration']
    """
    scope = 'registration'


class LoginRateThrottle(AnonRateThrottle):
    """
    Rate limit login attempts.

    Configured via settings.REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['login']
    """
    scope = 'login'
