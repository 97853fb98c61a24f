from .limiter import FixedWindowRateLimiter, RateLimiters

__all__ = ['FixedWindowRateLimiter', 'RateLimiters']
