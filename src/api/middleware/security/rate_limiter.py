from datetime import datetime, timedelta
from typing import Dict, Tuple, Optional
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.infra.config.settings import get_settings
from src.core.logger.logger import get_logger
from src.core.exceptions.handler import ServiceErrorCode
from src.api.models.error_responses import RateLimitErrorResponse, ErrorDetail

logger = get_logger(__name__)
settings = get_settings()

LOGIN_PATH = "/admin/login"
EXEMPT_PATHS = ("/", "/api/v1/health", "/docs", "/redoc", "/openapi.json")


class RateLimiter:
    """In-memory per-IP rate limiter with endpoint-specific limits and login lockout."""

    def __init__(self):
        # Request tracking: bucket (login path or 'default') -> IP -> timestamps
        self.endpoint_requests: Dict[str, Dict[str, list]] = {}
        self.blocked_ips: Dict[str, datetime] = {}  # IP -> Unblock time
        self.failed_attempts: Dict[str, Tuple[int, datetime]] = {}  # IP -> (count, first_attempt)

        # Endpoint-specific rate limits (requests per minute)
        self.endpoint_limits = {
            LOGIN_PATH: settings.RATE_LIMIT_ADMIN_LOGIN,
            'default': settings.RATE_LIMIT_DEFAULT
        }

    def is_rate_limited(self, ip: str, endpoint: str) -> Tuple[bool, int, int, Optional[datetime]]:
        """
        Check if IP is rate limited for specific endpoint.
        Returns: (is_limited, current_count, limit, reset_time)
        """
        now = datetime.utcnow()

        # Check if IP is blocked
        if ip in self.blocked_ips:
            if now < self.blocked_ips[ip]:
                return True, 0, 0, self.blocked_ips[ip]
            else:
                del self.blocked_ips[ip]

        bucket = self._bucket(endpoint)
        limit = self.endpoint_limits[bucket]
        requests = self.endpoint_requests.setdefault(bucket, {})

        # Clean old requests (older than 1 minute); idle IPs are dropped entirely
        if ip in requests:
            recent = [ts for ts in requests[ip] if now - ts < timedelta(minutes=1)]
            if recent:
                requests[ip] = recent
            else:
                del requests[ip]

        current_count = len(requests.get(ip, []))

        # Calculate reset time (next minute boundary)
        reset_time = now.replace(second=0, microsecond=0) + timedelta(minutes=1)

        return current_count >= limit, current_count, limit, reset_time

    def _bucket(self, endpoint: str) -> str:
        """Paths with their own limit get their own bucket; all others share 'default'."""
        return endpoint if endpoint in self.endpoint_limits else 'default'

    def add_request(self, ip: str, endpoint: str):
        bucket = self._bucket(endpoint)
        self.endpoint_requests.setdefault(bucket, {}).setdefault(ip, []).append(datetime.utcnow())

    def record_failed_attempt(self, ip: str):
        """Record failed login attempt and block IP if suspicious."""
        now = datetime.utcnow()

        if ip not in self.failed_attempts:
            self.failed_attempts[ip] = (1, now)
            return

        count, first_attempt = self.failed_attempts[ip]
        if now - first_attempt < timedelta(minutes=5):
            if count + 1 >= settings.SUSPICIOUS_IP_THRESHOLD:
                self.block_ip(ip)
                del self.failed_attempts[ip]
            else:
                self.failed_attempts[ip] = (count + 1, first_attempt)
        else:
            # Reset counter after 5 minutes
            self.failed_attempts[ip] = (1, now)

    def block_ip(self, ip: str):
        """Block IP for suspicious activity."""
        self.blocked_ips[ip] = datetime.utcnow() + timedelta(minutes=settings.IP_BLOCK_DURATION)
        logger.warning(f"IP {ip} has been blocked for {settings.IP_BLOCK_DURATION} minutes due to repeated failed logins")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware with endpoint-specific limits and standardized error bodies."""

    def __init__(self, app):
        super().__init__(app)
        self.rate_limiter = RateLimiter()

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP, handling proxies."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # Take the first IP in the chain
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

        return request.client.host if request.client else "unknown"

    def _create_rate_limit_response(self, current_count: int, limit: int, reset_time: datetime, retry_after: int) -> Response:
        error_response = RateLimitErrorResponse(
            error=ErrorDetail(
                code=ServiceErrorCode.RATE_LIMIT_EXCEEDED,
                message=f"Rate limit exceeded. Maximum {limit} requests per minute.",
                details=f"Current count: {current_count}/{limit}. Try again after {retry_after} seconds."
            ),
            retry_after=retry_after,
            limit=limit,
            remaining=max(0, limit - current_count),
            reset_time=reset_time
        )

        response = Response(
            content=error_response.model_dump_json(),
            media_type="application/json",
            status_code=429
        )
        response.headers["Retry-After"] = str(retry_after)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - current_count))
        response.headers["X-RateLimit-Reset"] = str(int(reset_time.timestamp()))
        return response

    def _create_ip_blocked_response(self, reset_time: datetime) -> Response:
        retry_after = max(0, int((reset_time - datetime.utcnow()).total_seconds()))

        error_response = RateLimitErrorResponse(
            error=ErrorDetail(
                code=ServiceErrorCode.IP_BLOCKED,
                message="IP temporarily blocked due to repeated failed logins",
                details=f"IP will be unblocked in {retry_after} seconds"
            ),
            retry_after=retry_after,
            limit=0,
            remaining=0,
            reset_time=reset_time
        )

        response = Response(
            content=error_response.model_dump_json(),
            media_type="application/json",
            status_code=403
        )
        response.headers["Retry-After"] = str(retry_after)
        return response

    async def dispatch(self, request: Request, call_next) -> Response:
        # Skip rate limiting for CORS preflight requests and health checks
        if request.method == "OPTIONS" or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        ip = self._get_client_ip(request)
        endpoint = request.url.path

        is_limited, current_count, limit, reset_time = self.rate_limiter.is_rate_limited(ip, endpoint)

        if is_limited:
            if ip in self.rate_limiter.blocked_ips:
                logger.warning(f"Blocked request from IP {ip} to {endpoint}")
                return self._create_ip_blocked_response(reset_time)
            logger.warning(f"Rate limit exceeded for IP {ip} on {endpoint}: {current_count}/{limit}")
            return self._create_rate_limit_response(current_count, limit, reset_time, retry_after=60)

        self.rate_limiter.add_request(ip, endpoint)

        response = await call_next(request)

        # Failed admin logins count towards the IP lockout
        if endpoint == LOGIN_PATH and response.status_code in (401, 403):
            self.rate_limiter.record_failed_attempt(ip)
            logger.info(f"Recorded failed login attempt from IP {ip}")

        if response.status_code < 400:
            response.headers["X-RateLimit-Limit"] = str(limit)
            response.headers["X-RateLimit-Remaining"] = str(max(0, limit - current_count - 1))
            response.headers["X-RateLimit-Reset"] = str(int(reset_time.timestamp()))

        return response
