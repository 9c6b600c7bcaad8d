"""
Shared module for common utilities used by the REST API and the CLI.

STRUCTURE:
- shared.security: Authentication, authorization, rate limiting
  - auth.py: Session JWTs, current_user_context, require_roles, require_account
  - password.py: Bcrypt hashing for passwords and PINs
  - rate_limit.py: slowapi limiter for login and OTP endpoints

- shared.infrastructure: Database and request correlation
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: X-Request-ID middleware

- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging
  - constants.py: Roles, OrderStatus, MenuCategory, limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Input validation, SSRF prevention
  - schemas.py: Pydantic request/response schemas
  - geo.py: Haversine distance and bounding boxes
  - otp.py: Numeric codes and expiry

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, current_user_context
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import Role, OrderStatus
    from shared.utils.exceptions import NotFoundError, ForbiddenError
    from shared.utils.geo import haversine_km
"""
