from jose import ExpiredSignatureError, JWTError, jwt
from app.config import settings
from app.core.exceptions import UnauthorizedException

JWT_ALGORITHM = "HS256"


def decode_access_token(token: str) -> dict:
    """
    Decode a bearer token minted by the external auth service.

    Only signature, expiry and the presence of a subject are checked here;
    sessions, OTP and password flows live in the auth service itself.

    Raises:
        UnauthorizedException: If the token is invalid, expired or incomplete
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired")
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {e}")

    if claims.get("exp") is None:
        raise UnauthorizedException("Token missing expiration")

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        raise UnauthorizedException("Token missing user identifier")

    return claims


def subject_of(token: str) -> str:
    """Return the owning-user identifier ('sub') carried by the token"""
    return decode_access_token(token)["sub"]
