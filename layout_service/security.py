# layout_service/security.py
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel

ADMIN_GROUP = "Admin"
GROUPS_CLAIM = "cognito:groups"


class SecurityDetails(BaseModel):
    is_authenticated: bool = False
    is_admin: bool = False

    def as_flags(self) -> dict:
        return {"isAuthenticated": self.is_authenticated, "isAdmin": self.is_admin}


def _claim_groups(claims: Mapping[str, Any]) -> List[str]:
    groups = claims.get(GROUPS_CLAIM) or []
    if isinstance(groups, str):
        # API Gateway flattens the list to "Admin,Editors" or "[Admin Editors]"
        groups = groups.strip("[]").replace(",", " ").split()
    if not isinstance(groups, (list, tuple)):
        return []
    return [str(g) for g in groups]


def get_security_details(claims: Optional[Mapping[str, Any]]) -> SecurityDetails:
    """
    Authenticated whenever the authorizer attached claims (even empty ones);
    admin when the groups claim lists "Admin".
    """
    if claims is None:
        return SecurityDetails()
    return SecurityDetails(
        is_authenticated=True,
        is_admin=ADMIN_GROUP in _claim_groups(claims),
    )


def claims_from_event(event: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    authorizer = ((event or {}).get("requestContext") or {}).get("authorizer") or {}
    claims = authorizer.get("claims")
    return claims if isinstance(claims, Mapping) else None
