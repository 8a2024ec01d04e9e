"""Route gating endpoint.

GET /navigation?path=/dashboard asks whether the client may render a page
or must redirect first. Works without a session: anonymous callers get the
same answer the guard gives a signed-out user.
"""

from typing import Annotated

from fastapi import APIRouter, Query

from smartapply.api.deps import OptionalSession
from smartapply.core.responses import DataResponse
from smartapply.schemas.navigation import NavigationDecisionResponse
from smartapply.services.route_guard import RouteGuard

router = APIRouter()


@router.get("")
async def check_navigation(
    session: OptionalSession,
    path: Annotated[str, Query(min_length=1, max_length=500)],
    requires_profile: Annotated[bool | None, Query(alias="requiresProfile")] = None,
) -> DataResponse[NavigationDecisionResponse]:
    """Decide a navigation to ``path``.

    Args:
        path: Requested client path (query string and fragment ignored).
        requires_profile: Force or waive the complete-profile requirement.
            Omitted: use the route table. Ignored for admin paths.
    """
    if session is None:
        guard = RouteGuard(None, None)
    else:
        guard = session.workspace.guard(session.auth)

    decision = guard.evaluate_path(path, requires_profile=requires_profile)
    return DataResponse(data=NavigationDecisionResponse.from_decision(decision))
