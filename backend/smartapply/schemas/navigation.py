"""Navigation decision schemas."""

from typing import Literal

from pydantic import BaseModel

from smartapply.services.route_guard import NavigationDecision


class NavigationDecisionResponse(BaseModel):
    """Render the requested page, or redirect to ``redirect_to``."""

    outcome: Literal["render", "redirect"]
    path: str
    redirect_to: str | None = None
    reason: str

    @classmethod
    def from_decision(cls, decision: NavigationDecision) -> "NavigationDecisionResponse":
        return cls(
            outcome=decision.outcome.value,
            path=decision.path,
            redirect_to=decision.redirect_to,
            reason=decision.reason,
        )
