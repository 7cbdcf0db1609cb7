"""
Registration Admin Router

Maintenance endpoints. All endpoints require an admin caller.

Endpoints:
- POST /admin/maintenance/reconcile-membership - Run membership reconciliation now
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_admin
from app.core.database import get_db
from app.core.security import CallerIdentity
from app.modules.registrations.jobs import reconcile_membership_with_session
from app.modules.registrations.schemas import ReconcileResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/reconcile-membership",
    response_model=ReconcileResponse,
    summary="Reconcile Membership",
    description="""
Recompute every chapter's member count and every student's chapter list
from approved registration requests, and report what changed. This is the
same work the scheduled reconciliation job does.

**Access:** Admin only
""",
)
async def reconcile_membership(
    db: AsyncSession = Depends(get_db),
    admin: CallerIdentity = Depends(get_current_admin),
) -> ReconcileResponse:
    try:
        results = await reconcile_membership_with_session(db)
    except Exception as e:
        logger.exception(f"Error reconciling membership: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to reconcile membership", "details": str(e)},
        ) from e

    logger.info(
        f"Admin {admin.email} reconciled membership: "
        f"{results['chapters_fixed']} chapter(s), {results['users_fixed']} user(s) fixed"
    )
    return ReconcileResponse(**results)
