"""Memberships Router - purchase, renewal, edit and bulk extension"""
from datetime import date

from fastapi import APIRouter, Depends, Request, status

from app.core.dependencies import get_store, get_today
from app.core.limits import limiter
from app.core.store import StudioStore
from app.studio.crud.memberships import (
    bulk_extend,
    create_membership,
    renew_membership,
    update_membership,
)
from app.studio.schemas.memberships import (
    BulkExtendRequest,
    BulkExtendResponse,
    MembershipPurchase,
    MembershipRead,
    MembershipUpdate,
)

router = APIRouter(prefix="/memberships", tags=["Memberships"])


@router.post("/", response_model=MembershipRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def create_new_membership(
    request: Request,
    body: MembershipPurchase,
    store: StudioStore = Depends(get_store),
):
    """
    Issue a membership computed from the start date.

    Existing memberships of the student are not touched.
    """
    return create_membership(
        store,
        body.student_id,
        body.pass_id,
        body.start_date,
        body.payment_date,
        body.payment_method,
        body.cash_receipt_issued,
    )


@router.post("/renew", response_model=MembershipRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def renew_student_membership(
    request: Request,
    body: MembershipPurchase,
    store: StudioStore = Depends(get_store),
):
    """
    Re-register a student.

    The new end date is chained from the latest existing end date when that
    keeps coverage continuous, otherwise counted from the new start date.
    """
    return renew_membership(
        store,
        body.student_id,
        body.pass_id,
        body.start_date,
        body.payment_date,
        body.payment_method,
        body.cash_receipt_issued,
    )


@router.patch("/{membership_id}", response_model=MembershipRead)
@limiter.limit("30/minute")
async def edit_membership(
    request: Request,
    membership_id: str,
    body: MembershipUpdate,
    store: StudioStore = Depends(get_store),
):
    """
    Edit a membership.

    Changing the pass or start date recomputes the end date. Send both hold
    dates to apply a hold on top of the recomputed window.
    """
    return update_membership(store, membership_id, body.model_dump(exclude_unset=True))


@router.post("/bulk-extend", response_model=BulkExtendResponse)
@limiter.limit("5/minute")
async def bulk_extend_memberships(
    request: Request,
    body: BulkExtendRequest,
    store: StudioStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """
    Extend all memberships of every active (not expired, not on hold) student.

    A dated remark with the reason is appended to each affected student.
    """
    return bulk_extend(store, body.days, body.reason, today)
