from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lectro.api.deps import get_db, require_roles
from lectro.models.swap_request import SwapStatus
from lectro.models.user import User, UserRole
from lectro.schemas.swap import SwapRequestCreate, SwapRequestOut, SwapRespond, SwapRespondOut, SwapSummaryOut
from lectro.services.swaps import (
    acting_role_for,
    create_swap_request,
    list_pending_swaps,
    list_requested_swaps,
    respond_to_swap,
)

router = APIRouter()


@router.post("/swaps", response_model=SwapRequestOut, status_code=status.HTTP_201_CREATED)
def request_swap(
    payload: SwapRequestCreate,
    current_user: User = Depends(require_roles(UserRole.lecturer)),
    db: Session = Depends(get_db),
) -> SwapRequestOut:
    swap = create_swap_request(db, requester=current_user, payload=payload)
    db.commit()
    db.refresh(swap)
    return swap


@router.get("/swaps/pending", response_model=list[SwapSummaryOut])
def my_pending_swaps(
    current_user: User = Depends(require_roles(UserRole.lecturer, UserRole.hod)),
    db: Session = Depends(get_db),
) -> list[SwapSummaryOut]:
    return list_pending_swaps(db, user=current_user)


@router.get("/swaps/mine", response_model=list[SwapSummaryOut])
def my_requested_swaps(
    current_user: User = Depends(require_roles(UserRole.lecturer)),
    db: Session = Depends(get_db),
) -> list[SwapSummaryOut]:
    return list_requested_swaps(db, user=current_user)


@router.patch("/swaps/{swap_id}/respond", response_model=SwapRespondOut)
def respond_swap(
    swap_id: str,
    payload: SwapRespond,
    current_user: User = Depends(require_roles(UserRole.lecturer, UserRole.hod)),
    db: Session = Depends(get_db),
) -> SwapRespondOut:
    outcome = respond_to_swap(
        db,
        swap_id=swap_id,
        actor=acting_role_for(current_user),
        decision=SwapStatus(payload.status),
        acting_user=current_user,
    )
    db.commit()
    db.refresh(outcome.swap)
    return SwapRespondOut(
        success=True,
        message=outcome.message,
        swap_id=outcome.swap.id,
        target_status=outcome.swap.target_status,
        hod_status=outcome.swap.hod_status,
    )
