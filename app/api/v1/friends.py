"""
Friends API endpoints
"""
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.core.dependencies import get_current_user
from app.schemas.social import FriendRequestCreate, FriendScanRequest, FriendshipResponse
from app.services.social_service import (
    OUTCOME_MESSAGES,
    FriendRequestOutcome,
    social_service,
)
from app.utils.responses import success_response

router = APIRouter()


def _request_outcome_response(friendship, outcome: FriendRequestOutcome):
    record = FriendshipResponse.model_validate(friendship).to_json()
    key = "friend" if outcome == FriendRequestOutcome.AUTO_ACCEPTED else "friendRequest"
    return success_response(OUTCOME_MESSAGES[outcome], **{key: record, "outcome": outcome.value})


@router.get("/qr-code")
async def get_qr_code(current_user: User = Depends(get_current_user)):
    """Link encoded in the user's add-friend QR code"""
    return success_response(**social_service.get_qr_code_link(current_user.id).to_json())


@router.post("/request")
async def send_friend_request(
    request: FriendRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Send a friend request; a reciprocal pending request is accepted instead"""
    friendship, outcome = social_service.send_friend_request(db, current_user, request.recipient_id)
    return _request_outcome_response(friendship, outcome)


@router.post("/scan")
async def add_friend_from_qr(
    request: FriendScanRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Send a friend request to the user encoded in a scanned QR code"""
    friendship, outcome = social_service.add_friend_from_qr(db, current_user, request.user_id)
    return _request_outcome_response(friendship, outcome)


@router.get("/requests")
async def get_pending_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get incoming pending friend requests"""
    requests = social_service.get_pending_requests(db, current_user.id)
    return success_response(count=len(requests), requests=[r.to_json() for r in requests])


@router.put("/requests/{request_id}/accept")
async def accept_friend_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Accept a friend request"""
    friendship = social_service.accept_friend_request(db, current_user, request_id)
    return success_response(
        "Friend request accepted",
        friend=FriendshipResponse.model_validate(friendship).to_json(),
    )


@router.put("/requests/{request_id}/reject")
async def reject_friend_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Reject a friend request"""
    friendship = social_service.reject_friend_request(db, current_user, request_id)
    return success_response(
        "Friend request rejected",
        friend=FriendshipResponse.model_validate(friendship).to_json(),
    )


@router.get("")
async def get_friends(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get current user's friends list"""
    friends = social_service.get_friends(db, current_user.id)
    return success_response(count=len(friends), friends=[f.to_json() for f in friends])


@router.delete("/{friendship_id}")
async def remove_friend(
    friendship_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Remove a friend"""
    social_service.remove_friend(db, current_user, friendship_id)
    return success_response("Friend removed")
