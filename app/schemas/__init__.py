from app.schemas.auth import Token, UserCreate, UserLogin, UserResponse, ProfileUpdate
from app.schemas.consent import ConsentResponse, AcceptDocumentRequest, MarketingOptInRequest
from app.schemas.friends import MatchCreate, FriendMatchResponse, GroupMembershipResponse
from app.schemas.maintenance import MaintenanceResponse
from app.schemas.requirements import (
    AppFeature,
    BookingRequirementMode,
    BookingRequirements,
    CompanionRequirements,
    EligibilitySnapshot,
    FriendsFeature,
    FriendsStatus,
    ProfileCompletion,
    RequirementCheck,
)
