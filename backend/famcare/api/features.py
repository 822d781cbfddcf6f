from fastapi import APIRouter, Depends

from famcare.api.deps import get_current_user
from famcare.core.logger import current_request_id
from famcare.models.user import User
from famcare.schemas.feature import FeatureItem, FeaturesResponse
from famcare.services.feature_service import features_for_user

router = APIRouter(prefix="/features", tags=["features"])


@router.get("", response_model=FeaturesResponse)
async def list_features(current_user: User = Depends(get_current_user)) -> FeaturesResponse:
    return FeaturesResponse(
        feature_list=[
            FeatureItem(
                key=feature.key,
                name=feature.name,
                premium=feature.premium,
                requires_family=feature.requires_family,
                assigned_to_user=feature.assigned_to_user,
                enabled=feature.enabled,
                order=feature.order,
                icon=feature.icon,
                route=feature.route,
            )
            for feature in features_for_user(current_user)
        ],
        request_id=current_request_id(),
    )
