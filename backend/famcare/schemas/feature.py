from pydantic import BaseModel


class FeatureItem(BaseModel):
    key: str
    name: str
    premium: bool
    requires_family: bool
    assigned_to_user: bool
    enabled: bool
    order: int
    icon: str
    route: str


class FeaturesResponse(BaseModel):
    feature_list: list[FeatureItem]
    code: int = 0
    description: str = "Feature list"
    request_id: str
