from dataclasses import dataclass, replace

from famcare.models.user import User


@dataclass(frozen=True)
class Feature:
    key: str
    name: str
    premium: bool
    requires_family: bool
    assigned_to_user: bool
    order: int
    icon: str
    route: str
    enabled: bool = False


FEATURE_CATALOG: tuple[Feature, ...] = (
    Feature("tasks", "Задачи", False, False, True, 10, "ic_tasks", "app://features/tasks"),
    Feature("medications", "Медикаменты", False, False, True, 20, "ic_pills", "app://features/meds"),
    Feature("blood_pressure", "Давление", False, False, True, 30, "ic_bp", "app://features/bp"),
    Feature("chat", "Чат", False, True, False, 40, "ic_chat", "app://features/chat"),
    Feature(
        "password_manager",
        "Менеджер паролей",
        True,
        False,
        True,
        50,
        "ic_passwords",
        "app://features/passwords",
    ),
)


def is_feature_enabled(feature: Feature, *, has_premium: bool, has_family: bool) -> bool:
    return (not feature.premium or has_premium) and (not feature.requires_family or has_family)


def features_for_user(user: User) -> list[Feature]:
    has_premium = bool(user.is_premium)
    has_family = user.family_id is not None
    personalized = [
        replace(
            feature,
            enabled=is_feature_enabled(feature, has_premium=has_premium, has_family=has_family),
        )
        for feature in FEATURE_CATALOG
    ]
    return sorted(personalized, key=lambda feature: feature.order)
